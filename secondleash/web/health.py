"""Health check endpoint logic."""

from __future__ import annotations

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from secondleash.config.settings import get_settings

logger = structlog.get_logger(__name__)

VERSION = "0.1.0"


async def check_health() -> dict[str, object]:
    """Return application health status, probing the database when it is enabled."""
    settings = get_settings()
    result: dict[str, object] = {
        "status": "healthy",
        "version": VERSION,
        "store": "database" if settings.use_database else "memory",
        "database": "disabled",
    }
    if not settings.use_database:
        return result

    try:
        from secondleash.storage.database import get_engine

        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        result["database"] = "connected"
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("health_check_db_failed", error=str(exc))
        result["database"] = "unavailable"
        result["status"] = "degraded"

    return result
