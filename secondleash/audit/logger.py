"""Audit logger: immutable, insert-only trail of dog mutations.

Uses its own DB session so audit entries survive transaction rollbacks.
Details JSON is sanitized (sensitive fields stripped, 10KB max).
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from secondleash.models.database import AuditLog

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from secondleash.policy.identity import CallerIdentity

logger = structlog.get_logger(__name__)

# Fields to strip from details_json
_SENSITIVE_FIELDS = frozenset(
    {
        "password",
        "secret",
        "token",
        "authorization",
        "cookie",
        "session",
    }
)

_MAX_DETAILS_BYTES = 10_240  # 10KB


def _sanitize_details(details: dict[str, Any]) -> str:
    """Strip sensitive fields and enforce size limit."""
    sanitized = {k: v for k, v in details.items() if k.lower() not in _SENSITIVE_FIELDS}
    encoded = json.dumps(sanitized, default=str)
    if len(encoded) > _MAX_DETAILS_BYTES:
        encoded = encoded[:_MAX_DETAILS_BYTES]
    return encoded


class AuditLogger:
    """Insert-only audit logger with its own DB session.

    The separate session ensures audit entries persist even if the
    calling transaction rolls back.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def log(
        self,
        *,
        shelter_id: str | None,
        user_id: str,
        action: str,
        resource_type: str = "",
        resource_id: str = "",
        details: dict[str, Any] | None = None,
        ip_address: str = "",
        request_id: str = "",
    ) -> None:
        """Write an audit log entry."""
        entry = AuditLog(
            shelter_id=shelter_id,
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details_json=_sanitize_details(details or {}),
            ip_address=ip_address,
            request_id=request_id,
        )
        try:
            async with AsyncSession(self._engine) as session:
                session.add(entry)
                await session.commit()
        except SQLAlchemyError:
            # Audit must never break the request: log and continue
            logger.exception("audit_log_failed", action=action, shelter_id=shelter_id)


async def audit(
    identity: CallerIdentity,
    *,
    action: str,
    shelter_id: str | None,
    resource_id: str = "",
    details: dict[str, Any] | None = None,
    ip_address: str = "",
    request_id: str = "",
) -> None:
    """Convenience wrapper: logs an audit entry if the database is enabled.

    Silently no-ops when USE_DATABASE=false (in-memory / dev mode).
    """
    from secondleash.config.settings import get_settings

    settings = get_settings()
    if not settings.use_database:
        return

    from secondleash.storage.database import get_engine

    al = AuditLogger(get_engine())
    await al.log(
        shelter_id=shelter_id,
        user_id=identity.user_id or "",
        action=action,
        resource_type="dog",
        resource_id=resource_id,
        details={"role": identity.role.value, **(details or {})},
        ip_address=ip_address,
        request_id=request_id,
    )
