"""FastAPI application factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from secondleash.config.logging import setup_logging
from secondleash.config.settings import get_settings
from secondleash.exceptions import ForbiddenError, SecondLeashError, StoreError
from secondleash.web.dependencies import create_dog_service
from secondleash.web.health import VERSION
from secondleash.web.middleware import RateLimitMiddleware, RequestIDMiddleware
from secondleash.web.routes.dogs import router as dogs_router
from secondleash.web.routes.identity import router as identity_router

if TYPE_CHECKING:
    from secondleash.services.dogs import DogService

logger = structlog.get_logger(__name__)


def _error_response(status_code: int, message: str, **extra: object) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": {"message": message, **extra}},
    )


def create_app(dog_service: DogService | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    setup_logging(log_level=settings.log_level, json_output=not settings.debug)

    app = FastAPI(
        title="SecondLeash",
        description="Multi-shelter dog registry",
        version=VERSION,
    )
    app.state.dog_service = dog_service or create_dog_service(settings)

    @app.exception_handler(SecondLeashError)
    async def domain_error_handler(request: Request, exc: SecondLeashError) -> JSONResponse:
        if isinstance(exc, StoreError):
            logger.exception(
                "store_error", error=exc.message, path=request.url.path, exc_info=exc
            )
            return _error_response(exc.status_code, "Internal server error")
        if isinstance(exc, ForbiddenError):
            logger.warning("request_forbidden", reason=exc.message, path=request.url.path)
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error_response(
            422, "Validation failed", details=jsonable_encoder(exc.errors())
        )

    # Middleware (last added runs first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )
    app.add_middleware(
        RateLimitMiddleware, max_requests=settings.rate_limit_per_minute, window_seconds=60
    )
    app.add_middleware(RequestIDMiddleware)

    # Health check (public)
    @app.get("/api/health")
    async def health_check() -> dict[str, object]:
        from secondleash.web.health import check_health

        return await check_health()

    # Identity is resolved per route through get_identity (401 when missing)
    app.include_router(identity_router)
    app.include_router(dogs_router)

    logger.info("app_created")
    return app
