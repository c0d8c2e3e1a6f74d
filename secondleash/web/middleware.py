"""FastAPI middleware: request ID injection and rate limiting."""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

logger = structlog.get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Adds a unique X-Request-ID header to every response.

    Starts each request with a clean structlog context so identity values
    bound by one request never leak into the next.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id, method=request.method, path=request.url.path
        )
        start = time.monotonic()
        response = await call_next(request)
        response.headers["x-request-id"] = request_id
        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.monotonic() - start) * 1000, 2),
        )
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Simple in-memory rate limiter for API endpoints.

    Limits requests per IP to `max_requests` within `window_seconds`.
    Only applies to paths starting with the given prefix (default: /api/).
    """

    def __init__(
        self,
        app: object,
        max_requests: int = 120,
        window_seconds: int = 60,
        prefix: str = "/api/",
    ) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._max_requests = max_requests
        self._window = window_seconds
        self._prefix = prefix
        self._hits: dict[str, list[float]] = {}
        self._last_sweep = 0.0

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not request.url.path.startswith(self._prefix):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.monotonic()

        if now - self._last_sweep >= self._window:
            self._sweep(now)

        # Clean old entries
        hits = [t for t in self._hits.get(client_ip, []) if now - t < self._window]

        if len(hits) >= self._max_requests:
            self._hits[client_ip] = hits
            logger.warning("rate_limit_exceeded", ip=client_ip, path=request.url.path)
            return JSONResponse(
                {"success": False, "error": {"message": "Rate limit exceeded. Try again later."}},
                status_code=429,
                headers={"Retry-After": str(self._window)},
            )

        hits.append(now)
        self._hits[client_ip] = hits
        return await call_next(request)

    def _sweep(self, now: float) -> None:
        """Forget clients whose most recent hit is outside the window."""
        stale = [
            ip for ip, hits in self._hits.items() if not hits or now - hits[-1] >= self._window
        ]
        for ip in stale:
            del self._hits[ip]
        self._last_sweep = now
