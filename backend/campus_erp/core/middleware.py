from __future__ import annotations

import logging
import time

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from campus_erp.core.config import Settings

logger = logging.getLogger(__name__)

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, settings: Settings) -> None:
        super().__init__(app)
        self._settings = settings

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        headers = response.headers
        headers.setdefault("X-Content-Type-Options", "nosniff")
        headers.setdefault("X-Frame-Options", "DENY")
        headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        # Rosters, marks and attendance are per-user data.
        if "authorization" in request.headers:
            headers.setdefault("Cache-Control", "no-store")
        if self._settings.security_enable_hsts:
            headers.setdefault(
                "Strict-Transport-Security",
                f"max-age={max(1, self._settings.security_hsts_max_age_seconds)}; includeSubDomains",
            )
        return response


def _declared_length(request: Request) -> int:
    try:
        return int(request.headers.get("content-length", "0"))
    except ValueError:
        return 0


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, max_bytes: int) -> None:
        super().__init__(app)
        self._max_bytes = max(1, max_bytes)

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method not in BODY_METHODS:
            return await call_next(request)

        size = _declared_length(request)
        if size > self._max_bytes:
            logger.warning("Rejected %s %s: body of %d bytes", request.method, request.url.path, size)
            return JSONResponse(
                status_code=413,
                content={"error": f"Request body too large ({size} bytes). Maximum allowed is {self._max_bytes} bytes."},
            )
        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(level, "%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response
