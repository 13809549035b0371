"""
e-Voting API - HTTP Middleware
Request correlation and timing, response hardening, upload size limits
"""

import time
from typing import Callable, Dict, Optional, Set

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from starlette.types import ASGIApp

from app.core.logging_config import (
    logger,
    set_request_id,
    set_user_id,
    generate_request_id,
)


# Probe and docs traffic is not logged per request
SKIP_LOGGING_PATHS: Set[str] = {
    "/health",
    "/",
    "/favicon.ico",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/api/v1/health",
    "/api/v1/health/live",
    "/api/v1/health/ready",
}

# Responses under these prefixes carry ballots or identity data
NO_STORE_PREFIXES = ("/api/v1/auth", "/api/v1/student", "/api/v1/voting", "/api/v1/admin")

SLOW_REQUEST_MS = 1000


def should_skip_logging(path: str) -> bool:
    return path in SKIP_LOGGING_PATHS or path.endswith((".js", ".css", ".png", ".ico"))


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with an X-Request-ID (propagated when the client sends
    one), logs its outcome and duration, and resets the logging context.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)
        path = request.url.path
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(f"{request.method} {path} failed: {type(exc).__name__}", extra={"event_type": "http_request_error"})
            raise
        finally:
            set_request_id("")
            set_user_id("")

        duration_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        if not should_skip_logging(path):
            logger.log_request(request.method, path, response.status_code, duration_ms)
            if duration_ms > SLOW_REQUEST_MS:
                logger.warning(
                    f"Slow request: {request.method} {path} took {duration_ms:.2f}ms",
                    extra={"event_type": "slow_request", "http_path": path, "duration_ms": duration_ms},
                )

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Hardening headers; API responses holding votes or identity data are never cached"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if request.url.path.startswith(NO_STORE_PREFIXES):
            response.headers["Cache-Control"] = "no-store"

        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Reject oversized bodies from Content-Length before they are read.

    Upload endpoints get their own ceiling; every other route is JSON and
    gets default_max_size.
    """

    def __init__(
        self,
        app: ASGIApp,
        default_max_size: int = 1024 * 1024,
        upload_limits: Optional[Dict[str, int]] = None,
    ):
        super().__init__(app)
        self.default_max_size = default_max_size
        self.upload_limits = upload_limits or {}

    def limit_for(self, path: str) -> int:
        return self.upload_limits.get(path.rstrip("/"), self.default_max_size)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")
        if not content_length or not content_length.isdigit():
            return await call_next(request)

        max_size = self.limit_for(request.url.path)
        if int(content_length) <= max_size:
            return await call_next(request)

        logger.warning(
            f"Request body too large for {request.url.path}: {content_length} bytes (max {max_size})",
            extra={"event_type": "request_too_large", "http_path": request.url.path, "max_size": max_size},
        )
        message = f"Request body too large. Maximum size is {max_size // 1024} KB"
        return JSONResponse(
            status_code=413,
            content={
                "success": False,
                "message": message,
                "error": {"code": "REQUEST_TOO_LARGE", "message": message, "details": {"max_size": max_size}},
            },
        )


__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "RequestSizeLimitMiddleware",
    "should_skip_logging",
    "SKIP_LOGGING_PATHS",
]
