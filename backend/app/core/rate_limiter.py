"""
Rate Limiting for the e-Voting API
==================================
Implements rate limiting using slowapi.

Authenticated requests are keyed by user id (set on request.state by the
auth dependency), anonymous ones by client IP.

Special endpoints have their own limits:
- /auth/google-signin: SIGNIN_RATE_LIMIT
- /voting/cast-vote: CAST_VOTE_RATE_LIMIT
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging_config import logger


def get_user_identifier(request: Request) -> str:
    """
    Get rate limit key based on user authentication.

    Priority:
    1. Authenticated user ID
    2. IP address (for anonymous users)
    """
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_user_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom handler for rate limit exceeded errors.

    Returns the standard error envelope with a Retry-After header.
    """
    logger.warning(
        f"[RateLimit] Exceeded for {get_user_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": "Too many requests. Please slow down.",
            "error": {
                "code": "RATE_LIMIT_EXCEEDED",
                "message": "Too many requests. Please slow down.",
                "details": {"limit": str(exc.detail)},
            },
        },
        headers={"Retry-After": "60"},
    )


def rate_limit(limit: str):
    """
    Decorator for applying custom rate limits to endpoints.

    The endpoint must accept a `request: Request` argument.

    Usage:
        @router.post("/cast-vote")
        @rate_limit(settings.CAST_VOTE_RATE_LIMIT)
        async def cast_vote(request: Request, ...):
            ...
    """
    return limiter.limit(limit, key_func=get_user_identifier)
