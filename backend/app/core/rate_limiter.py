"""
Rate Limiting for ComplaintDesk API
===================================
Implements rate limiting using slowapi.

The public auth endpoints carry their own limits (brute force protection):
- /auth/login: 5 req/min
- /auth/signup: 3 req/min

Storage defaults to in-process memory; point RATE_LIMIT_STORAGE_URI at a
shared backend (e.g. redis://) when running several workers.
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
    Get rate limit key.

    Priority:
    1. Authenticated account ID (set on request.state by the auth dependency)
    2. IP address (for anonymous callers)
    """
    account_id = getattr(request.state, 'account_id', None)
    if account_id:
        return f"account:{account_id}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_user_identifier,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Return a JSON 429 with a Retry-After header"""
    retry_after = exc.detail.split(":")[-1].strip() if exc.detail else "60"

    logger.warning(
        f"[RateLimit] Exceeded for {get_user_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": {
                "code": "RATE_LIMITED",
                "message": "Too many requests. Please slow down.",
                "details": {"limit": str(exc.detail)},
            },
            "detail": "Too many requests. Please slow down.",
        },
        headers={"Retry-After": retry_after if retry_after.isdigit() else "60"},
    )
