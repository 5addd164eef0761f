"""
Rate limiting middleware for API protection.

Uses slowapi to limit requests per IP address. A cache miss on /feeds
fans out to every source through the public proxies, so unthrottled
clients would burn through the proxies' own rate limits quickly.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from fastapi import Request
from fastapi.responses import JSONResponse

from .config import config


def _per_minute(limit: int) -> str:
    if limit <= 0:
        # Rate limiting disabled
        return "1000000/minute"
    return f"{limit}/minute"


def get_rate_limit() -> str:
    """Default per-IP limit for all routes."""
    return _per_minute(config.RATE_LIMIT_PER_MINUTE)


def get_refresh_limit() -> str:
    """Tighter limit for forced refreshes, which always bypass the cache."""
    return _per_minute(config.REFRESH_RATE_LIMIT_PER_MINUTE)


# Create limiter with IP-based key
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[get_rate_limit()],
    storage_uri="memory://",
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Custom handler for rate limit exceeded errors."""
    return JSONResponse(
        status_code=429,
        content={
            "detail": f"Rate limit exceeded: {exc.detail}",
            "retry_after": getattr(exc, "retry_after", 60),
        },
        headers={"Retry-After": str(getattr(exc, "retry_after", 60))},
    )


def setup_rate_limiting(app):
    """
    Configure rate limiting for a FastAPI app.

    Call this while building the app to enable rate limiting.
    """
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
