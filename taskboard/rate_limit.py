from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import settings


def get_storage_uri() -> str:
    return settings.REDIS_URL or settings.RATE_LIMIT_STORAGE_URI


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    storage_uri=get_storage_uri(),
    headers_enabled=True,
    enabled=settings.RATE_LIMIT_ENABLED,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 in the same envelope as every other error, plus X-RateLimit-* headers."""
    response = JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": f"Too many requests, please try again later ({exc.detail})",
            "status": 429,
            "path": request.url.path,
        },
    )
    return request.app.state.limiter._inject_headers(response, request.state.view_rate_limit)


__all__ = ["limiter", "rate_limit_exceeded_handler"]
