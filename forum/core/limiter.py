# File: forum/core/limiter.py

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from forum.core.config import settings
from forum.core.security import jwt_manager


def rate_limit_key(request: Request) -> str:
    """
    Signed-in callers are limited per account, everyone else per client address.
    """
    address_key = f"ip:{get_remote_address(request)}"
    authorization = request.headers.get("Authorization")
    if not authorization:
        return address_key
    try:
        token = jwt_manager.extract_token(authorization)
        payload = jwt_manager.verify_token(token)
    except HTTPException:
        # Invalid tokens fall back to the address bucket
        return address_key
    return f"user:{payload['user_id']}"


limiter = Limiter(
    key_func=rate_limit_key,
    storage_uri=settings.rate_limit_storage_uri,
    default_limits=[settings.redis_rate_limit],
)


async def custom_rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    429 in the same `{"error", "type"}` shape as the other API errors.
    """
    return JSONResponse(
        status_code=429,
        content={
            "error": f"Too many requests: rate limit exceeded ({exc.detail})",
            "type": "rate_limited",
        },
    )
