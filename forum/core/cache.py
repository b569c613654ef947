import logging

import redis

from forum.core.config import settings

logger = logging.getLogger(__name__)

_redis_client = None


def get_redis_client() -> redis.Redis:
    """Shared client for the token blacklist, created on first use"""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.Redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_socket_timeout,
            health_check_interval=30,
        )
        logger.info("Redis client created for the token blacklist")
    return _redis_client


def redis_status() -> str:
    """
    State of the blacklist store as reported by /health.

    "disabled" when logged-out tokens are kept in process memory.
    """
    if settings.token_blacklist_backend != "redis":
        return "disabled"
    try:
        get_redis_client().ping()
    except redis.RedisError as e:
        logger.error(f"Redis health check failed: {e}")
        return "unhealthy"
    return "healthy"
