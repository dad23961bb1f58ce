"""Lazily created Redis client shared by the token blocklist and health check."""

import redis
from django.conf import settings

_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Return the process-wide client for ``settings.REDIS_URL``."""

    global _client
    if _client is None:
        _client = redis.Redis.from_url(
            settings.REDIS_URL, decode_responses=True, socket_connect_timeout=2
        )
    return _client


def redis_available() -> bool:
    """Ping Redis; connection problems count as unavailable."""

    try:
        return bool(get_redis_client().ping())
    except redis.RedisError:
        return False


__all__ = ["get_redis_client", "redis_available"]
