"""Shared Redis client used for broker health checks."""
import logging

import redis
from redis.connection import ConnectionPool

from reminderly.core.config import settings

logger = logging.getLogger(__name__)

_pool: ConnectionPool | None = None


def get_redis_client() -> redis.Redis:
    """Client on a small shared pool; the broker connections belong to Celery."""
    global _pool
    if _pool is None:
        if not settings.REDIS_URL:
            raise RuntimeError("REDIS_URL is not configured")
        _pool = ConnectionPool.from_url(
            settings.REDIS_URL,
            max_connections=2,
            socket_timeout=2,
            socket_connect_timeout=2,
            decode_responses=True,
        )
        logger.info("Redis connection pool created")
    return redis.Redis(connection_pool=_pool)


def close_redis_pool() -> None:
    global _pool
    if _pool is not None:
        _pool.disconnect()
        _pool = None
