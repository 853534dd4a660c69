"""Redis connection and the user profile cache."""

import json
from typing import Any

import redis
from starlette.concurrency import run_in_threadpool
from structlog import get_logger

from auth_api.config import settings

logger = get_logger(__name__)

_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Shared client, created on first use."""
    global _redis_client

    if _redis_client is None:
        _redis_client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            username=settings.redis_username,
            password=settings.redis_password,
            decode_responses=True,
            socket_connect_timeout=settings.redis_timeout_seconds,
            socket_timeout=settings.redis_timeout_seconds,
            health_check_interval=30,
        )

    return _redis_client


async def check_redis_connection() -> bool:
    try:
        return bool(await run_in_threadpool(get_redis_client().ping))
    except redis.RedisError:
        return False


def close_redis_connection() -> None:
    global _redis_client

    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None


class CacheManager:
    """JSON values in Redis, accessed from async code.

    The redis client blocks, so every call runs in the threadpool. An
    unreachable Redis reads as a miss and a failed write returns ``False``;
    callers fall back to the database.
    """

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    async def get_json(self, key: str) -> Any | None:
        try:
            value = await run_in_threadpool(self.redis.get, key)
        except (redis.RedisError, OSError) as e:
            logger.warning("cache_read_failed", key=key, error=str(e))
            return None

        return json.loads(value) if value else None

    async def set_json(self, key: str, value: Any, ttl: int) -> bool:
        """Store ``value`` under ``key`` for ``ttl`` seconds."""
        try:
            await run_in_threadpool(self.redis.setex, key, ttl, json.dumps(value, default=str))
        except (redis.RedisError, OSError) as e:
            logger.warning("cache_write_failed", key=key, error=str(e))
            return False
        return True

    async def delete(self, key: str) -> bool:
        try:
            await run_in_threadpool(self.redis.delete, key)
        except (redis.RedisError, OSError) as e:
            logger.warning("cache_delete_failed", key=key, error=str(e))
            return False
        return True
