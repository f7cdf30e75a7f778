"""
Redis Connection Management Module

Provides Redis client lifecycle management for the KV store backend.
Only used when KV_STORE_TYPE is set to "redis".
"""

import logging
import warnings
from typing import Optional
from urllib.parse import urlparse

from redis.asyncio import Redis

from kv_gateway.config import get_settings

logger = logging.getLogger(__name__)

# Global Redis client instance
_redis_client: Optional[Redis] = None


def _check_redis_security(redis_url: str) -> None:
    """
    Check Redis connection security.

    Warns if Redis URL has no password and is not a localhost connection.
    """
    parsed = urlparse(redis_url)

    has_password = bool(parsed.password)
    is_localhost = parsed.hostname in ("localhost", "127.0.0.1", "::1")

    if not has_password and not is_localhost:
        warnings.warn(
            "Redis connection has no password and is not connecting to localhost. "
            "Set a password in REDIS_URL using the format: redis://:password@host:port/db",
            UserWarning,
            stacklevel=3,
        )
        logger.warning("Redis connection without password to non-localhost host detected")


def _redacted(redis_url: str) -> str:
    parsed = urlparse(redis_url)
    if not parsed.password:
        return redis_url
    return redis_url.replace(f":{parsed.password}@", ":***@", 1)


async def init_redis() -> None:
    """
    Initialize Redis Connection

    Creates an async Redis client from the configured REDIS_URL.
    Should be called during application startup when KV_STORE_TYPE is "redis".
    """
    global _redis_client

    if _redis_client is not None:
        logger.warning("Redis client already initialized")
        return

    settings = get_settings()
    _check_redis_security(settings.REDIS_URL)

    # Values are arbitrary bytes, so responses are not decoded
    _redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=False)

    # Verify connectivity
    await _redis_client.ping()
    logger.info("Redis connection established: %s", _redacted(settings.REDIS_URL))


async def close_redis() -> None:
    """
    Close Redis Connection

    Should be called during application shutdown.
    """
    global _redis_client

    if _redis_client is None:
        return

    await _redis_client.aclose()
    _redis_client = None
    logger.info("Redis connection closed")


def get_redis() -> Redis:
    """
    Get Redis Client Instance

    Raises:
        RuntimeError: If Redis has not been initialized
    """
    if _redis_client is None:
        raise RuntimeError(
            "Redis client not initialized. "
            "Ensure KV_STORE_TYPE is set to 'redis' and init_redis() has been called."
        )
    return _redis_client
