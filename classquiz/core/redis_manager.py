import logging

from redis.asyncio import Redis
from .config import Settings

logger = logging.getLogger(__name__)


async def connect_redis(settings: Settings) -> Redis | None:
    """
    Returns a Redis client for notification fan-out, or None when REDIS_URL is
    unset. TLS is supported through the rediss:// scheme.
    """
    if not settings.REDIS_URL:
        logger.info("REDIS_URL not set, notifications are delivered in-process")
        return None
    redis = Redis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        health_check_interval=30,     # periodic PING keeps the connection alive
        socket_timeout=3,
        socket_connect_timeout=3,
        retry_on_timeout=True,
        max_connections=50,
    )
    # Availability check at startup
    await redis.ping()
    logger.info("Connected to Redis")
    return redis


async def close_redis(redis: Redis | None) -> None:
    if redis is not None:
        await redis.aclose()
