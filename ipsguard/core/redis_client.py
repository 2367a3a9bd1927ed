import redis
from ipsguard.config import settings
from ipsguard.core.logger import logger
from typing import Optional

redis_client: Optional[redis.Redis] = None


def get_redis() -> redis.Redis:
    global redis_client
    if redis_client is None:
        redis_client = redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5
        )
    return redis_client


def redis_status() -> str:
    if not settings.redis_publish_enabled:
        return "disabled"
    try:
        get_redis().ping()
        return "ok"
    except redis.RedisError as e:
        logger.warning("redis_unavailable", error=str(e))
        return "unavailable"


def close_redis() -> None:
    global redis_client
    if redis_client is not None:
        redis_client.close()
        redis_client = None
