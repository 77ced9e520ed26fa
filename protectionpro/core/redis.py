from typing import Optional

from redis.asyncio import Redis, from_url

from protectionpro.config import settings

redis_client: Optional[Redis] = None


async def get_redis() -> Optional[Redis]:
    """Shared client, or None when no Redis URL is configured."""
    global redis_client
    if not settings.redis_url:
        return None
    if redis_client is None:
        redis_client = from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
    return redis_client


async def close_redis() -> None:
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None
