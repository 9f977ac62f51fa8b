from redis import Redis

from .config import settings

redis_client = Redis.from_url(
    settings.redis_url,
    decode_responses=True,
    socket_timeout=2.0,
)


# FastAPI dependency; None disables grid caching
def get_redis() -> Redis | None:
    if not settings.slots_cache_enabled:
        return None
    return redis_client
