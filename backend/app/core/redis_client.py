from datetime import date, time
from uuid import uuid4

import redis.asyncio as redis

from backend.app.core.config import settings


redis_client: redis.Redis | None = None

_RELEASE_HOLD_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


async def init_redis() -> None:
    """Initialise a shared Redis connection."""
    global redis_client
    redis_client = redis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )


async def close_redis() -> None:
    """Close the Redis connection if it was initialised."""
    if redis_client is not None:
        await redis_client.aclose()


def slot_hold_key(event_date: date, start_time: time, city: str | None) -> str:
    return f"hold:{event_date:%Y%m%d}:{start_time:%H%M}:{(city or '').strip().lower()}"


async def acquire_slot_hold(key: str, ttl_seconds: int) -> str | None:
    """Take the hold if nobody else has it; return its token, or None when taken."""
    if redis_client is None:
        return None
    token = str(uuid4())
    acquired = await redis_client.set(key, token, nx=True, px=ttl_seconds * 1000)
    return token if acquired else None


async def release_slot_hold(key: str, token: str) -> bool:
    """Drop the hold only while it still carries ``token``.

    A hold that expired and was taken by another request is left alone.
    """
    if redis_client is None:
        return False
    released = await redis_client.eval(_RELEASE_HOLD_SCRIPT, 1, key, token)
    return bool(released)
