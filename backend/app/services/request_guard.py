"""
In-flight request guard.

Rejects a second mutating request for the same parcel while the first
one is still being processed (double clicks, client retries). The lock is
a Redis key set with NX and a TTL so a crashed request cannot hold it
forever. Each holder stores its own token and only releases a key that
still carries it.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from redis.exceptions import RedisError
from backend.app.core.config import settings
from backend.app.core.exceptions import DuplicateRequestError
from backend.app.core.redis_client import get_redis

logger = logging.getLogger("eparcel")

INFLIGHT_PREFIX = "inflight:parcel:"


async def _release(redis, key: str, token: str) -> None:
    """Delete the lock if this holder still owns it; never raises."""
    try:
        current = await redis.get(key)
        if isinstance(current, bytes):
            current = current.decode()
        if current != token:
            # Expired and taken over by a later request
            logger.warning("In-flight lock %s expired before release", key)
            return
        await redis.delete(key)
    except RedisError as e:
        # The key expires on its own after the TTL
        logger.warning("Could not release in-flight lock %s: %s", key, e)


@asynccontextmanager
async def parcel_action_guard(parcel_id: str):
    """
    Hold the in-flight lock for a parcel for the duration of the block.

    Raises:
        DuplicateRequestError: another request holds the lock
    """
    redis = await get_redis()
    key = f"{INFLIGHT_PREFIX}{parcel_id}"
    token = uuid.uuid4().hex
    try:
        acquired = await redis.set(key, token, nx=True, ex=settings.inflight_ttl_seconds)
    except RedisError as e:
        # Fail open like token revocation: the version check still guards writes
        logger.warning("In-flight guard unavailable for parcel %s: %s", parcel_id, e)
        yield
        return

    if not acquired:
        logger.warning("Rejected duplicate in-flight request for parcel %s", parcel_id)
        raise DuplicateRequestError(parcel_id)
    try:
        yield
    finally:
        await _release(redis, key, token)
