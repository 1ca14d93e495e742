import logging
import time
from typing import Dict, List, Tuple

import redis.asyncio as aioredis

from src.app.services.rate_limiter import IRateLimiter

logger = logging.getLogger(__name__)


class MemoryRateLimiter(IRateLimiter):
    """
    Sliding-window counter kept in process memory.

    Only correct for a single API instance.
    """

    def __init__(self):
        # Structure: {key: [timestamp1, timestamp2, ...]}
        self.requests: Dict[str, List[float]] = {}

    def _clean_old_requests(self, key: str, window_seconds: int) -> List[float]:
        cutoff = time.monotonic() - window_seconds
        timestamps = [stamp for stamp in self.requests.get(key, []) if stamp > cutoff]
        if timestamps:
            self.requests[key] = timestamps
        else:
            self.requests.pop(key, None)
        return timestamps

    def _usage(self, timestamps: List[float], window_seconds: int) -> Tuple[int, int]:
        if not timestamps:
            return 0, 0
        reset_in = int(timestamps[0] + window_seconds - time.monotonic()) + 1
        return len(timestamps), max(1, reset_in)

    async def count(self, key: str, window_seconds: int) -> Tuple[int, int]:
        return self._usage(self._clean_old_requests(key, window_seconds), window_seconds)

    async def hit(self, key: str, window_seconds: int) -> Tuple[int, int]:
        timestamps = self._clean_old_requests(key, window_seconds)
        timestamps.append(time.monotonic())
        self.requests[key] = timestamps
        return self._usage(timestamps, window_seconds)

    async def close(self) -> None:
        self.requests.clear()


class RedisRateLimiter(IRateLimiter):
    """
    Fixed-window counter shared by every API instance through Redis.

    The first hit of a window creates the key with a TTL equal to the
    window; INCR keeps the count atomic across instances.
    """

    KEY_PREFIX = "auth:ratelimit:"

    def __init__(self, redis_url: str, *, socket_timeout: float = 5.0):
        self.redis_url = redis_url
        self.client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )

    async def _reset_in(self, key: str, window_seconds: int) -> int:
        ttl = await self.client.ttl(key)
        return ttl if ttl and ttl > 0 else window_seconds

    async def count(self, key: str, window_seconds: int) -> Tuple[int, int]:
        redis_key = f"{self.KEY_PREFIX}{key}"
        value = await self.client.get(redis_key)
        if not value:
            return 0, 0
        return int(value), await self._reset_in(redis_key, window_seconds)

    async def hit(self, key: str, window_seconds: int) -> Tuple[int, int]:
        redis_key = f"{self.KEY_PREFIX}{key}"
        used = await self.client.incr(redis_key)
        if used == 1:
            await self.client.expire(redis_key, window_seconds)
        return int(used), await self._reset_in(redis_key, window_seconds)

    async def close(self) -> None:
        await self.client.aclose()


def build_rate_limiter(config) -> IRateLimiter:
    """Construct the rate limiter for the CACHE_BACKEND in use"""
    backend = str(config.CACHE_BACKEND).lower()
    if backend == "redis":
        return RedisRateLimiter(config.REDIS_URL)
    if backend == "memory":
        return MemoryRateLimiter()
    raise ValueError(f"Unsupported CACHE_BACKEND: {config.CACHE_BACKEND}")
