import logging
import time
from typing import Dict

import redis.asyncio as aioredis

from src.app.services.revocation_store import ITokenRevocationStore

logger = logging.getLogger(__name__)


class MemoryRevocationStore(ITokenRevocationStore):
    """
    In-process revocation set.

    Only correct for a single API instance; entries are lost on restart.
    """

    def __init__(self):
        self._entries: Dict[str, float] = {}

    async def add(self, token_digest: str, ttl_seconds: int) -> None:
        self._purge()
        self._entries[token_digest] = time.monotonic() + max(1, ttl_seconds)

    async def contains(self, token_digest: str) -> bool:
        expires_at = self._entries.get(token_digest)
        if expires_at is None:
            return False
        if expires_at <= time.monotonic():
            self._entries.pop(token_digest, None)
            return False
        return True

    async def close(self) -> None:
        self._entries.clear()

    def _purge(self) -> None:
        now = time.monotonic()
        expired = [key for key, expires_at in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]


class RedisRevocationStore(ITokenRevocationStore):
    """
    Revocation set shared by every API instance through Redis.

    Each entry is a key with a TTL equal to the token's remaining lifetime.
    Positive lookups are cached locally: a revoked token never becomes
    valid again before it expires, so only misses go to the network.
    """

    KEY_PREFIX = "auth:revoked:"

    def __init__(self, redis_url: str, *, socket_timeout: float = 5.0):
        self.redis_url = redis_url
        self.client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        self._local = MemoryRevocationStore()

    async def add(self, token_digest: str, ttl_seconds: int) -> None:
        ttl = max(1, ttl_seconds)
        await self.client.set(f"{self.KEY_PREFIX}{token_digest}", "1", ex=ttl)
        await self._local.add(token_digest, ttl)

    async def contains(self, token_digest: str) -> bool:
        if await self._local.contains(token_digest):
            return True
        key = f"{self.KEY_PREFIX}{token_digest}"
        if not await self.client.exists(key):
            return False
        ttl = await self.client.ttl(key)
        await self._local.add(token_digest, ttl if ttl and ttl > 0 else 1)
        return True

    async def close(self) -> None:
        await self._local.close()
        await self.client.aclose()


def build_revocation_store(config) -> ITokenRevocationStore:
    """Construct the revocation store selected by CACHE_BACKEND"""
    backend = str(config.CACHE_BACKEND).lower()
    if backend == "redis":
        logger.info("Using Redis access-token revocation store")
        return RedisRevocationStore(config.REDIS_URL)
    if backend == "memory":
        logger.warning(
            "Using in-memory access-token revocation store; "
            "revocations are not shared between instances"
        )
        return MemoryRevocationStore()
    raise ValueError(f"Unsupported CACHE_BACKEND: {config.CACHE_BACKEND}")
