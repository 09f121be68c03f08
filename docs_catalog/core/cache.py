"""Sliding-expiration caches for catalog indexes."""

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

import redis.asyncio as redis

from docs_catalog.models.documents import DocumentInfo

logger = logging.getLogger(__name__)

DEFAULT_SLIDING_EXPIRATION = 600.0  # 10 minutes


@runtime_checkable
class IndexCache(Protocol):
    """Key-value store for document indexes with sliding expiration.

    A successful ``get`` restarts the entry's expiration window.
    """

    async def get(self, key: str) -> list[DocumentInfo] | None: ...

    async def set(
        self,
        key: str,
        documents: list[DocumentInfo],
        sliding_expiration: float = DEFAULT_SLIDING_EXPIRATION,
    ) -> None: ...


@dataclass
class _CacheEntry:
    documents: list[DocumentInfo]
    sliding_expiration: float
    last_access: float


class MemoryIndexCache:
    """In-process index cache; hits hand back the stored list itself."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> list[DocumentInfo] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        now = self._clock()
        if now - entry.last_access >= entry.sliding_expiration:
            del self._entries[key]
            logger.debug(f"Index cache entry expired: {key}")
            return None

        entry.last_access = now
        return entry.documents

    async def set(
        self,
        key: str,
        documents: list[DocumentInfo],
        sliding_expiration: float = DEFAULT_SLIDING_EXPIRATION,
    ) -> None:
        self._entries[key] = _CacheEntry(
            documents=documents,
            sliding_expiration=sliding_expiration,
            last_access=self._clock(),
        )

    def clear(self) -> None:
        self._entries.clear()


class RedisIndexCache:
    """Index cache stored in Redis.

    ``GETEX`` re-arms the key's TTL on every read, which gives Redis keys the
    same sliding behaviour as the in-memory cache. Redis problems are logged
    and reported as cache misses.
    """

    def __init__(self, redis_url: str = "redis://localhost:6379/0", client=None):
        self.redis_url = redis_url
        self.redis: Optional[redis.Redis] = client
        # get() has no TTL argument; remember the one each key was stored with
        self._ttls: dict[str, int] = {}

    async def initialize(self):
        """Initialize Redis connection."""
        try:
            self.redis = redis.from_url(self.redis_url, decode_responses=True)
            await self.redis.ping()
            logger.info("Redis connection established successfully")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    async def close(self):
        """Close Redis connection."""
        if self.redis:
            await self.redis.aclose()
            logger.info("Redis connection closed")

    async def get(self, key: str) -> list[DocumentInfo] | None:
        if not self.redis:
            return None

        try:
            ttl = self._ttls.get(key, int(DEFAULT_SLIDING_EXPIRATION))
            payload = await self.redis.getex(key, ex=ttl)
            if not payload:
                return None
            return [DocumentInfo.model_validate(item) for item in json.loads(payload)]
        except Exception as e:
            logger.warning(f"Failed to read index {key} from Redis: {e}")
            return None

    async def set(
        self,
        key: str,
        documents: list[DocumentInfo],
        sliding_expiration: float = DEFAULT_SLIDING_EXPIRATION,
    ) -> None:
        if not self.redis:
            logger.warning("Redis not initialized, cannot cache index")
            return

        ttl = max(1, int(sliding_expiration))
        payload = json.dumps(
            [document.model_dump(mode="json", by_alias=True) for document in documents]
        )
        try:
            await self.redis.set(key, payload, ex=ttl)
            self._ttls[key] = ttl
            logger.debug(f"Cached index {key} with {len(documents)} documents")
        except Exception as e:
            logger.error(f"Failed to cache index {key}: {e}")
