"""Key-value cache with Redis backend and in-memory fallback.

Used by the shared result store. Keys:
  - search:<sha256 of sorted params>  — full result sets
  - notice:<ResultId>                 — individual notices

Graceful degradation: if Redis is unavailable, uses a cachetools.TLRUCache
in-memory, which honours the per-entry TTL given to set().
"""

import hashlib
import json
import logging
from typing import Any

from cachetools import TLRUCache

from app.config import settings

logger = logging.getLogger(__name__)

SEARCH_PREFIX = "search:"
NOTICE_PREFIX = "notice:"


def hash_params(params: dict[str, str]) -> str:
    """SHA-256 hex digest of the params, independent of key order."""
    normalized = json.dumps(params, sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(normalized.encode()).hexdigest()


def search_key(params: dict[str, str]) -> str:
    return f"{SEARCH_PREFIX}{hash_params(params)}"


def notice_key(result_id: str | int) -> str:
    return f"{NOTICE_PREFIX}{result_id}"


def _entry_expiry(_key: str, value: tuple[int, Any], now: float) -> float:
    return now + value[0]


class CacheService:
    """Async cache with Redis primary and in-memory fallback."""

    def __init__(self, redis_url: str | None = None, maxsize: int = 4096):
        self.redis_url = redis_url or settings.redis_url
        self._redis = None
        self._fallback = TLRUCache(maxsize=maxsize, ttu=_entry_expiry)
        self._available = False

    @property
    def available(self) -> bool:
        return self._available

    async def connect(self) -> bool:
        """Connect to Redis. Returns True on success."""
        try:
            import redis.asyncio as aioredis

            self._redis = aioredis.from_url(
                self.redis_url,
                decode_responses=True,
                socket_connect_timeout=3,
            )
            await self._redis.ping()
            self._available = True
            return True
        except Exception as e:
            logger.warning("Redis connection failed — using in-memory fallback: %s", str(e)[:100])
            self._redis = None
            self._available = False
            return False

    async def disconnect(self):
        """Close Redis connection."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            self._available = False

    async def get(self, key: str) -> Any | None:
        """Read from cache. Returns None on miss."""
        if self._available and self._redis:
            try:
                data = await self._redis.get(key)
                if data:
                    logger.info("Cache HIT (Redis) | key=%s", key[:40])
                    return json.loads(data)
            except Exception as e:
                logger.debug("Redis GET error: %s", str(e)[:100])

        entry = self._fallback.get(key)
        if entry is not None:
            logger.info("Cache HIT (memory) | key=%s", key[:40])
            return entry[1]

        logger.info("Cache MISS | key=%s", key[:40])
        return None

    async def set(self, key: str, data: Any, ttl: int):
        """Write a JSON-serialisable value with TTL."""
        if self._available and self._redis:
            try:
                await self._redis.setex(key, ttl, json.dumps(data, ensure_ascii=False))
                logger.info("Cache SET (Redis) | key=%s | ttl=%ds", key[:40], ttl)
            except Exception as e:
                logger.debug("Redis SET error: %s", str(e)[:100])

        # Always write to in-memory fallback too
        self._fallback[key] = (ttl, data)


# Singleton instance
cache_service = CacheService()
