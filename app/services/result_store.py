"""Result stores — make the ID-less KKJ search API addressable.

Two variants behind one interface:
  - SessionResultStore: ordered list in process memory. Replaced by every
    first-page search, appended to by fallback merges. No TTL.
  - SharedResultStore: CacheService (Redis) entries with TTL, usable by
    several stateless instances at once.

Stores are passed explicitly to the search / detail handlers; there is no
module-level result cache.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod

from cachetools import TTLCache

from app.config import settings
from app.orchestrator.schemas import CachedSearchResult, Notice
from app.services.cache import CacheService, notice_key, search_key

logger = logging.getLogger(__name__)


class ResultStore(ABC):
    """Contract shared by both store variants."""

    name = "abstract"

    @abstractmethod
    async def lookup_by_id(self, result_id: str | int) -> Notice | None:
        """Return the cached notice whose ResultId equals result_id as a string."""

    @abstractmethod
    async def lookup_by_params(self, params: dict[str, str]) -> list[Notice] | None:
        """Return the cached result set for a search, or None when there is none."""

    @abstractmethod
    async def write_search_result(self, params: dict[str, str], notices: list[Notice]) -> None:
        """Record the full result set of a fresh search."""

    @abstractmethod
    async def write_notice(self, notice: Notice) -> None:
        """Record a single notice so it can be found by ResultId."""

    async def merge(self, notices: list[Notice]) -> None:
        """Add notices found outside a regular search (fallback resolution)."""
        for notice in notices:
            await self.write_notice(notice)


class SessionResultStore(ResultStore):
    """In-process result set for one long-lived session.

    Not safe for interleaved requests from different callers: a page-1 search
    replaces the list another caller may be paging through. Give each caller
    its own instance (see SessionRegistry).
    """

    name = "session"

    def __init__(self):
        self._notices: list[Notice] = []

    @property
    def notices(self) -> list[Notice]:
        return list(self._notices)

    def clear(self):
        self._notices = []
        logger.info("Session store cleared")

    async def lookup_by_id(self, result_id: str | int) -> Notice | None:
        return next((n for n in self._notices if n.matches(result_id)), None)

    async def lookup_by_params(self, params: dict[str, str]) -> list[Notice] | None:
        # The session holds only the latest result set, whatever produced it
        return list(self._notices) if self._notices else None

    async def write_search_result(self, params: dict[str, str], notices: list[Notice]) -> None:
        self._notices = list(notices)
        logger.info("Session store replaced | count=%d", len(self._notices))

    async def write_notice(self, notice: Notice) -> None:
        if await self.lookup_by_id(notice.result_key) is None:
            self._notices.append(notice)

    async def merge(self, notices: list[Notice]) -> None:
        existing = {n.result_key for n in self._notices}
        added = []
        for notice in notices:
            if notice.result_key not in existing:
                existing.add(notice.result_key)
                added.append(notice)
        if added:
            self._notices.extend(added)
            logger.info("Session store merged | added=%d | total=%d", len(added), len(self._notices))


class SharedResultStore(ResultStore):
    """TTL-bearing store on top of CacheService.

    Writing a search result fans out one notice write per result, issued
    concurrently and awaited together. There is no atomicity across the
    fan-out; every entry expires on its own.
    """

    name = "shared"

    def __init__(
        self,
        cache: CacheService,
        search_ttl: int | None = None,
        notice_ttl: int | None = None,
    ):
        self.cache = cache
        self.search_ttl = search_ttl if search_ttl is not None else settings.cache_ttl_search
        self.notice_ttl = notice_ttl if notice_ttl is not None else settings.cache_ttl_detail

    async def lookup_by_id(self, result_id: str | int) -> Notice | None:
        data = await self.cache.get(notice_key(result_id))
        if not data:
            return None
        return Notice.model_validate(data)

    async def lookup_by_params(self, params: dict[str, str]) -> list[Notice] | None:
        data = await self.cache.get(search_key(params))
        if not data:
            return None
        return CachedSearchResult.model_validate(data).results

    async def write_search_result(self, params: dict[str, str], notices: list[Notice]) -> None:
        envelope = CachedSearchResult(
            params=params,
            results=notices,
            fetchedAt=int(time.time() * 1000),
            totalCount=len(notices),
        )
        key = search_key(params)
        await self.cache.set(key, envelope.model_dump(mode="json", exclude_none=True), self.search_ttl)
        logger.info("Cached search results | key=%s | count=%d | ttl=%ds", key, len(notices), self.search_ttl)
        await self.merge(notices)

    async def write_notice(self, notice: Notice) -> None:
        await self.cache.set(notice_key(notice.result_key), notice.to_payload(), self.notice_ttl)

    async def merge(self, notices: list[Notice]) -> None:
        await asyncio.gather(*(self.write_notice(n) for n in notices))
        logger.info("Cached notice details | count=%d | ttl=%ds", len(notices), self.notice_ttl)


class SessionRegistry:
    """One SessionResultStore per transport session id, expiring after idle_ttl."""

    def __init__(self, maxsize: int = 1024, idle_ttl: int | None = None):
        self._stores: TTLCache = TTLCache(maxsize=maxsize, ttl=idle_ttl or settings.session_idle_ttl)

    def get(self, session_id: str) -> SessionResultStore:
        store = self._stores.get(session_id)
        if store is None:
            store = SessionResultStore()
            logger.info("Session store created | session=%s", session_id[:40])
        # Re-inserting restarts the idle timer
        self._stores[session_id] = store
        return store

    def __len__(self) -> int:
        return len(self._stores)


def create_shared_store(cache: CacheService) -> SharedResultStore:
    """Shared store with the configured TTLs."""
    return SharedResultStore(cache)
