"""Detail resolver — find one notice by ResultId.

Flow: store lookup → hit: return
                   → miss without hints: CacheMissGuidedError
                   → miss with hints: fallback search → found: merge + return
                                                      → not found: FallbackNotFoundError
                                                      → API failure: FallbackApiError

The KKJ API has no lookup by id, so the fallback re-runs a search built from
the caller's hints and picks the notice out of the results.
"""

import logging

from app.config import settings
from app.errors import (
    CacheMissGuidedError,
    FallbackApiError,
    FallbackNotFoundError,
    NoticeLookupError,
)
from app.integrations.kkj_api import KKJClient
from app.orchestrator.schemas import GetNoticeDetailsArgs, Notice
from app.pipelines.notices.query_builder import build_fallback_params, has_search_criteria
from app.services.result_store import ResultStore

logger = logging.getLogger(__name__)


class DetailResolver:
    def __init__(self, client: KKJClient | None = None, count_hint: int | None = None):
        self.client = client or KKJClient()
        self.count_hint = count_hint or settings.search_count_hint

    async def resolve(self, args: GetNoticeDetailsArgs, store: ResultStore) -> Notice:
        result_id = args.result_id

        notice = await store.lookup_by_id(result_id)
        if notice is not None:
            logger.info("Detail cache hit | result_id=%s | store=%s", result_id, store.name)
            return notice

        params = build_fallback_params(args, self.count_hint)
        if not has_search_criteria(params):
            raise CacheMissGuidedError(result_id)

        logger.info("Detail cache miss, running fallback search | result_id=%s | params=%s", result_id, params)
        results, notice = await self._fallback_search(result_id, params)

        await store.merge(results)
        logger.info("Found via fallback search | result_id=%s | merged=%d", result_id, len(results))
        return notice

    async def _fallback_search(
        self, result_id: str, params: dict[str, str],
    ) -> tuple[list[Notice], Notice]:
        try:
            results = await self.client.search(params)
            logger.info("Fallback search returned %d results", len(results))
            notice = next((n for n in results if n.matches(result_id)), None)
            if notice is None:
                raise FallbackNotFoundError(result_id, len(results), self.count_hint)
            return results, notice
        except NoticeLookupError:
            # Already describes this ResultId
            raise
        except Exception as e:
            logger.error("Fallback search failed | result_id=%s | %s", result_id, str(e)[:200])
            raise FallbackApiError(result_id, e) from e
