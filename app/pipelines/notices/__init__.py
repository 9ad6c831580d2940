"""Notice tools — search_notices and get_notice_details.

search_notices: page 1 → SearchExecutor (upstream) → store replaced → Paginator
                page N → store result set → Paginator (upstream only if the store has none)
get_notice_details: DetailResolver (store, then hint-driven fallback search)
"""

import logging

from app.config import settings
from app.integrations.kkj_api import KKJClient
from app.orchestrator.schemas import (
    GetNoticeDetailsArgs,
    Notice,
    PaginatedSearchResult,
    SearchNoticesArgs,
)
from app.pipelines.notices.detail_resolver import DetailResolver
from app.pipelines.notices.paginator import paginate
from app.pipelines.notices.search_executor import SearchExecutor
from app.services.result_store import ResultStore

logger = logging.getLogger(__name__)


class NoticePipeline:
    """Entry point for both notice tools. Stateless; the store is passed per call."""

    def __init__(
        self,
        client: KKJClient | None = None,
        page_size: int | None = None,
        count_hint: int | None = None,
    ):
        self.client = client or KKJClient()
        self.page_size = page_size or settings.page_size
        self.executor = SearchExecutor(self.client, count_hint)
        self.resolver = DetailResolver(self.client, count_hint)

    async def search_notices(self, args: SearchNoticesArgs, store: ResultStore) -> PaginatedSearchResult:
        params = self.executor.build_params(args)

        notices = None
        if args.page > 1:
            notices = await store.lookup_by_params(params)
            if notices is None:
                logger.info("No cached result set for page %d, searching upstream", args.page)
        if notices is None:
            notices = await self.executor.run(params, store)

        result = paginate(notices, args.page, self.page_size, args.description_length)
        logger.info(
            "search_notices | page=%d | items=%d | total=%d",
            args.page, len(result.results), result.totalAvailable,
        )
        return result

    async def get_notice_details(self, args: GetNoticeDetailsArgs, store: ResultStore) -> Notice:
        notice = await self.resolver.resolve(args, store)
        logger.info("Retrieved details | result_id=%s", args.result_id)
        return notice
