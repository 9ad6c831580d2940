"""Search executor — one upstream search whose results replace the store contents."""

import logging

from app.errors import ValidationError
from app.integrations.kkj_api import KKJClient
from app.orchestrator.schemas import Notice, SearchNoticesArgs
from app.pipelines.notices.query_builder import build_search_params, has_search_criteria
from app.services.result_store import ResultStore

logger = logging.getLogger(__name__)


class SearchExecutor:
    """Builds the canonical parameters, calls KKJ and fills the active store."""

    def __init__(self, client: KKJClient | None = None, count_hint: int | None = None):
        self.client = client or KKJClient()
        self.count_hint = count_hint

    def build_params(self, args: SearchNoticesArgs) -> dict[str, str]:
        """Canonical parameters for args; raises ValidationError without criteria."""
        params = build_search_params(args, self.count_hint)
        if not has_search_criteria(params):
            raise ValidationError(
                "At least one of query, project_name, organization_name, or lg_code must be specified"
            )
        return params

    async def run(self, params: dict[str, str], store: ResultStore) -> list[Notice]:
        # Upstream errors propagate as-is; nothing is retried
        notices = await self.client.search(params)
        await store.write_search_result(params, notices)
        logger.info("Search executed | results=%d | store=%s", len(notices), store.name)
        return notices
