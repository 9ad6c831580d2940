"""Tests for get_notice_details: store hits, guided misses and fallback search."""

import pytest

from app.errors import (
    CacheMissGuidedError,
    FallbackApiError,
    FallbackNotFoundError,
    UpstreamHttpError,
)
from app.orchestrator.schemas import GetNoticeDetailsArgs
from app.pipelines.notices import NoticePipeline
from app.services.cache import CacheService
from app.services.result_store import SessionResultStore, SharedResultStore
from conftest import FakeKKJClient, make_notice, make_notices


@pytest.fixture
def store():
    return SessionResultStore()


class TestStoreHit:
    @pytest.mark.asyncio
    async def test_returns_cached_notice_without_upstream(self, store, notice_pdf):
        await store.write_search_result({"Query": "x"}, [notice_pdf])
        client = FakeKKJClient()

        notice = await NoticePipeline(client=client).get_notice_details(
            GetNoticeDetailsArgs(result_id="1"), store,
        )

        assert notice is notice_pdf
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_numeric_id_found_by_string(self, store, notice_numeric_id):
        await store.write_search_result({"Query": "x"}, [notice_numeric_id])

        notice = await NoticePipeline(client=FakeKKJClient()).get_notice_details(
            GetNoticeDetailsArgs(result_id="1"), store,
        )
        assert notice.ProjectName == "Numeric id notice"

    @pytest.mark.asyncio
    async def test_integer_argument_accepted(self, store, notice_pdf):
        await store.write_search_result({"Query": "x"}, [notice_pdf])
        args = GetNoticeDetailsArgs.model_validate({"result_id": 1})
        notice = await NoticePipeline(client=FakeKKJClient()).get_notice_details(args, store)
        assert notice.result_key == "1"

    @pytest.mark.asyncio
    async def test_hit_ignores_hints(self, store, notice_pdf):
        await store.write_search_result({"Query": "x"}, [notice_pdf])
        client = FakeKKJClient()
        await NoticePipeline(client=client).get_notice_details(
            GetNoticeDetailsArgs(result_id="1", query="something else"), store,
        )
        assert client.calls == []


class TestGuidedMiss:
    @pytest.mark.asyncio
    async def test_miss_without_hints_is_guided(self, store):
        client = FakeKKJClient()

        with pytest.raises(CacheMissGuidedError) as exc_info:
            await NoticePipeline(client=client).get_notice_details(
                GetNoticeDetailsArgs(result_id="12345"), store,
            )

        message = str(exc_info.value)
        assert '"12345"' in message
        assert "search_notices" in message
        for hint in ("project_name", "organization_name", "query", "lg_code"):
            assert hint in message
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_empty_hints_count_as_missing(self, store):
        client = FakeKKJClient()
        with pytest.raises(CacheMissGuidedError):
            await NoticePipeline(client=client).get_notice_details(
                GetNoticeDetailsArgs(result_id="5", query="", lg_code=""), store,
            )
        assert client.calls == []


class TestFallbackSearch:
    @pytest.mark.asyncio
    async def test_fallback_finds_and_populates_store(self, store):
        client = FakeKKJClient([make_notice("3"), make_notice("12345", ProjectName="道路整備")])
        pipeline = NoticePipeline(client=client)

        notice = await pipeline.get_notice_details(
            GetNoticeDetailsArgs(result_id="12345", project_name="道路整備"), store,
        )

        assert notice.ProjectName == "道路整備"
        assert client.calls == [{"Count": "100", "Project_Name": "道路整備"}]
        assert [n.result_key for n in store.notices] == ["3", "12345"]

        # Second lookup is served from the store
        again = await pipeline.get_notice_details(GetNoticeDetailsArgs(result_id="12345"), store)
        assert again.ProjectName == "道路整備"
        assert len(client.calls) == 1

    @pytest.mark.asyncio
    async def test_fallback_sends_only_supplied_hints(self, store):
        client = FakeKKJClient([make_notice("9")])
        await NoticePipeline(client=client).get_notice_details(
            GetNoticeDetailsArgs(result_id="9", organization_name="国土交通省", lg_code="13"), store,
        )
        assert client.calls == [{"Count": "100", "Organization_Name": "国土交通省", "LG_Code": "13"}]

    @pytest.mark.asyncio
    async def test_fallback_matches_numeric_upstream_id(self, store):
        client = FakeKKJClient([make_notice(42)])
        notice = await NoticePipeline(client=client).get_notice_details(
            GetNoticeDetailsArgs(result_id="42", query="工事"), store,
        )
        assert notice.ResultId == 42

    @pytest.mark.asyncio
    async def test_merge_keeps_existing_entries(self, store):
        original = make_notice("2", ProjectName="from search")
        await store.write_search_result({"Query": "x"}, [make_notice("1"), original])
        client = FakeKKJClient([make_notice("2", ProjectName="from fallback"), make_notice("99")])

        await NoticePipeline(client=client).get_notice_details(
            GetNoticeDetailsArgs(result_id="99", query="工事"), store,
        )

        assert [n.result_key for n in store.notices] == ["1", "2", "99"]
        assert (await store.lookup_by_id("2")).ProjectName == "from search"

    @pytest.mark.asyncio
    async def test_not_found_reports_result_count(self, store):
        client = FakeKKJClient(make_notices(3))

        with pytest.raises(FallbackNotFoundError) as exc_info:
            await NoticePipeline(client=client).get_notice_details(
                GetNoticeDetailsArgs(result_id="777", query="工事"), store,
            )

        assert exc_info.value.result_count == 3
        assert "returned 3 notices" in str(exc_info.value)
        assert '"777"' in str(exc_info.value)
        assert store.notices == []

    @pytest.mark.asyncio
    async def test_not_found_on_empty_result(self, store):
        with pytest.raises(FallbackNotFoundError) as exc_info:
            await NoticePipeline(client=FakeKKJClient([])).get_notice_details(
                GetNoticeDetailsArgs(result_id="1", query="工事"), store,
            )
        assert exc_info.value.result_count == 0

    @pytest.mark.asyncio
    async def test_api_failure_wrapped(self, store):
        cause = UpstreamHttpError(503)
        client = FakeKKJClient(cause)

        with pytest.raises(FallbackApiError) as exc_info:
            await NoticePipeline(client=client).get_notice_details(
                GetNoticeDetailsArgs(result_id="12345", query="工事"), store,
            )

        error = exc_info.value
        assert not isinstance(error, FallbackNotFoundError)
        assert error.cause is cause
        assert '"12345"' in str(error)
        assert "status: 503" in str(error)
        assert store.notices == []


class TestSharedFallback:
    @pytest.mark.asyncio
    async def test_fallback_writes_notice_entries(self):
        store = SharedResultStore(CacheService(), search_ttl=60, notice_ttl=120)
        client = FakeKKJClient([make_notice("5"), make_notice("6")])

        await NoticePipeline(client=client).get_notice_details(
            GetNoticeDetailsArgs(result_id="6", query="工事"), store,
        )

        assert (await store.lookup_by_id("5")) is not None
        assert (await store.lookup_by_id("6")).result_key == "6"
