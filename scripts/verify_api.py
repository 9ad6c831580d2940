#!/usr/bin/env python3
"""Live KKJ API verification script — run outside the sandbox with network access.

Usage:
  python scripts/verify_api.py

Steps:
  Step 1: Show configuration
  Step 2: Raw KKJ search (no cache)
  Step 3: search_notices page 1 + page 2 through a session store
  Step 4: get_notice_details from the cache
  Step 5: get_notice_details via fallback search on an empty store
"""

import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

SAMPLE_QUERY = "工事"
SAMPLE_LG_CODE = "13"


def step_header(n: int, title: str) -> None:
    print(f"\n{'='*60}")
    print(f"  Step {n}: {title}")
    print(f"{'='*60}\n")


def ok(msg: str) -> None:
    print(f"  ✅ {msg}")


def fail(msg: str) -> None:
    print(f"  ❌ {msg}")


def info(msg: str) -> None:
    print(f"  ℹ️  {msg}")


async def step1_show_config():
    step_header(1, "Configuration")
    from app.config import settings

    ok(f"KKJ API: {settings.kkj_api_base_url} (timeout {settings.kkj_timeout_seconds}s)")
    ok(f"Count hint: {settings.search_count_hint} | page size: {settings.page_size}")
    ok(f"Store backend: {settings.store_backend}")
    return True


async def step2_raw_search():
    step_header(2, "Raw KKJ search")
    from app.errors import UpstreamError
    from app.integrations.kkj_api import KKJClient

    client = KKJClient()
    info(f"Searching: Query='{SAMPLE_QUERY}' LG_Code={SAMPLE_LG_CODE}")
    try:
        notices = await client.search({"Query": SAMPLE_QUERY, "LG_Code": SAMPLE_LG_CODE, "Count": "20"})
    except UpstreamError as e:
        fail(str(e))
        return None

    if notices:
        ok(f"Got {len(notices)} notices")
        for n in notices[:3]:
            print(f"    - [{n.ResultId}] {n.ProjectName[:50]} | {n.OrganizationName[:30]}")
        return notices
    fail("No results returned — check network connectivity")
    return None


async def step3_paginated_search(store):
    step_header(3, "search_notices pages 1 and 2")
    from app.errors import KKJError
    from app.orchestrator.schemas import SearchNoticesArgs
    from app.pipelines.notices import NoticePipeline

    pipeline = NoticePipeline()
    try:
        page1 = await pipeline.search_notices(SearchNoticesArgs(query=SAMPLE_QUERY, lg_code=SAMPLE_LG_CODE), store)
    except KKJError as e:
        fail(str(e))
        return False
    ok(f"Page 1: {len(page1.results)} items of {page1.totalAvailable} | next={page1.hasNextPage}")
    if page1.hasNextPage:
        page2 = await pipeline.search_notices(
            SearchNoticesArgs(query=SAMPLE_QUERY, lg_code=SAMPLE_LG_CODE, page=2), store,
        )
        ok(f"Page 2: {len(page2.results)} items (served from the store)")
    return bool(page1.results)


async def step4_cached_detail(store, result_id):
    step_header(4, "get_notice_details from cache")
    from app.errors import KKJError
    from app.orchestrator.schemas import GetNoticeDetailsArgs
    from app.pipelines.notices import NoticePipeline

    try:
        notice = await NoticePipeline().get_notice_details(GetNoticeDetailsArgs(result_id=result_id), store)
    except KKJError as e:
        fail(str(e))
        return False
    ok(f"[{notice.ResultId}] {notice.ProjectName[:60]}")
    return True


async def step5_fallback_detail(result_id):
    step_header(5, "get_notice_details via fallback search")
    from app.errors import KKJError
    from app.orchestrator.schemas import GetNoticeDetailsArgs
    from app.pipelines.notices import NoticePipeline
    from app.services.result_store import SessionResultStore

    store = SessionResultStore()
    args = GetNoticeDetailsArgs(result_id=result_id, query=SAMPLE_QUERY, lg_code=SAMPLE_LG_CODE)
    try:
        notice = await NoticePipeline().get_notice_details(args, store)
    except KKJError as e:
        fail(str(e))
        return False
    ok(f"[{notice.ResultId}] {notice.ProjectName[:60]} | store now holds {len(store.notices)}")
    return True


async def main():
    print("\n🏛️  KKJ Notice Search — Live API Verification")
    print("=" * 60)

    from app.services.result_store import SessionResultStore

    results = {}
    results[1] = await step1_show_config()

    notices = await step2_raw_search()
    results[2] = bool(notices)

    store = SessionResultStore()
    results[3] = await step3_paginated_search(store)

    if not notices:
        print("\n⚠️  Skipping detail tests (no notices to look up)")
        results[4] = results[5] = False
    else:
        result_id = str(notices[0].ResultId)
        results[4] = await step4_cached_detail(store, result_id)
        results[5] = await step5_fallback_detail(result_id)

    # Summary
    print(f"\n{'='*60}")
    print("  SUMMARY")
    print(f"{'='*60}")
    for step_n, passed in sorted(results.items()):
        status = "✅ PASS" if passed else "❌ FAIL"
        print(f"  Step {step_n}: {status}")

    total_passed = sum(1 for v in results.values() if v)
    total = len(results)
    print(f"\n  {total_passed}/{total} steps passed")
    print(f"{'='*60}\n")

    sys.exit(0 if all(results.values()) else 1)


if __name__ == "__main__":
    asyncio.run(main())
