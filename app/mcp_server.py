"""Stdio agent-tool server (FastMCP).

One process serves one agent session, so the session store lives as long as
the process. With STORE_BACKEND=shared the Redis-backed store is used instead.

Run: python -m app.mcp_server
"""

import logging
import sys
from typing import Literal

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import ValidationError as ArgumentsError

from app.config import settings
from app.errors import KKJError
from app.orchestrator.router import DETAILS_DESCRIPTION, SEARCH_DESCRIPTION, ToolRouter
from app.services.cache import cache_service
from app.services.result_store import ResultStore, SessionResultStore, create_shared_store

# stdout carries the protocol; logs go to stderr
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("kkj")

mcp = FastMCP("kkj-mcp-server")
router = ToolRouter()

if settings.store_backend == "shared":
    store: ResultStore = create_shared_store(cache_service)
else:
    store = SessionResultStore()


_backend_ready = False


async def _ensure_backend():
    # Connect inside the server loop so the Redis pool belongs to it
    global _backend_ready
    if settings.store_backend == "shared" and not _backend_ready:
        _backend_ready = True
        await cache_service.connect()


async def _run(name: str, arguments: dict) -> dict:
    await _ensure_backend()
    try:
        return await router.dispatch(name, arguments, store)
    except (KKJError, ArgumentsError) as e:
        raise ToolError(str(e)) from e


@mcp.tool(description=SEARCH_DESCRIPTION)
async def search_notices(
    query: str | None = None,
    project_name: str | None = None,
    organization_name: str | None = None,
    lg_code: str | None = None,
    category: Literal["1", "2", "3"] | None = None,
    procedure_type: Literal["1", "2"] | None = None,
    certification: Literal["A", "B", "C", "D"] | None = None,
    cft_issue_date: str | None = None,
    page: int = 1,
    description_length: int = 100,
) -> dict:
    arguments = {
        "query": query,
        "project_name": project_name,
        "organization_name": organization_name,
        "lg_code": lg_code,
        "category": category,
        "procedure_type": procedure_type,
        "certification": certification,
        "cft_issue_date": cft_issue_date,
        "page": page,
        "description_length": description_length,
    }
    return await _run("search_notices", arguments)


@mcp.tool(description=DETAILS_DESCRIPTION)
async def get_notice_details(
    result_id: str,
    project_name: str | None = None,
    organization_name: str | None = None,
    query: str | None = None,
    lg_code: str | None = None,
) -> dict:
    arguments = {
        "result_id": result_id,
        "project_name": project_name,
        "organization_name": organization_name,
        "query": query,
        "lg_code": lg_code,
    }
    return await _run("get_notice_details", arguments)


def main():
    logger.info("KKJ MCP server starting | store=%s", store.name)
    mcp.run()


if __name__ == "__main__":
    main()
