"""KKJ notice search backend — FastAPI application entry point.

Exposes the search_notices / get_notice_details tools over HTTP:
  GET  /health
  GET  /tools
  POST /tools/{name}   body = tool arguments, header X-Session-Id picks the session store
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.orchestrator.router import ToolRouter
from app.services.auth import require_api_key
from app.services.cache import cache_service
from app.services.result_store import ResultStore, SessionRegistry, create_shared_store

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger("kkj")

DEFAULT_SESSION = "default"

router = ToolRouter()
session_registry = SessionRegistry()
shared_store = create_shared_store(cache_service)


def get_store(request: Request) -> ResultStore:
    """Result store for this request: the shared store, or the caller's session store."""
    if settings.store_backend == "shared":
        return shared_store
    session_id = request.headers.get("x-session-id") or DEFAULT_SESSION
    return session_registry.get(session_id)


# ═══════════════ LIFESPAN ═══════════════

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("KKJ backend starting | store=%s", settings.store_backend)

    # Redis is only needed by the shared store (graceful degradation if unavailable)
    if settings.store_backend == "shared":
        redis_ok = await cache_service.connect()
        logger.info("Redis: %s", "connected" if redis_ok else "unavailable (using in-memory fallback)")

    yield

    await cache_service.disconnect()
    logger.info("KKJ backend shutting down")


# ═══════════════ APP ═══════════════

app = FastAPI(
    title="KKJ Notice Search API",
    description="Public procurement notice search tools backed by the KKJ portal API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Session-Id"],
)


# ═══════════════ ENDPOINTS ═══════════════

@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": "kkj-notice-search",
        "store": settings.store_backend,
    }


@app.get("/tools", dependencies=[Depends(require_api_key)])
async def list_tools():
    return {"tools": router.list_tools()}


@app.post("/tools/{name}", dependencies=[Depends(require_api_key)])
async def call_tool(name: str, request: Request):
    if not router.has_tool(name):
        return JSONResponse(status_code=404, content={"error": f"Unknown tool: {name}"})

    try:
        body = await request.body()
        arguments = await request.json() if body else {}
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Request body must be a JSON object."})
    if not isinstance(arguments, dict):
        return JSONResponse(status_code=400, content={"error": "Request body must be a JSON object."})

    start = time.monotonic()
    result = await router.call_tool(name, arguments, get_store(request))
    elapsed_ms = int((time.monotonic() - start) * 1000)
    logger.info("Tool call | tool=%s | error=%s | %dms", name, result["isError"], elapsed_ms)
    return JSONResponse(content=result)
