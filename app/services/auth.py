"""Bearer API key authentication for the HTTP tool endpoints.

Enabled only when ENVIRONMENT=production and API_KEYS holds at least one key.
"""

import logging

from fastapi import HTTPException, Request

from app.config import Settings, settings

logger = logging.getLogger(__name__)


def bearer_token(authorization: str | None) -> str | None:
    if authorization and authorization.startswith("Bearer "):
        return authorization[len("Bearer "):].strip() or None
    return None


def validate_api_key(token: str | None, config: Settings = settings) -> bool:
    if not config.auth_enabled:
        return True
    if not token:
        return False
    return token in config.api_key_list


async def require_api_key(request: Request):
    """FastAPI dependency guarding the /tools endpoints."""
    token = bearer_token(request.headers.get("authorization"))
    if not validate_api_key(token):
        logger.warning("Rejected request | path=%s", request.url.path)
        raise HTTPException(
            status_code=401,
            detail={"error": "Unauthorized", "message": "Invalid or missing API key"},
        )
