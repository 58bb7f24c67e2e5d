# pantrychef/api/deps.py
"""
FastAPI dependencies: caller identity and service singletons.

Identity is always explicit: every handler receives the acting user id from
`get_current_user_id` and passes it down. Tests swap any of these through
`app.dependency_overrides`.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import Header, HTTPException

from pantrychef.config.settings import settings
from pantrychef.config.supabase import supabase_client
from pantrychef.exceptions import AuthenticationError, StorageUnavailable
from pantrychef.services.catalog_service import CatalogService
from pantrychef.services.pantry_service import PantryService
from pantrychef.services.recommendation_service import RecommendationService
from pantrychef.services.restriction_service import RestrictionService
from pantrychef.services.utils import run_blocking

logger = logging.getLogger(__name__)

# mutation error code -> HTTP status
ERROR_STATUS: Dict[str, int] = {
    "not_found": 404,
    "not_owner": 403,
    "unknown_ingredient": 422,
    "invalid_quantity": 422,
    "invalid_restriction_type": 422,
    "already_in_pantry": 409,
    "already_restricted": 409,
    "storage_unavailable": 503,
}


def _resolve_access_token(token: str) -> str:
    """Ask Supabase Auth who owns `token`; blocking."""
    client = supabase_client.client
    if client is None:
        raise StorageUnavailable("supabase_client_unavailable")
    try:
        resp = client.auth.get_user(token)
    except Exception as exc:
        logger.info("Access token rejected: %s", exc)
        raise AuthenticationError("invalid_token") from exc
    user = getattr(resp, "user", None)
    user_id = getattr(user, "id", None)
    if not user_id:
        raise AuthenticationError("invalid_token")
    return str(user_id)


async def get_current_user_id(
    authorization: Optional[str] = Header(default=None),
    x_user_id: Optional[str] = Header(default=None),
) -> str:
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()
        if token:
            return await run_blocking(_resolve_access_token, token)
    if settings.allow_header_auth and x_user_id and x_user_id.strip():
        return x_user_id.strip()
    raise AuthenticationError("missing_credentials")


def raise_for_result(res: Dict[str, Any]) -> Any:
    """Return `res["data"]` or raise the HTTPException matching its error code."""
    if res.get("ok"):
        return res.get("data")
    error = res.get("error") or "unknown_error"
    raise HTTPException(
        status_code=ERROR_STATUS.get(error, 500),
        detail={"error": error, "diagnostics": res.get("diagnostics") or {}},
    )


@lru_cache(maxsize=1)
def get_recommendation_service() -> RecommendationService:
    return RecommendationService()


@lru_cache(maxsize=1)
def get_pantry_service() -> PantryService:
    return PantryService(recommendations=get_recommendation_service())


@lru_cache(maxsize=1)
def get_restriction_service() -> RestrictionService:
    return RestrictionService(recommendations=get_recommendation_service())


@lru_cache(maxsize=1)
def get_catalog_service() -> CatalogService:
    return CatalogService(recommendations=get_recommendation_service())
