# pantrychef/services/restriction_service.py
"""
Allergy and dietary restriction operations for a single owning user.

Same conventions as PantryService: reads propagate store errors, mutations
return normalized result dicts (error codes: not_found, not_owner,
unknown_ingredient, already_restricted, storage_unavailable) and invalidate
the owner's cached recommendations.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pantrychef.exceptions import FOREIGN_KEY_VIOLATION, IntegrityViolation, StorageUnavailable
from pantrychef.schemas import Restriction, RestrictionType
from pantrychef.services.recommendation_service import RecommendationService
from pantrychef.services.utils import clean_text, make_result, run_blocking
from pantrychef.stores import CatalogStore, get_store

logger = logging.getLogger(__name__)


class RestrictionService:

    def __init__(
        self,
        store: Optional[CatalogStore] = None,
        recommendations: Optional[RecommendationService] = None,
    ):
        self.store = store or get_store()
        self.recommendations = recommendations

    def _changed(self, user_id: str) -> None:
        if self.recommendations is not None:
            self.recommendations.invalidate(user_id)

    async def list_restrictions(self, user_id: str) -> List[Restriction]:
        return await run_blocking(self.store.list_restrictions, user_id)

    async def add_restriction(
        self,
        user_id: str,
        ingredient_id: str,
        restriction_type: RestrictionType,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        logger.info(
            "add_restriction user=%s ingredient=%s type=%s",
            user_id,
            ingredient_id,
            restriction_type,
        )
        diag: Dict[str, Any] = {"ingredient_id": ingredient_id}
        try:
            kind = RestrictionType(restriction_type)
        except ValueError:
            diag["restriction_type"] = str(restriction_type)
            return make_result(False, error="invalid_restriction_type", diagnostics=diag)

        try:
            ingredient = await run_blocking(self.store.get_ingredient, ingredient_id)
            if ingredient is None:
                return make_result(False, error="unknown_ingredient", diagnostics=diag)
            restriction = await run_blocking(
                self.store.add_restriction, user_id, ingredient_id, kind, clean_text(notes)
            )
        except IntegrityViolation as exc:
            diag.update(exc.diagnostics)
            if exc.diagnostics.get("code") == FOREIGN_KEY_VIOLATION:
                return make_result(False, error="unknown_ingredient", diagnostics=diag)
            return make_result(False, error="already_restricted", diagnostics=diag)
        except StorageUnavailable as exc:
            diag.update(exc.diagnostics)
            return make_result(False, error="storage_unavailable", diagnostics=diag)

        self._changed(user_id)
        return make_result(True, data=restriction, diagnostics=diag)

    async def remove_restriction(self, user_id: str, restriction_id: str) -> Dict[str, Any]:
        logger.info("remove_restriction user=%s restriction=%s", user_id, restriction_id)
        diag = {"restriction_id": restriction_id}
        try:
            existing = await run_blocking(self.store.get_restriction, restriction_id)
            if existing is None:
                return make_result(False, error="not_found", diagnostics=diag)
            if existing.user_id != user_id:
                logger.warning(
                    "Restriction ownership check failed restriction=%s acting_user=%s",
                    restriction_id,
                    user_id,
                )
                return make_result(False, error="not_owner", diagnostics=diag)
            deleted = await run_blocking(self.store.delete_restriction, user_id, restriction_id)
        except StorageUnavailable as exc:
            diag.update(exc.diagnostics)
            return make_result(False, error="storage_unavailable", diagnostics=diag)

        if not deleted:
            return make_result(False, error="not_found", diagnostics=diag)
        self._changed(user_id)
        return make_result(True, data={"id": restriction_id})
