# pantrychef/services/pantry_service.py
"""
Pantry operations for a single owning user.

Reads return records and let store errors propagate. Mutations return the
normalized result shape ({"ok", "data"/"error", "diagnostics"}) so the API
layer can map error codes onto HTTP statuses:

    not_found, not_owner, unknown_ingredient, already_in_pantry,
    invalid_quantity, storage_unavailable

Every successful mutation invalidates the owner's cached recommendations.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pantrychef.exceptions import FOREIGN_KEY_VIOLATION, IntegrityViolation, StorageUnavailable
from pantrychef.schemas import PantryEntry
from pantrychef.services.recommendation_service import RecommendationService
from pantrychef.services.utils import clean_text, make_result, run_blocking
from pantrychef.stores import CatalogStore, get_store

logger = logging.getLogger(__name__)


class PantryService:

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

    async def _owned_item(self, user_id: str, item_id: str) -> Dict[str, Any]:
        """Fetch an item and check ownership; returns a result dict."""
        item = await run_blocking(self.store.get_pantry_item, item_id)
        if item is None:
            return make_result(False, error="not_found", diagnostics={"item_id": item_id})
        if item.user_id != user_id:
            logger.warning(
                "Pantry ownership check failed item=%s acting_user=%s", item_id, user_id
            )
            return make_result(False, error="not_owner", diagnostics={"item_id": item_id})
        return make_result(True, data=item)

    # -----------------------
    # Reads
    # -----------------------
    async def list_items(self, user_id: str) -> List[PantryEntry]:
        return await run_blocking(self.store.list_pantry, user_id)

    # -----------------------
    # Mutations
    # -----------------------
    async def add_item(
        self,
        user_id: str,
        ingredient_id: str,
        quantity: Optional[float] = 1,
        unit: Optional[str] = None,
    ) -> Dict[str, Any]:
        logger.info("add_item user=%s ingredient=%s", user_id, ingredient_id)
        diag: Dict[str, Any] = {"ingredient_id": ingredient_id}
        if quantity is not None and quantity <= 0:
            return make_result(False, error="invalid_quantity", diagnostics=diag)

        try:
            ingredient = await run_blocking(self.store.get_ingredient, ingredient_id)
            if ingredient is None:
                return make_result(False, error="unknown_ingredient", diagnostics=diag)
            entry = await run_blocking(
                self.store.add_pantry_item, user_id, ingredient_id, quantity, clean_text(unit)
            )
        except IntegrityViolation as exc:
            diag.update(exc.diagnostics)
            # the ingredient was deleted between the lookup and the insert
            if exc.diagnostics.get("code") == FOREIGN_KEY_VIOLATION:
                return make_result(False, error="unknown_ingredient", diagnostics=diag)
            return make_result(False, error="already_in_pantry", diagnostics=diag)
        except StorageUnavailable as exc:
            diag.update(exc.diagnostics)
            return make_result(False, error="storage_unavailable", diagnostics=diag)

        self._changed(user_id)
        return make_result(True, data=entry, diagnostics=diag)

    async def update_item(
        self,
        user_id: str,
        item_id: str,
        quantity: Optional[float] = None,
        unit: Optional[str] = None,
    ) -> Dict[str, Any]:
        logger.info("update_item user=%s item=%s", user_id, item_id)
        if quantity is not None and quantity <= 0:
            return make_result(False, error="invalid_quantity", diagnostics={"item_id": item_id})

        changes: Dict[str, Any] = {}
        if quantity is not None:
            changes["quantity"] = quantity
        if unit is not None:
            changes["unit"] = clean_text(unit)

        try:
            owned = await self._owned_item(user_id, item_id)
            if not owned["ok"]:
                return owned
            if not changes:
                return make_result(True, data=owned["data"], diagnostics={"note": "no_changes"})
            entry = await run_blocking(self.store.update_pantry_item, user_id, item_id, changes)
        except StorageUnavailable as exc:
            return make_result(False, error="storage_unavailable", diagnostics=exc.diagnostics)

        if entry is None:
            # deleted between the ownership check and the update
            return make_result(False, error="not_found", diagnostics={"item_id": item_id})
        self._changed(user_id)
        return make_result(True, data=entry, diagnostics={"changed": sorted(changes)})

    async def remove_item(self, user_id: str, item_id: str) -> Dict[str, Any]:
        logger.info("remove_item user=%s item=%s", user_id, item_id)
        try:
            owned = await self._owned_item(user_id, item_id)
            if not owned["ok"]:
                return owned
            deleted = await run_blocking(self.store.delete_pantry_item, user_id, item_id)
        except StorageUnavailable as exc:
            return make_result(False, error="storage_unavailable", diagnostics=exc.diagnostics)

        if not deleted:
            return make_result(False, error="not_found", diagnostics={"item_id": item_id})
        self._changed(user_id)
        return make_result(True, data={"id": item_id})
