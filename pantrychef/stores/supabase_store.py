# pantrychef/stores/supabase_store.py
"""
Catalog/pantry/restriction store backed by Supabase (PostgREST via supabase-py).

Notes:
- All calls are blocking SDK calls; services run them in a worker thread.
- Responses may be an object with `.data` or a dict with "data".
- PostgREST errors with a Postgres integrity SQLSTATE become IntegrityViolation;
  everything else becomes StorageUnavailable. Nothing is retried.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from postgrest.exceptions import APIError

from pantrychef.config.supabase import supabase_client
from pantrychef.exceptions import (
    CHECK_VIOLATION,
    FOREIGN_KEY_VIOLATION,
    NOT_NULL_VIOLATION,
    UNIQUE_VIOLATION,
    IntegrityViolation,
    StorageUnavailable,
)
from pantrychef.schemas import (
    Ingredient,
    PantryEntry,
    Recipe,
    Requirement,
    Restriction,
    RestrictionType,
)
from pantrychef.stores.base import CatalogStore, number_components

logger = logging.getLogger(__name__)

_INTEGRITY_CODES = {UNIQUE_VIOLATION, FOREIGN_KEY_VIOLATION, CHECK_VIOLATION, NOT_NULL_VIOLATION}

# PostgREST truncates unbounded selects at the project's max-rows (1000 by default)
DEFAULT_PAGE_SIZE = 1000

_RECIPE_COLUMNS = "id, title, description, instructions, prep_time, cook_time, servings, image_url"
_REQUIREMENT_COLUMNS = (
    "id, recipe_id, ingredient_id, quantity, unit, position, ingredients(name)"
)
_PANTRY_COLUMNS = "id, user_id, ingredient_id, quantity, unit, added_at, ingredients(name, category)"
_RESTRICTION_COLUMNS = (
    "id, user_id, ingredient_id, restriction_type, notes, created_at, ingredients(name)"
)


def _parse_rows(resp: Any) -> List[Dict[str, Any]]:
    """Turn Supabase SDK responses (object with .data or dict) into a list of rows."""
    if resp is None:
        return []
    if hasattr(resp, "data"):
        data = getattr(resp, "data")
    elif isinstance(resp, dict):
        data = resp.get("data")
    else:
        raise StorageUnavailable(
            "unexpected_response_shape", {"raw_preview": str(resp)[:200]}
        )
    if data is None:
        return []
    if isinstance(data, dict):
        return [data]
    return list(data)


def _embedded(row: Dict[str, Any], key: str = "ingredients") -> Dict[str, Any]:
    value = row.get(key)
    if isinstance(value, list):
        value = value[0] if value else None
    return value or {}


def _requirement_from_row(row: Dict[str, Any]) -> Requirement:
    return Requirement(
        id=row.get("id"),
        recipe_id=row["recipe_id"],
        ingredient_id=row["ingredient_id"],
        quantity=row["quantity"],
        unit=row.get("unit"),
        position=row.get("position") or 0,
        ingredient_name=_embedded(row).get("name"),
    )


def _pantry_from_row(row: Dict[str, Any]) -> PantryEntry:
    ing = _embedded(row)
    return PantryEntry(
        id=row.get("id"),
        user_id=row["user_id"],
        ingredient_id=row["ingredient_id"],
        quantity=row.get("quantity"),
        unit=row.get("unit"),
        ingredient_name=ing.get("name"),
        ingredient_category=ing.get("category"),
        added_at=row.get("added_at"),
    )


def _restriction_from_row(row: Dict[str, Any]) -> Restriction:
    return Restriction(
        id=row.get("id"),
        user_id=row["user_id"],
        ingredient_id=row["ingredient_id"],
        restriction_type=row["restriction_type"],
        notes=row.get("notes"),
        ingredient_name=_embedded(row).get("name"),
        created_at=row.get("created_at"),
    )


class SupabaseStore(CatalogStore):

    backend_name = "supabase"

    def __init__(self, client: Any = None, page_size: int = DEFAULT_PAGE_SIZE):
        # explicit client (tests) wins over the global wrapper
        self._client = client
        self.page_size = page_size

    @property
    def client(self) -> Any:
        if self._client is not None:
            return self._client
        return supabase_client.client

    # -----------------------
    # Internal helpers
    # -----------------------
    def _table(self, name: str):
        client = self.client
        if client is None:
            raise StorageUnavailable("supabase_client_unavailable")
        return client.table(name)

    def _execute(self, query: Any, action: str) -> List[Dict[str, Any]]:
        try:
            resp = query.execute()
        except APIError as exc:
            code = getattr(exc, "code", None)
            if code in _INTEGRITY_CODES:
                logger.info("%s rejected by integrity constraint code=%s", action, code)
                raise IntegrityViolation(
                    f"{action}_conflict", {"code": code, "message": getattr(exc, "message", None)}
                ) from exc
            logger.exception("%s failed: %s", action, exc)
            raise StorageUnavailable(f"{action}_failed", {"code": code}) from exc
        except Exception as exc:
            logger.exception("%s failed: %s", action, exc)
            raise StorageUnavailable(f"{action}_failed", {"exception": str(exc)}) from exc
        return _parse_rows(resp)

    def _first(self, rows: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        return rows[0] if rows else None

    def _fetch_all(self, build: Callable[[], Any], action: str) -> List[Dict[str, Any]]:
        """
        Page through a select with `.range()` until a short page comes back.

        `build` must return a fresh, totally ordered query each call; without
        a stable order rows can repeat or go missing between pages.
        """
        rows: List[Dict[str, Any]] = []
        start = 0
        while True:
            page = self._execute(build().range(start, start + self.page_size - 1), action)
            rows.extend(page)
            if len(page) < self.page_size:
                return rows
            start += self.page_size

    # -----------------------
    # Ingredient catalog
    # -----------------------
    def list_ingredients(self) -> List[Ingredient]:
        rows = self._fetch_all(
            lambda: self._table("ingredients").select("id, name, category").order("name"),
            "list_ingredients",
        )
        return [Ingredient(**row) for row in rows]

    def get_ingredient(self, ingredient_id: str) -> Optional[Ingredient]:
        rows = self._execute(
            self._table("ingredients")
            .select("id, name, category")
            .eq("id", ingredient_id)
            .limit(1),
            "get_ingredient",
        )
        row = self._first(rows)
        return Ingredient(**row) if row else None

    def add_ingredients(self, rows: Sequence[Dict[str, Any]]) -> List[Ingredient]:
        if not rows:
            return []
        inserted = self._execute(
            self._table("ingredients").insert(list(rows)), "add_ingredients"
        )
        return [
            Ingredient(id=r["id"], name=r["name"], category=r.get("category"))
            for r in inserted
        ]

    # -----------------------
    # Recipe catalog
    # -----------------------
    def list_recipes(self) -> List[Recipe]:
        rows = self._fetch_all(
            lambda: self._table("recipes").select(_RECIPE_COLUMNS).order("title").order("id"),
            "list_recipes",
        )
        return [Recipe(**row) for row in rows]

    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        rows = self._execute(
            self._table("recipes").select(_RECIPE_COLUMNS).eq("id", recipe_id).limit(1),
            "get_recipe",
        )
        row = self._first(rows)
        return Recipe(**row) if row else None

    def list_requirements(
        self, recipe_ids: Optional[Sequence[str]] = None
    ) -> List[Requirement]:
        if recipe_ids is not None and not recipe_ids:
            return []

        def build():
            query = self._table("recipe_components").select(_REQUIREMENT_COLUMNS)
            if recipe_ids is not None:
                query = query.in_("recipe_id", list(recipe_ids))
            return query.order("recipe_id").order("position").order("id")

        rows = self._fetch_all(build, "list_requirements")
        return [_requirement_from_row(row) for row in rows]

    def add_recipe(self, row: Dict[str, Any]) -> Recipe:
        inserted = self._execute(self._table("recipes").insert(dict(row)), "add_recipe")
        if not inserted:
            raise StorageUnavailable("add_recipe_no_data")
        return Recipe(**inserted[0])

    def add_requirements(self, rows: Sequence[Dict[str, Any]]) -> List[Requirement]:
        if not rows:
            return []
        inserted = self._execute(
            self._table("recipe_components").insert(number_components(rows)),
            "add_requirements",
        )
        return [_requirement_from_row(r) for r in inserted]

    # -----------------------
    # Pantry
    # -----------------------
    def list_pantry(self, user_id: str) -> List[PantryEntry]:
        rows = self._fetch_all(
            lambda: self._table("user_pantry")
            .select(_PANTRY_COLUMNS)
            .eq("user_id", user_id)
            .order("added_at")
            .order("id"),
            "list_pantry",
        )
        return [_pantry_from_row(row) for row in rows]

    def get_pantry_item(self, item_id: str) -> Optional[PantryEntry]:
        rows = self._execute(
            self._table("user_pantry").select(_PANTRY_COLUMNS).eq("id", item_id).limit(1),
            "get_pantry_item",
        )
        row = self._first(rows)
        return _pantry_from_row(row) if row else None

    def add_pantry_item(
        self,
        user_id: str,
        ingredient_id: str,
        quantity: Optional[float] = None,
        unit: Optional[str] = None,
    ) -> PantryEntry:
        payload = {
            "user_id": user_id,
            "ingredient_id": ingredient_id,
            "quantity": quantity,
            "unit": unit,
        }
        inserted = self._execute(self._table("user_pantry").insert(payload), "add_pantry_item")
        row = self._first(inserted)
        if row is None:
            raise StorageUnavailable("add_pantry_item_no_data")
        # re-read to pick up the embedded ingredient name
        return self.get_pantry_item(row["id"]) or _pantry_from_row(row)

    def update_pantry_item(
        self, user_id: str, item_id: str, changes: Dict[str, Any]
    ) -> Optional[PantryEntry]:
        if changes:
            updated = self._execute(
                self._table("user_pantry")
                .update(dict(changes))
                .eq("id", item_id)
                .eq("user_id", user_id),
                "update_pantry_item",
            )
            if not updated:
                return None
        entry = self.get_pantry_item(item_id)
        if entry is None or entry.user_id != user_id:
            return None
        return entry

    def delete_pantry_item(self, user_id: str, item_id: str) -> bool:
        deleted = self._execute(
            self._table("user_pantry").delete().eq("id", item_id).eq("user_id", user_id),
            "delete_pantry_item",
        )
        return bool(deleted)

    # -----------------------
    # Restrictions
    # -----------------------
    def list_restrictions(self, user_id: str) -> List[Restriction]:
        rows = self._fetch_all(
            lambda: self._table("user_restrictions")
            .select(_RESTRICTION_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at")
            .order("id"),
            "list_restrictions",
        )
        return [_restriction_from_row(row) for row in rows]

    def get_restriction(self, restriction_id: str) -> Optional[Restriction]:
        rows = self._execute(
            self._table("user_restrictions")
            .select(_RESTRICTION_COLUMNS)
            .eq("id", restriction_id)
            .limit(1),
            "get_restriction",
        )
        row = self._first(rows)
        return _restriction_from_row(row) if row else None

    def add_restriction(
        self,
        user_id: str,
        ingredient_id: str,
        restriction_type: RestrictionType,
        notes: Optional[str] = None,
    ) -> Restriction:
        payload = {
            "user_id": user_id,
            "ingredient_id": ingredient_id,
            "restriction_type": RestrictionType(restriction_type).value,
            "notes": notes,
        }
        inserted = self._execute(
            self._table("user_restrictions").insert(payload), "add_restriction"
        )
        row = self._first(inserted)
        if row is None:
            raise StorageUnavailable("add_restriction_no_data")
        return self.get_restriction(row["id"]) or _restriction_from_row(row)

    def delete_restriction(self, user_id: str, restriction_id: str) -> bool:
        deleted = self._execute(
            self._table("user_restrictions")
            .delete()
            .eq("id", restriction_id)
            .eq("user_id", user_id),
            "delete_restriction",
        )
        return bool(deleted)

    # -----------------------
    # Health
    # -----------------------
    def health_check(self) -> bool:
        """
        One-row select against `ingredients`. Any exception or error-shaped
        response counts as unhealthy.
        """
        client = self.client
        if client is None:
            logger.debug("Supabase health_check: no client configured")
            return False
        try:
            res = client.table("ingredients").select("id").limit(1).execute()
        except Exception as exc:
            logger.exception("Exception during Supabase health_check: %s", exc)
            return False
        if getattr(res, "error", None):
            logger.warning("Supabase health_check returned error object: %s", res.error)
            return False
        status_code = getattr(res, "status_code", None)
        if isinstance(status_code, int) and status_code >= 400:
            logger.warning("Supabase health_check HTTP status: %s", status_code)
            return False
        return True

    def diagnostics(self) -> Dict[str, Any]:
        diag = super().diagnostics()
        diag.update(supabase_client.diagnostics())
        if self._client is not None:
            diag["client_present"] = True
        return diag
