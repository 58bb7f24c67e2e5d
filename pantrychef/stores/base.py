"""
Storage boundary consumed by the services.

Every method is synchronous (SDK / ORM calls block); async callers run them
through `asyncio.to_thread`. Implementations return `pantrychef.schemas`
records and raise `pantrychef.exceptions` errors:

  - StorageUnavailable   client missing or call failed
  - IntegrityViolation   uniqueness or foreign-key violation on write

Pantry and restriction accessors always take the owning user id and filter
on it, so a caller can never read or delete another user's rows through a
store.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from pantrychef.schemas import (
    Ingredient,
    PantryEntry,
    Recipe,
    Requirement,
    Restriction,
    RestrictionType,
)


def number_components(rows: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Copy requirement rows, filling a missing `position` with the row's index
    among this batch's rows of the same recipe. Explicit positions are kept.
    """
    seen: Dict[str, int] = {}
    numbered = []
    for row in rows:
        row = dict(row)
        index = seen.get(row["recipe_id"], 0)
        seen[row["recipe_id"]] = index + 1
        row.setdefault("position", index)
        numbered.append(row)
    return numbered


class CatalogStore(ABC):

    backend_name = "abstract"

    # --- ingredient catalog ---
    @abstractmethod
    def list_ingredients(self) -> List[Ingredient]:
        """All ingredients ordered by name."""

    @abstractmethod
    def get_ingredient(self, ingredient_id: str) -> Optional[Ingredient]: ...

    @abstractmethod
    def add_ingredients(self, rows: Sequence[Dict[str, Any]]) -> List[Ingredient]:
        """Insert `{"name", "category"}` rows."""

    # --- recipe catalog ---
    @abstractmethod
    def list_recipes(self) -> List[Recipe]:
        """All recipes ordered by title."""

    @abstractmethod
    def get_recipe(self, recipe_id: str) -> Optional[Recipe]: ...

    @abstractmethod
    def list_requirements(
        self, recipe_ids: Optional[Sequence[str]] = None
    ) -> List[Requirement]:
        """
        Requirements of the given recipes, or of every recipe when None,
        ordered by (recipe_id, position).
        """

    @abstractmethod
    def add_recipe(self, row: Dict[str, Any]) -> Recipe: ...

    @abstractmethod
    def add_requirements(self, rows: Sequence[Dict[str, Any]]) -> List[Requirement]: ...

    # --- pantry ---
    @abstractmethod
    def list_pantry(self, user_id: str) -> List[PantryEntry]: ...

    @abstractmethod
    def get_pantry_item(self, item_id: str) -> Optional[PantryEntry]:
        """Lookup by id regardless of owner; services use it for ownership checks."""

    @abstractmethod
    def add_pantry_item(
        self,
        user_id: str,
        ingredient_id: str,
        quantity: Optional[float] = None,
        unit: Optional[str] = None,
    ) -> PantryEntry: ...

    @abstractmethod
    def update_pantry_item(
        self, user_id: str, item_id: str, changes: Dict[str, Any]
    ) -> Optional[PantryEntry]: ...

    @abstractmethod
    def delete_pantry_item(self, user_id: str, item_id: str) -> bool: ...

    # --- restrictions ---
    @abstractmethod
    def list_restrictions(self, user_id: str) -> List[Restriction]: ...

    @abstractmethod
    def get_restriction(self, restriction_id: str) -> Optional[Restriction]: ...

    @abstractmethod
    def add_restriction(
        self,
        user_id: str,
        ingredient_id: str,
        restriction_type: RestrictionType,
        notes: Optional[str] = None,
    ) -> Restriction: ...

    @abstractmethod
    def delete_restriction(self, user_id: str, restriction_id: str) -> bool: ...

    # --- health ---
    @abstractmethod
    def health_check(self) -> bool: ...

    def diagnostics(self) -> Dict[str, Any]:
        return {"backend": self.backend_name}
