"""
Catalog/pantry/restriction store backed by SQLAlchemy (PostgreSQL via
psycopg2, or SQLite for local runs and tests).
"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from pantrychef import models, schemas
from pantrychef.config.database import DatabaseManager, db_manager
from pantrychef.exceptions import (
    CHECK_VIOLATION,
    FOREIGN_KEY_VIOLATION,
    NOT_NULL_VIOLATION,
    UNIQUE_VIOLATION,
    IntegrityViolation,
    StorageUnavailable,
)
from pantrychef.stores.base import CatalogStore, number_components

logger = logging.getLogger(__name__)

# SQLite reports constraint failures by message only
_SQLITE_CONSTRAINTS = (
    ("UNIQUE CONSTRAINT", UNIQUE_VIOLATION),
    ("FOREIGN KEY CONSTRAINT", FOREIGN_KEY_VIOLATION),
    ("CHECK CONSTRAINT", CHECK_VIOLATION),
    ("NOT NULL CONSTRAINT", NOT_NULL_VIOLATION),
)


def _sqlstate(exc: IntegrityError) -> Optional[str]:
    """SQLSTATE of the failed constraint: psycopg2's pgcode, or parsed from SQLite's message."""
    code = getattr(exc.orig, "pgcode", None)
    if code:
        return code
    message = str(exc.orig).upper()
    for marker, state in _SQLITE_CONSTRAINTS:
        if marker in message:
            return state
    return None


def _to_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def _ingredient(row: models.Ingredient) -> schemas.Ingredient:
    return schemas.Ingredient(id=row.id, name=row.name, category=row.category)


def _recipe(row: models.Recipe) -> schemas.Recipe:
    return schemas.Recipe.model_validate(row)


def _requirement(row: models.RecipeComponent) -> schemas.Requirement:
    return schemas.Requirement(
        id=row.id,
        recipe_id=row.recipe_id,
        ingredient_id=row.ingredient_id,
        quantity=_to_float(row.quantity),
        unit=row.unit,
        position=row.position or 0,
        ingredient_name=row.ingredient.name if row.ingredient else None,
    )


def _pantry(row: models.UserPantry) -> schemas.PantryEntry:
    return schemas.PantryEntry(
        id=row.id,
        user_id=row.user_id,
        ingredient_id=row.ingredient_id,
        quantity=_to_float(row.quantity),
        unit=row.unit,
        ingredient_name=row.ingredient.name if row.ingredient else None,
        ingredient_category=row.ingredient.category if row.ingredient else None,
        added_at=row.added_at,
    )


def _restriction(row: models.UserRestriction) -> schemas.Restriction:
    return schemas.Restriction(
        id=row.id,
        user_id=row.user_id,
        ingredient_id=row.ingredient_id,
        restriction_type=row.restriction_type,
        notes=row.notes,
        ingredient_name=row.ingredient.name if row.ingredient else None,
        created_at=row.created_at,
    )


class SqlStore(CatalogStore):

    backend_name = "sql"

    def __init__(self, db: Optional[DatabaseManager] = None):
        self.db = db or db_manager

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        """Session scope that maps SQLAlchemy errors onto the store error taxonomy."""
        try:
            with self.db.session_scope() as session:
                yield session
        except IntegrityError as exc:
            code = _sqlstate(exc)
            logger.info("%s rejected by integrity constraint code=%s: %s", action, code, exc.orig)
            raise IntegrityViolation(
                f"{action}_conflict", {"code": code, "message": str(exc.orig)}
            ) from exc
        except SQLAlchemyError as exc:
            logger.exception("%s failed: %s", action, exc)
            raise StorageUnavailable(f"{action}_failed", {"exception": str(exc)}) from exc

    # --- ingredient catalog ---
    def list_ingredients(self) -> List[schemas.Ingredient]:
        with self._session("list_ingredients") as session:
            rows = session.scalars(select(models.Ingredient).order_by(models.Ingredient.name))
            return [_ingredient(r) for r in rows]

    def get_ingredient(self, ingredient_id: str) -> Optional[schemas.Ingredient]:
        with self._session("get_ingredient") as session:
            row = session.get(models.Ingredient, ingredient_id)
            return _ingredient(row) if row else None

    def add_ingredients(self, rows: Sequence[Dict[str, Any]]) -> List[schemas.Ingredient]:
        with self._session("add_ingredients") as session:
            objs = [models.Ingredient(name=r["name"], category=r.get("category")) for r in rows]
            session.add_all(objs)
            session.flush()
            return [_ingredient(o) for o in objs]

    # --- recipe catalog ---
    def list_recipes(self) -> List[schemas.Recipe]:
        with self._session("list_recipes") as session:
            rows = session.scalars(
                select(models.Recipe).order_by(models.Recipe.title, models.Recipe.id)
            )
            return [_recipe(r) for r in rows]

    def get_recipe(self, recipe_id: str) -> Optional[schemas.Recipe]:
        with self._session("get_recipe") as session:
            row = session.get(models.Recipe, recipe_id)
            return _recipe(row) if row else None

    def list_requirements(
        self, recipe_ids: Optional[Sequence[str]] = None
    ) -> List[schemas.Requirement]:
        if recipe_ids is not None and not recipe_ids:
            return []
        stmt = (
            select(models.RecipeComponent)
            .options(joinedload(models.RecipeComponent.ingredient))
            .order_by(
                models.RecipeComponent.recipe_id,
                models.RecipeComponent.position,
                models.RecipeComponent.id,
            )
        )
        if recipe_ids is not None:
            stmt = stmt.where(models.RecipeComponent.recipe_id.in_(list(recipe_ids)))
        with self._session("list_requirements") as session:
            return [_requirement(r) for r in session.scalars(stmt)]

    def add_recipe(self, row: Dict[str, Any]) -> schemas.Recipe:
        with self._session("add_recipe") as session:
            obj = models.Recipe(**row)
            session.add(obj)
            session.flush()
            return _recipe(obj)

    def add_requirements(self, rows: Sequence[Dict[str, Any]]) -> List[schemas.Requirement]:
        with self._session("add_requirements") as session:
            objs = [models.RecipeComponent(**r) for r in number_components(rows)]
            session.add_all(objs)
            session.flush()
            return [_requirement(o) for o in objs]

    # --- pantry ---
    def list_pantry(self, user_id: str) -> List[schemas.PantryEntry]:
        stmt = (
            select(models.UserPantry)
            .options(joinedload(models.UserPantry.ingredient))
            .where(models.UserPantry.user_id == user_id)
            .order_by(models.UserPantry.added_at)
        )
        with self._session("list_pantry") as session:
            return [_pantry(r) for r in session.scalars(stmt)]

    def get_pantry_item(self, item_id: str) -> Optional[schemas.PantryEntry]:
        with self._session("get_pantry_item") as session:
            row = session.get(models.UserPantry, item_id)
            return _pantry(row) if row else None

    def add_pantry_item(
        self,
        user_id: str,
        ingredient_id: str,
        quantity: Optional[float] = None,
        unit: Optional[str] = None,
    ) -> schemas.PantryEntry:
        with self._session("add_pantry_item") as session:
            obj = models.UserPantry(
                user_id=user_id, ingredient_id=ingredient_id, quantity=quantity, unit=unit
            )
            session.add(obj)
            session.flush()
            session.refresh(obj)
            return _pantry(obj)

    def update_pantry_item(
        self, user_id: str, item_id: str, changes: Dict[str, Any]
    ) -> Optional[schemas.PantryEntry]:
        with self._session("update_pantry_item") as session:
            row = session.get(models.UserPantry, item_id)
            if row is None or row.user_id != user_id:
                return None
            for key, value in changes.items():
                setattr(row, key, value)
            session.flush()
            return _pantry(row)

    def delete_pantry_item(self, user_id: str, item_id: str) -> bool:
        with self._session("delete_pantry_item") as session:
            row = session.get(models.UserPantry, item_id)
            if row is None or row.user_id != user_id:
                return False
            session.delete(row)
            return True

    # --- restrictions ---
    def list_restrictions(self, user_id: str) -> List[schemas.Restriction]:
        stmt = (
            select(models.UserRestriction)
            .options(joinedload(models.UserRestriction.ingredient))
            .where(models.UserRestriction.user_id == user_id)
            .order_by(models.UserRestriction.created_at)
        )
        with self._session("list_restrictions") as session:
            return [_restriction(r) for r in session.scalars(stmt)]

    def get_restriction(self, restriction_id: str) -> Optional[schemas.Restriction]:
        with self._session("get_restriction") as session:
            row = session.get(models.UserRestriction, restriction_id)
            return _restriction(row) if row else None

    def add_restriction(
        self,
        user_id: str,
        ingredient_id: str,
        restriction_type: schemas.RestrictionType,
        notes: Optional[str] = None,
    ) -> schemas.Restriction:
        with self._session("add_restriction") as session:
            obj = models.UserRestriction(
                user_id=user_id,
                ingredient_id=ingredient_id,
                restriction_type=schemas.RestrictionType(restriction_type).value,
                notes=notes,
            )
            session.add(obj)
            session.flush()
            session.refresh(obj)
            return _restriction(obj)

    def delete_restriction(self, user_id: str, restriction_id: str) -> bool:
        with self._session("delete_restriction") as session:
            row = session.get(models.UserRestriction, restriction_id)
            if row is None or row.user_id != user_id:
                return False
            session.delete(row)
            return True

    # --- health ---
    def health_check(self) -> bool:
        return self.db.health_check()

    def create_schema(self) -> None:
        try:
            self.db.create_schema()
        except SQLAlchemyError as exc:
            logger.exception("create_schema failed: %s", exc)
            raise StorageUnavailable("create_schema_failed", {"exception": str(exc)}) from exc

    def diagnostics(self) -> Dict[str, Any]:
        diag = super().diagnostics()
        diag["configured"] = bool(self.db.database_url)
        return diag
