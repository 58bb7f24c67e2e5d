# pantrychef/tests/conftest.py
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest
from postgrest.exceptions import APIError

from pantrychef.config.database import DatabaseManager
from pantrychef.stores.sql_store import SqlStore
from pantrychef.stores.supabase_store import SupabaseStore


# ---------------------------------------------------------------------
# In-memory FakeDB emulating the supabase-py / PostgREST query builder
# ---------------------------------------------------------------------
UNIQUE_KEYS = {
    "ingredients": [("name",)],
    "recipe_components": [("recipe_id", "ingredient_id")],
    "user_pantry": [("user_id", "ingredient_id")],
    "user_restrictions": [("user_id", "ingredient_id")],
}

TIMESTAMP_COLUMNS = {
    "user_pantry": "added_at",
    "user_restrictions": "created_at",
}


class FakeQuery:

    def __init__(self, db, name):
        self.db = db
        self.name = name
        self._filters = []
        self._operation = None
        self._columns = "*"
        self._orders = []
        self._limit = None
        self._range = None

    # Query building (chainable)
    def select(self, columns="*", **kwargs):
        self._columns = columns
        return self

    def eq(self, col, val):
        self._filters.append(("eq", col, val))
        return self

    def in_(self, col, values):
        self._filters.append(("in", col, list(values)))
        return self

    def order(self, col, desc=False):
        self._orders.append((col, desc))
        return self

    def limit(self, n):
        self._limit = n
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def insert(self, payload):
        self._operation = ("insert", payload)
        return self

    def update(self, payload):
        self._operation = ("update", payload)
        return self

    def delete(self):
        self._operation = ("delete", None)
        return self

    # Evaluation
    def _matches(self, row):
        for op, col, val in self._filters:
            if op == "eq" and str(row.get(col)) != str(val):
                return False
            if op == "in" and row.get(col) not in val:
                return False
        return True

    def _embed(self, row):
        out = dict(row)
        if "ingredients(" in self._columns and "ingredient_id" in row:
            ing = next(
                (i for i in self.db.tables.get("ingredients", []) if i["id"] == row["ingredient_id"]),
                None,
            )
            out["ingredients"] = (
                {"name": ing["name"], "category": ing.get("category")} if ing else None
            )
        return out

    def _check_unique(self, row):
        for key in UNIQUE_KEYS.get(self.name, []):
            for existing in self.db.tables.get(self.name, []):
                if all(existing.get(k) == row.get(k) for k in key):
                    raise APIError(
                        {
                            "code": "23505",
                            "message": f"duplicate key value violates unique constraint on {key}",
                            "details": "",
                            "hint": "",
                        }
                    )

    def execute(self):
        if self.db.fail_with is not None:
            raise self.db.fail_with
        self.db.calls.append((self.name, self._operation[0] if self._operation else "select"))
        table = self.db.tables.setdefault(self.name, [])

        if self._operation is None:
            rows = [r for r in table if self._matches(r)]
            # stable sorts, last key first
            for col, desc in reversed(self._orders):
                rows.sort(key=lambda r: (r.get(col) is not None, r.get(col)), reverse=desc)
            if self._range:
                start, end = self._range
                rows = rows[start : end + 1]
            if self._limit:
                rows = rows[: self._limit]
            if self.db.max_rows is not None:
                # PostgREST max-rows: silently truncated
                rows = rows[: self.db.max_rows]
            return SimpleNamespace(data=[self._embed(r) for r in rows], status_code=200)

        typ, payload = self._operation
        if typ == "insert":
            rows = payload if isinstance(payload, list) else [payload]
            inserted = []
            for row in rows:
                row = dict(row)
                self._check_unique(row)
                row.setdefault("id", str(uuid.uuid4()))
                ts_col = TIMESTAMP_COLUMNS.get(self.name)
                if ts_col:
                    row.setdefault(ts_col, datetime.now(timezone.utc).isoformat())
                table.append(row)
                inserted.append(dict(row))
            return SimpleNamespace(data=inserted, status_code=201)
        if typ == "update":
            updated = []
            for row in table:
                if self._matches(row):
                    row.update(payload)
                    updated.append(dict(row))
            return SimpleNamespace(data=updated, status_code=200)
        if typ == "delete":
            kept, deleted = [], []
            for row in table:
                (deleted if self._matches(row) else kept).append(row)
            self.db.tables[self.name] = kept
            return SimpleNamespace(data=deleted, status_code=200)
        return SimpleNamespace(data=[], status_code=200)


class FakeDB:

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.fail_with = None
        self.max_rows = None

    def table(self, name):
        return FakeQuery(self, name)


# ---------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------
@pytest.fixture
def fake_db():
    return FakeDB()


@pytest.fixture
def supabase_store(fake_db):
    return SupabaseStore(client=fake_db)


@pytest.fixture
def sql_store():
    store = SqlStore(DatabaseManager("sqlite://"))
    store.create_schema()
    return store


@pytest.fixture
def file_sql_store(tmp_path):
    """SQLite file database: safe for concurrent reads from worker threads."""
    store = SqlStore(DatabaseManager(f"sqlite:///{tmp_path / 'pantrychef.db'}"))
    store.create_schema()
    return store


def seed_omelette(store) -> Dict[str, Any]:
    """Insert the omelette recipe (6 ingredients) plus an unrelated toast recipe."""
    names = ["Eggs", "Cheese", "Milk", "Butter", "Salt", "Pepper", "Bread"]
    ingredients = {
        i.name: i.id for i in store.add_ingredients([{"name": n, "category": None} for n in names])
    }
    omelette = store.add_recipe({"title": "Omelette", "prep_time": 5, "cook_time": 10, "servings": 2})
    toast = store.add_recipe({"title": "Butter Toast"})
    store.add_requirements(
        [
            {"recipe_id": omelette.id, "ingredient_id": ingredients[n], "quantity": 1, "unit": None}
            for n in ["Eggs", "Cheese", "Milk", "Butter", "Salt", "Pepper"]
        ]
        + [
            {"recipe_id": toast.id, "ingredient_id": ingredients["Bread"], "quantity": 2, "unit": "slices"},
            {"recipe_id": toast.id, "ingredient_id": ingredients["Butter"], "quantity": 1, "unit": "tbsp"},
        ]
    )
    return {"ingredients": ingredients, "omelette": omelette, "toast": toast}
