# pantrychef/tests/test_recommendation_service.py
import asyncio
import threading
from unittest.mock import MagicMock

import pytest

from pantrychef.exceptions import NotFound, StorageUnavailable
from pantrychef.schemas import Ingredient, PantryEntry, Recipe, Requirement, Restriction
from pantrychef.services.pantry_service import PantryService
from pantrychef.services.recommendation_service import RecommendationCache, RecommendationService
from pantrychef.tests.conftest import seed_omelette

USER = "user-1"


def _mock_store(pantry=None, restrictions=None):
    store = MagicMock()
    store.list_recipes.return_value = [
        Recipe(id="r-toast", title="Toast"),
        Recipe(id="r-salad", title="Salad"),
    ]
    store.list_requirements.return_value = [
        Requirement(recipe_id="r-toast", ingredient_id="i-bread", quantity=2),
        Requirement(recipe_id="r-toast", ingredient_id="i-butter", quantity=1),
        Requirement(recipe_id="r-salad", ingredient_id="i-lettuce", quantity=1),
        Requirement(recipe_id="r-salad", ingredient_id="i-tomato", quantity=1),
        Requirement(recipe_id="r-salad", ingredient_id="i-cucumber", quantity=1),
    ]
    store.list_ingredients.return_value = [
        Ingredient(id="i-bread", name="Bread"),
        Ingredient(id="i-butter", name="Butter"),
        Ingredient(id="i-lettuce", name="Lettuce"),
        Ingredient(id="i-tomato", name="Tomato"),
        Ingredient(id="i-cucumber", name="Cucumber"),
    ]
    store.list_pantry.return_value = pantry or []
    store.list_restrictions.return_value = restrictions or []
    store.get_recipe.side_effect = lambda rid: next(
        (r for r in store.list_recipes.return_value if r.id == rid), None
    )
    return store


@pytest.mark.asyncio
async def test_recommendations_ranked_for_user():
    pantry = [PantryEntry(user_id=USER, ingredient_id="i-bread", quantity=1)]
    store = _mock_store(pantry=pantry)
    svc = RecommendationService(store=store, cache_ttl=0)

    recs = await svc.get_recommendations(USER)

    assert [r.recipe_id for r in recs] == ["r-toast", "r-salad"]
    assert recs[0].v_score == 50.0
    assert recs[0].missing_ingredients == ["Butter"]
    assert recs[1].v_score == 0.0
    store.list_pantry.assert_called_once_with(USER)
    store.list_restrictions.assert_called_once_with(USER)


@pytest.mark.asyncio
async def test_limit_and_min_score():
    pantry = [PantryEntry(user_id=USER, ingredient_id="i-tomato", quantity=1)]
    svc = RecommendationService(store=_mock_store(pantry=pantry), cache_ttl=0)

    assert [r.recipe_id for r in await svc.get_recommendations(USER, limit=1)] == ["r-salad"]
    assert [r.recipe_id for r in await svc.get_recommendations(USER, min_score=30)] == ["r-salad"]
    assert await svc.get_recommendations(USER, min_score=50) == []
    assert await svc.get_recommendations(USER, limit=0) == []


@pytest.mark.asyncio
async def test_restriction_removes_recipe():
    restrictions = [Restriction(user_id=USER, ingredient_id="i-butter", restriction_type="allergy")]
    svc = RecommendationService(store=_mock_store(restrictions=restrictions), cache_ttl=0)
    recs = await svc.get_recommendations(USER)
    assert [r.recipe_id for r in recs] == ["r-salad"]


@pytest.mark.asyncio
async def test_missing_user_id_rejected():
    svc = RecommendationService(store=_mock_store(), cache_ttl=0)
    with pytest.raises(ValueError):
        await svc.get_recommendations("")


@pytest.mark.asyncio
async def test_storage_failure_propagates():
    store = _mock_store()
    store.list_pantry.side_effect = StorageUnavailable("list_pantry_failed")
    svc = RecommendationService(store=store, cache_ttl=0)
    with pytest.raises(StorageUnavailable):
        await svc.get_recommendations(USER)


@pytest.mark.asyncio
async def test_cache_hit_skips_store_until_invalidated():
    store = _mock_store()
    svc = RecommendationService(store=store, cache_ttl=60)

    first = await svc.get_recommendations(USER)
    second = await svc.get_recommendations(USER)
    assert first == second
    assert store.list_recipes.call_count == 1

    svc.invalidate(USER)
    await svc.get_recommendations(USER)
    assert store.list_recipes.call_count == 2

    svc.invalidate()
    assert svc.cache.count() == 0


@pytest.mark.asyncio
async def test_cache_disabled_by_default_ttl():
    svc = RecommendationService(store=_mock_store(), cache_ttl=0)
    assert svc.cache is None
    # no-op without a cache
    svc.invalidate(USER)


@pytest.mark.asyncio
async def test_cache_limit_does_not_truncate_cached_list():
    store = _mock_store()
    svc = RecommendationService(store=store, cache_ttl=60)
    assert len(await svc.get_recommendations(USER, limit=1)) == 1
    assert len(await svc.get_recommendations(USER)) == 2
    assert store.list_recipes.call_count == 1


def test_cache_expires_and_evicts(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(
        "pantrychef.services.recommendation_service.time.monotonic", lambda: now[0]
    )
    cache = RecommendationCache(ttl_seconds=10, max_entries=2)
    cache.put("a", [])
    cache.put("b", [])
    cache.put("c", [])
    assert cache.get("a") is None
    assert cache.count() == 2
    assert cache.capacity == 2

    now[0] += 11
    assert cache.get("b") is None
    assert cache.count() == 1


@pytest.mark.asyncio
async def test_recipe_match_single_recipe():
    pantry = [PantryEntry(user_id=USER, ingredient_id="i-lettuce", quantity=1)]
    store = _mock_store(pantry=pantry)
    svc = RecommendationService(store=store, cache_ttl=0)
    rec = await svc.get_recipe_match(USER, "r-salad")
    assert rec.recipe_id == "r-salad"
    assert rec.owned_ingredients == 1
    assert rec.v_score == 33.33
    store.list_requirements.assert_called_once_with(["r-salad"])


@pytest.mark.asyncio
async def test_recipe_match_unknown_recipe():
    svc = RecommendationService(store=_mock_store(), cache_ttl=0)
    with pytest.raises(NotFound) as exc:
        await svc.get_recipe_match(USER, "nope")
    assert str(exc.value) == "recipe_not_found"


@pytest.mark.asyncio
async def test_recipe_match_restricted_recipe_not_eligible():
    restrictions = [Restriction(user_id=USER, ingredient_id="i-bread", restriction_type="dietary")]
    svc = RecommendationService(store=_mock_store(restrictions=restrictions), cache_ttl=0)
    with pytest.raises(NotFound) as exc:
        await svc.get_recipe_match(USER, "r-toast")
    assert str(exc.value) == "recipe_not_eligible"


@pytest.mark.asyncio
async def test_end_to_end_against_sql_store(file_sql_store):
    seeded = seed_omelette(file_sql_store)
    ids = seeded["ingredients"]
    for name in ("Eggs", "Cheese", "Milk"):
        file_sql_store.add_pantry_item(USER, ids[name], 1, None)

    svc = RecommendationService(store=file_sql_store, cache_ttl=0)
    recs = {r.title: r for r in await svc.get_recommendations(USER)}
    assert recs["Omelette"].v_score == 50.0
    assert recs["Omelette"].missing_ingredients == ["Butter", "Salt", "Pepper"]
    assert recs["Butter Toast"].v_score == 0.0

    file_sql_store.add_restriction(USER, ids["Eggs"], "allergy", None)
    titles = [r.title for r in await svc.get_recommendations(USER)]
    assert titles == ["Butter Toast"]


@pytest.mark.asyncio
async def test_unknown_user_gets_zero_scores(file_sql_store):
    seed_omelette(file_sql_store)
    svc = RecommendationService(store=file_sql_store, cache_ttl=0)
    recs = await svc.get_recommendations("someone-new")
    assert len(recs) == 2
    assert all(r.v_score == 0.0 for r in recs)


@pytest.mark.asyncio
async def test_mutation_during_compute_is_not_cached():
    store = _mock_store()
    pantry_rows = []
    read_started = threading.Event()
    release_read = threading.Event()

    def list_pantry(user_id):
        snapshot = list(pantry_rows)
        read_started.set()
        release_read.wait(5)
        return snapshot

    def add_pantry_item(user_id, ingredient_id, quantity, unit):
        entry = PantryEntry(user_id=user_id, ingredient_id=ingredient_id, quantity=quantity)
        pantry_rows.append(entry)
        return entry

    store.list_pantry.side_effect = list_pantry
    store.get_ingredient.return_value = Ingredient(id="i-bread", name="Bread")
    store.add_pantry_item.side_effect = add_pantry_item

    svc = RecommendationService(store=store, cache_ttl=300)
    pantry = PantryService(store=store, recommendations=svc)

    pending = asyncio.create_task(svc.get_recommendations(USER))
    assert await asyncio.to_thread(read_started.wait, 5)
    assert (await pantry.add_item(USER, "i-bread"))["ok"] is True
    release_read.set()

    stale = {r.recipe_id: r.v_score for r in await pending}
    assert stale["r-toast"] == 0.0
    assert svc.cache.count() == 0

    fresh = {r.recipe_id: r.v_score for r in await svc.get_recommendations(USER)}
    assert fresh["r-toast"] == 50.0


@pytest.mark.asyncio
async def test_catalog_clear_during_compute_is_not_cached():
    store = _mock_store()
    svc = RecommendationService(store=store, cache_ttl=300)

    def list_recipes():
        svc.invalidate()
        return store.list_recipes.return_value

    store.list_recipes.side_effect = list_recipes
    await svc.get_recommendations(USER)
    assert svc.cache.count() == 0
