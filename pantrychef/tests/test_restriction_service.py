# pantrychef/tests/test_restriction_service.py
from unittest.mock import MagicMock

import pytest

from pantrychef.exceptions import IntegrityViolation
from pantrychef.schemas import Ingredient, RestrictionType
from pantrychef.services.recommendation_service import RecommendationService
from pantrychef.services.restriction_service import RestrictionService
from pantrychef.tests.conftest import seed_omelette

USER = "user-1"
OTHER = "user-2"


@pytest.fixture
def ids(supabase_store):
    return seed_omelette(supabase_store)["ingredients"]


@pytest.mark.asyncio
async def test_add_list_remove(supabase_store, ids):
    recs = MagicMock()
    svc = RestrictionService(store=supabase_store, recommendations=recs)

    res = await svc.add_restriction(USER, ids["Eggs"], "allergy", notes="  anaphylaxis ")
    assert res["ok"] is True
    restriction = res["data"]
    assert restriction.restriction_type is RestrictionType.ALLERGY
    assert restriction.notes == "anaphylaxis"
    recs.invalidate.assert_called_once_with(USER)

    listed = await svc.list_restrictions(USER)
    assert [r.ingredient_name for r in listed] == ["Eggs"]

    res = await svc.remove_restriction(USER, restriction.id)
    assert res["ok"] is True
    assert await svc.list_restrictions(USER) == []
    assert recs.invalidate.call_count == 2


@pytest.mark.asyncio
async def test_add_restriction_errors(supabase_store, ids):
    svc = RestrictionService(store=supabase_store)

    res = await svc.add_restriction(USER, ids["Eggs"], "vegan-ish")
    assert res["error"] == "invalid_restriction_type"
    assert res["diagnostics"]["restriction_type"] == "vegan-ish"

    assert (await svc.add_restriction(USER, "nope", "dietary"))["error"] == "unknown_ingredient"

    assert (await svc.add_restriction(USER, ids["Milk"], RestrictionType.DIETARY))["ok"] is True
    res = await svc.add_restriction(USER, ids["Milk"], RestrictionType.ALLERGY)
    assert res["error"] == "already_restricted"
    assert res["diagnostics"]["code"] == "23505"


@pytest.mark.asyncio
async def test_remove_checks_owner(supabase_store, ids):
    svc = RestrictionService(store=supabase_store)
    restriction = (await svc.add_restriction(USER, ids["Salt"], "dietary"))["data"]

    assert (await svc.remove_restriction(OTHER, restriction.id))["error"] == "not_owner"
    assert (await svc.remove_restriction(USER, "missing"))["error"] == "not_found"
    assert len(await svc.list_restrictions(USER)) == 1


@pytest.mark.asyncio
async def test_storage_failure_on_remove(supabase_store, fake_db, ids):
    svc = RestrictionService(store=supabase_store)
    restriction = (await svc.add_restriction(USER, ids["Salt"], "dietary"))["data"]
    fake_db.fail_with = RuntimeError("timeout")
    res = await svc.remove_restriction(USER, restriction.id)
    assert res["ok"] is False
    assert res["error"] == "storage_unavailable"
    assert res["diagnostics"]["restriction_id"] == restriction.id


@pytest.mark.asyncio
async def test_new_allergy_hides_recipe(supabase_store, ids):
    recommendations = RecommendationService(store=supabase_store, cache_ttl=300)
    svc = RestrictionService(store=supabase_store, recommendations=recommendations)

    titles = [r.title for r in await recommendations.get_recommendations(USER)]
    assert "Omelette" in titles

    await svc.add_restriction(USER, ids["Eggs"], RestrictionType.ALLERGY)
    titles = [r.title for r in await recommendations.get_recommendations(USER)]
    assert titles == ["Butter Toast"]


@pytest.mark.asyncio
async def test_foreign_key_violation_is_unknown_ingredient():
    store = MagicMock()
    store.get_ingredient.return_value = Ingredient(id="i-1", name="Eggs")
    store.add_restriction.side_effect = IntegrityViolation("add_restriction_conflict", {"code": "23503"})
    res = await RestrictionService(store=store).add_restriction(USER, "i-1", "allergy")
    assert res["error"] == "unknown_ingredient"

    store.add_restriction.side_effect = IntegrityViolation("add_restriction_conflict", {"code": "23505"})
    res = await RestrictionService(store=store).add_restriction(USER, "i-1", "allergy")
    assert res["error"] == "already_restricted"
