# pantrychef/services/recommendation_engine.py
"""
Viability-score (V-Score) computation.

Pure functions only: given one user's pantry and restrictions plus the recipe
catalog, produce the ranked list of eligible recipes. Nothing here touches
storage; `RecommendationService` does the fetching.

Rules:
  - A recipe with no (valid) requirements is never recommended.
  - A recipe requiring any restricted ingredient (allergy or dietary) is
    never recommended, not even with a zero score.
  - Ownership is by ingredient identity; quantities and units are ignored.
  - v_score = owned / total * 100, rounded half-up to 2 decimals.
  - Ranking is by v_score descending; ties keep the input recipe order.
"""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Sequence

from pantrychef.schemas import (
    Ingredient,
    PantryEntry,
    Recipe,
    Recommendation,
    Requirement,
    Restriction,
)

logger = logging.getLogger(__name__)

_TWO_PLACES = Decimal("0.01")


def compute_v_score(owned: int, total: int) -> float:
    """Percentage of required ingredients owned, rounded like SQL ROUND(numeric, 2)."""
    if total <= 0:
        raise ValueError("total must be positive")
    ratio = Decimal(owned) / Decimal(total) * 100
    return float(ratio.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def group_requirements(
    recipes: Sequence[Recipe],
    requirements: Iterable[Requirement],
    ingredient_names: Dict[str, str],
) -> Dict[str, List[str]]:
    """
    Map recipe id -> distinct required ingredient ids in first-occurrence order.

    Requirements pointing at an unknown recipe are dropped silently; ones
    pointing at an unknown ingredient are logged and skipped.
    """
    recipe_ids = {r.id for r in recipes}
    grouped: Dict[str, Dict[str, None]] = {}
    dropped = 0
    for req in requirements:
        if req.recipe_id not in recipe_ids:
            dropped += 1
            continue
        if req.ingredient_id not in ingredient_names:
            logger.warning(
                "Skipping requirement of recipe=%s: unknown ingredient_id=%s",
                req.recipe_id,
                req.ingredient_id,
            )
            continue
        # dict as an ordered set
        grouped.setdefault(req.recipe_id, {})[req.ingredient_id] = None

    if dropped:
        logger.debug("Dropped %d requirements referencing unknown recipes", dropped)
    return {recipe_id: list(ids) for recipe_id, ids in grouped.items()}


def score_recipe(
    user_id: str,
    recipe: Recipe,
    required_ids: Sequence[str],
    owned_ids: set,
    ingredient_names: Dict[str, str],
) -> Recommendation:
    owned_count = sum(1 for ing_id in required_ids if ing_id in owned_ids)
    missing: List[str] = []
    for ing_id in required_ids:
        if ing_id in owned_ids:
            continue
        name = ingredient_names[ing_id]
        if name not in missing:
            missing.append(name)

    return Recommendation(
        user_id=user_id,
        recipe_id=recipe.id,
        title=recipe.title,
        description=recipe.description,
        instructions=recipe.instructions,
        prep_time=recipe.prep_time,
        cook_time=recipe.cook_time,
        servings=recipe.servings,
        image_url=recipe.image_url,
        v_score=compute_v_score(owned_count, len(required_ids)),
        missing_ingredients=missing,
        total_ingredients=len(required_ids),
        owned_ingredients=owned_count,
    )


def compute_recommendations(
    user_id: str,
    recipes: Sequence[Recipe],
    requirements: Iterable[Requirement],
    ingredients: Iterable[Ingredient],
    pantry: Iterable[PantryEntry],
    restrictions: Iterable[Restriction],
) -> List[Recommendation]:
    """
    Rank every eligible recipe for `user_id`.

    `pantry` and `restrictions` must already be scoped to `user_id`; an
    unknown user simply has both empty.
    """
    ingredient_names = {ing.id: ing.name for ing in ingredients}
    grouped = group_requirements(recipes, requirements, ingredient_names)
    owned_ids = {entry.ingredient_id for entry in pantry}
    restricted_ids = {r.ingredient_id for r in restrictions}

    results: List[Recommendation] = []
    excluded = 0
    for recipe in recipes:
        required_ids = grouped.get(recipe.id)
        if not required_ids:
            continue
        if restricted_ids.intersection(required_ids):
            excluded += 1
            continue
        results.append(
            score_recipe(user_id, recipe, required_ids, owned_ids, ingredient_names)
        )

    # list.sort is stable, reverse=True included
    results.sort(key=lambda rec: rec.v_score, reverse=True)
    logger.debug(
        "compute_recommendations user=%s recipes=%d eligible=%d restricted=%d",
        user_id,
        len(recipes),
        len(results),
        excluded,
    )
    return results
