# pantrychef/services/catalog_service.py
"""
Read access to the ingredient/recipe catalog, plus idempotent sample seeding.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from pantrychef.exceptions import IntegrityViolation, NotFound, StorageUnavailable
from pantrychef.schemas import Ingredient, Recipe, RecipeDetail
from pantrychef.services.recommendation_service import RecommendationService
from pantrychef.services.sample_catalog import SAMPLE_INGREDIENTS, SAMPLE_RECIPES
from pantrychef.services.utils import make_result, run_blocking
from pantrychef.stores import CatalogStore, get_store

logger = logging.getLogger(__name__)


class CatalogService:

    def __init__(
        self,
        store: Optional[CatalogStore] = None,
        recommendations: Optional[RecommendationService] = None,
    ):
        self.store = store or get_store()
        self.recommendations = recommendations

    async def list_ingredients(self) -> List[Ingredient]:
        return await run_blocking(self.store.list_ingredients)

    async def list_recipes(self) -> List[Recipe]:
        return await run_blocking(self.store.list_recipes)

    async def get_recipe_detail(self, recipe_id: str) -> RecipeDetail:
        """Recipe with its components; component names come from the ingredient catalog."""
        recipe, components, ingredients = await asyncio.gather(
            run_blocking(self.store.get_recipe, recipe_id),
            run_blocking(self.store.list_requirements, [recipe_id]),
            run_blocking(self.store.list_ingredients),
        )
        if recipe is None:
            raise NotFound("recipe_not_found", {"recipe_id": recipe_id})

        names = {ing.id: ing.name for ing in ingredients}
        named = [
            c.model_copy(update={"ingredient_name": c.ingredient_name or names.get(c.ingredient_id)})
            for c in components
        ]
        return RecipeDetail(**recipe.model_dump(), components=named)

    # -----------------------
    # Utility: bulk populate
    # -----------------------
    async def populate_sample_catalog(
        self,
        ingredients: Sequence[Dict[str, Any]] = SAMPLE_INGREDIENTS,
        recipes: Sequence[Dict[str, Any]] = SAMPLE_RECIPES,
    ) -> Dict[str, Any]:
        """
        Insert the sample catalog, skipping ingredients/recipes whose name or
        title already exists. Safe to run repeatedly.
        """
        diag: Dict[str, Any] = {}
        try:
            existing_ings = await run_blocking(self.store.list_ingredients)
            existing_names = {i.name for i in existing_ings}
            new_ings = [i for i in ingredients if i["name"] not in existing_names]
            inserted_ings = await run_blocking(self.store.add_ingredients, new_ings)
            diag["ingredients_inserted"] = len(inserted_ings)

            ids_by_name = {i.name: i.id for i in list(existing_ings) + list(inserted_ings)}

            existing_titles = {r.title for r in await run_blocking(self.store.list_recipes)}
            inserted_recipes = []
            for sample in recipes:
                if sample["title"] in existing_titles:
                    continue
                row = {k: v for k, v in sample.items() if k != "components"}
                recipe = await run_blocking(self.store.add_recipe, row)
                components = []
                for position, (name, quantity, unit) in enumerate(sample.get("components", [])):
                    ingredient_id = ids_by_name.get(name)
                    if ingredient_id is None:
                        logger.warning(
                            "Sample recipe %r references unknown ingredient %r; skipped",
                            sample["title"],
                            name,
                        )
                        continue
                    components.append(
                        {
                            "recipe_id": recipe.id,
                            "ingredient_id": ingredient_id,
                            "quantity": quantity,
                            "unit": unit,
                            "position": position,
                        }
                    )
                await run_blocking(self.store.add_requirements, components)
                inserted_recipes.append(recipe)
            diag["recipes_inserted"] = len(inserted_recipes)
        except (IntegrityViolation, StorageUnavailable) as exc:
            logger.exception("populate_sample_catalog failed: %s", exc)
            diag.update(exc.diagnostics)
            return make_result(False, error=exc.code, diagnostics=diag)

        if self.recommendations is not None and (
            diag["ingredients_inserted"] or diag["recipes_inserted"]
        ):
            self.recommendations.invalidate()
        logger.info("Sample catalog populated: %s", diag)
        return make_result(True, data=[r.title for r in inserted_recipes], diagnostics=diag)
