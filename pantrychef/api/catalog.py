"""
Catalog endpoints: ingredients (for pickers), recipes and recipe detail.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends

from pantrychef.api.deps import get_catalog_service, get_current_user_id
from pantrychef.schemas import Ingredient, Recipe, RecipeDetail
from pantrychef.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(get_current_user_id)])


@router.get("/ingredients", response_model=List[Ingredient])
async def list_ingredients(catalog: CatalogService = Depends(get_catalog_service)):
    return await catalog.list_ingredients()


@router.get("/recipes", response_model=List[Recipe])
async def list_recipes(catalog: CatalogService = Depends(get_catalog_service)):
    return await catalog.list_recipes()


@router.get("/recipes/{recipe_id}", response_model=RecipeDetail)
async def get_recipe(recipe_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    return await catalog.get_recipe_detail(recipe_id)
