"""Database models for the recipe recommendation service."""
from pantrychef.models.database import Base
from pantrychef.models.ingredient import Ingredient
from pantrychef.models.recipe import Recipe, RecipeComponent
from pantrychef.models.user_pantry import UserPantry
from pantrychef.models.user_restriction import UserRestriction

__all__ = ["Base", "Ingredient", "Recipe", "RecipeComponent", "UserPantry", "UserRestriction"]
