"""
Pydantic records exchanged between the stores, the recommendation engine and
the HTTP API.

Stores always hand these out (never raw rows or ORM objects), so the engine
and services do not care which backend produced them.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RestrictionType(str, Enum):
    ALLERGY = "allergy"
    DIETARY = "dietary"


class Ingredient(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str = Field(..., min_length=1)
    category: Optional[str] = None


class Recipe(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    instructions: Optional[str] = None
    prep_time: Optional[int] = Field(None, ge=0, description="Minutes")
    cook_time: Optional[int] = Field(None, ge=0, description="Minutes")
    servings: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = None


class Requirement(BaseModel):
    """One row of a recipe's requirement set (a recipe component)."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    recipe_id: str
    ingredient_id: str
    quantity: float = Field(..., gt=0)
    unit: Optional[str] = None
    position: int = Field(0, ge=0)
    ingredient_name: Optional[str] = None


class RecipeDetail(Recipe):
    components: List[Requirement] = Field(default_factory=list)


class PantryEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    user_id: str
    ingredient_id: str
    quantity: Optional[float] = None
    unit: Optional[str] = None
    ingredient_name: Optional[str] = None
    ingredient_category: Optional[str] = None
    added_at: Optional[datetime] = None


class Restriction(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    user_id: str
    ingredient_id: str
    restriction_type: RestrictionType
    notes: Optional[str] = None
    ingredient_name: Optional[str] = None
    created_at: Optional[datetime] = None


class Recommendation(BaseModel):
    """Derived per (user, recipe); never persisted."""

    user_id: str
    recipe_id: str
    title: str
    description: Optional[str] = None
    instructions: Optional[str] = None
    prep_time: Optional[int] = None
    cook_time: Optional[int] = None
    servings: Optional[int] = None
    image_url: Optional[str] = None
    v_score: float = Field(..., ge=0, le=100)
    missing_ingredients: List[str] = Field(default_factory=list)
    total_ingredients: int = Field(..., ge=1)
    owned_ingredients: int = Field(..., ge=0)


# --- request bodies ---
class PantryItemCreate(BaseModel):
    ingredient_id: str = Field(..., min_length=1)
    quantity: Optional[float] = Field(1, gt=0)
    unit: Optional[str] = None


class PantryItemUpdate(BaseModel):
    quantity: Optional[float] = Field(None, gt=0)
    unit: Optional[str] = None


class RestrictionCreate(BaseModel):
    ingredient_id: str = Field(..., min_length=1)
    restriction_type: RestrictionType
    notes: Optional[str] = None
