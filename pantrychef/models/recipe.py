"""
Recipe model and its requirement rows (recipe_components).
"""
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from pantrychef.models.database import Base, new_uuid


class Recipe(Base):
    __tablename__ = "recipes"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    instructions = Column(Text, nullable=True)
    prep_time = Column(Integer, nullable=True)  # minutes
    cook_time = Column(Integer, nullable=True)  # minutes
    servings = Column(Integer, nullable=True)
    image_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    components = relationship(
        "RecipeComponent",
        back_populates="recipe",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Recipe(title='{self.title}')>"


class RecipeComponent(Base):
    __tablename__ = "recipe_components"

    id = Column(String(36), primary_key=True, default=new_uuid)
    recipe_id = Column(
        String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    ingredient_id = Column(
        String(36), ForeignKey("ingredients.id", ondelete="CASCADE"), nullable=False
    )
    quantity = Column(Numeric(10, 2), nullable=False)
    unit = Column(String, nullable=True)
    # order of the component within its recipe
    position = Column(Integer, nullable=False, default=0)

    recipe = relationship("Recipe", back_populates="components")
    ingredient = relationship("Ingredient")

    __table_args__ = (
        UniqueConstraint("recipe_id", "ingredient_id", name="_recipe_ingredient_uc"),
        CheckConstraint("quantity > 0", name="_component_quantity_positive"),
    )

    def __repr__(self):
        return f"<RecipeComponent(recipe_id={self.recipe_id}, ingredient_id={self.ingredient_id})>"
