"""
User pantry model for tracking owned ingredients.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from pantrychef.models.database import Base, new_uuid


class UserPantry(Base):
    __tablename__ = "user_pantry"

    id = Column(String(36), primary_key=True, default=new_uuid)
    # auth users live in Supabase Auth; user_id is their opaque uuid
    user_id = Column(String(36), nullable=False, index=True)
    ingredient_id = Column(
        String(36), ForeignKey("ingredients.id", ondelete="CASCADE"), nullable=False
    )
    quantity = Column(Numeric(10, 2), nullable=True, default=1)
    unit = Column(String, nullable=True)
    added_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    ingredient = relationship("Ingredient")

    __table_args__ = (UniqueConstraint("user_id", "ingredient_id", name="_user_ingredient_uc"),)

    def __repr__(self):
        return f"<UserPantry(user_id={self.user_id}, ingredient_id={self.ingredient_id})>"
