"""
User restriction model: allergies and dietary exclusions.
"""
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from pantrychef.models.database import Base, new_uuid


class UserRestriction(Base):
    __tablename__ = "user_restrictions"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    ingredient_id = Column(
        String(36), ForeignKey("ingredients.id", ondelete="CASCADE"), nullable=False
    )
    restriction_type = Column(String, nullable=False)  # allergy, dietary
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    ingredient = relationship("Ingredient")

    __table_args__ = (
        UniqueConstraint("user_id", "ingredient_id", name="_user_restriction_uc"),
        CheckConstraint(
            "restriction_type IN ('allergy', 'dietary')", name="_restriction_type_check"
        ),
    )

    def __repr__(self):
        return f"<UserRestriction(user_id={self.user_id}, type='{self.restriction_type}')>"
