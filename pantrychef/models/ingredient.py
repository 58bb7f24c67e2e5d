"""
Ingredient model: the shared, read-only ingredient catalog.
"""
from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func

from pantrychef.models.database import Base, new_uuid


class Ingredient(Base):
    __tablename__ = "ingredients"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String, nullable=False, unique=True, index=True)
    category = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Ingredient(name='{self.name}', category='{self.category}')>"
