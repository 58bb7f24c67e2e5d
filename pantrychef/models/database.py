"""
Declarative base and shared column helpers for the catalog/pantry tables.
"""
import uuid

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def new_uuid() -> str:
    return str(uuid.uuid4())
