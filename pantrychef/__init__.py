"""PantryChef: pantry-aware recipe recommendations."""

__version__ = "1.0.0"
