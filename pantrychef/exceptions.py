"""
Error taxonomy shared by the stores, services and API layer.

Stores raise these; the recommendation path lets them propagate and the
FastAPI exception handlers in `main.py` translate them to HTTP responses.
"""
from typing import Any, Dict, Optional

# Postgres SQLSTATEs carried in IntegrityViolation.diagnostics["code"]
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
CHECK_VIOLATION = "23514"
NOT_NULL_VIOLATION = "23502"


class PantryChefError(Exception):
    """Base class for all application errors."""

    status_code = 500
    code = "internal_error"

    def __init__(self, msg: str, diagnostics: Optional[Dict[str, Any]] = None):
        super().__init__(msg)
        self.diagnostics = diagnostics or {}


class StorageUnavailable(PantryChefError):
    """Raised when the storage client is missing or a storage call failed."""

    status_code = 503
    code = "storage_unavailable"


class NotFound(PantryChefError):
    status_code = 404
    code = "not_found"


class IntegrityViolation(PantryChefError):
    """Dangling references and uniqueness violations."""

    status_code = 409
    code = "integrity_violation"


class AuthenticationError(PantryChefError):
    status_code = 401
    code = "unauthenticated"
