"""
Store selection.

    from pantrychef.stores import get_store
    store = get_store()   # backend chosen by STORAGE_BACKEND
"""
import logging
from functools import lru_cache

from pantrychef.config.settings import settings
from pantrychef.stores.base import CatalogStore
from pantrychef.stores.sql_store import SqlStore
from pantrychef.stores.supabase_store import SupabaseStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_store() -> CatalogStore:
    if settings.storage_backend == "sql":
        logger.info("Using SQLAlchemy store")
        return SqlStore()
    logger.info("Using Supabase store")
    return SupabaseStore()


__all__ = ["CatalogStore", "SqlStore", "SupabaseStore", "get_store"]
