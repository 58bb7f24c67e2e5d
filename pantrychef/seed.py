"""
Populate the configured store with the sample catalog.

    python -m pantrychef.seed

With STORAGE_BACKEND=sql the tables are created first.
"""
import asyncio
import logging
import sys

from pantrychef.services.catalog_service import CatalogService
from pantrychef.stores import get_store
from pantrychef.stores.sql_store import SqlStore

logger = logging.getLogger(__name__)


async def seed() -> dict:
    store = get_store()
    if isinstance(store, SqlStore):
        await asyncio.to_thread(store.create_schema)
    return await CatalogService(store=store).populate_sample_catalog()


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    res = asyncio.run(seed())
    if not res.get("ok"):
        logger.error("Seeding failed: %s %s", res.get("error"), res.get("diagnostics"))
        return 1
    logger.info("Seeded recipes: %s", res.get("data") or "none (already present)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
