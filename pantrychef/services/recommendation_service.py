# pantrychef/services/recommendation_service.py
"""
Per-user recipe recommendations.

Fetches the catalog and the user's pantry/restrictions from the store (in a
threadpool, concurrently) and hands them to the pure V-Score engine.

Behavior:
- Storage failures propagate as StorageUnavailable; nothing is retried and
  there is no fallback list.
- An unknown user is not an error: empty pantry, no restrictions.
- Optional per-user cache (RECOMMENDATION_CACHE_TTL > 0). Pantry/restriction
  mutations invalidate that user; catalog changes clear everything.
"""
from __future__ import annotations

import asyncio
import collections
import logging
import time
from typing import Deque, Dict, List, Optional, Tuple

from pantrychef.config.settings import settings
from pantrychef.exceptions import NotFound
from pantrychef.schemas import Recommendation
from pantrychef.services.recommendation_engine import compute_recommendations
from pantrychef.services.utils import run_blocking
from pantrychef.stores import CatalogStore, get_store

logger = logging.getLogger(__name__)


class RecommendationCache:
    """Bounded TTL cache keyed by user id; oldest entries are evicted first."""

    def __init__(self, ttl_seconds: float, max_entries: int = 1024) -> None:
        self._ttl = float(ttl_seconds)
        self._max_entries = int(max_entries)
        self._queue: Deque[str] = collections.deque()
        self._entries: Dict[str, Tuple[float, List[Recommendation]]] = {}

    def get(self, user_id: str) -> Optional[List[Recommendation]]:
        entry = self._entries.get(user_id)
        if entry is None:
            return None
        stored_at, recs = entry
        if time.monotonic() - stored_at > self._ttl:
            self.invalidate(user_id)
            return None
        return list(recs)

    def put(self, user_id: str, recs: List[Recommendation]) -> None:
        if user_id in self._entries:
            self._queue.remove(user_id)
        self._queue.append(user_id)
        self._entries[user_id] = (time.monotonic(), list(recs))
        while len(self._queue) > self._max_entries:
            old = self._queue.popleft()
            self._entries.pop(old, None)

    def invalidate(self, user_id: str) -> None:
        if self._entries.pop(user_id, None) is not None:
            self._queue.remove(user_id)

    def clear(self) -> None:
        self._queue.clear()
        self._entries.clear()

    def count(self) -> int:
        return len(self._entries)

    @property
    def capacity(self) -> int:
        return self._max_entries


class RecommendationService:

    def __init__(
        self,
        store: Optional[CatalogStore] = None,
        cache_ttl: Optional[float] = None,
        cache_size: Optional[int] = None,
    ):
        self.store = store or get_store()
        ttl = settings.recommendation_cache_ttl if cache_ttl is None else cache_ttl
        size = settings.recommendation_cache_size if cache_size is None else cache_size
        self.cache: Optional[RecommendationCache] = (
            RecommendationCache(ttl, size) if ttl and ttl > 0 else None
        )
        # bumped by invalidate(); a computation only caches if nothing moved meanwhile
        self._epoch = 0
        self._generations: Dict[str, int] = {}

    # -----------------------
    # Cache control
    # -----------------------
    def invalidate(self, user_id: Optional[str] = None) -> None:
        """Drop one user's cached list, or every list when user_id is None."""
        if self.cache is None:
            return
        if user_id is None:
            self._epoch += 1
            self._generations.clear()
            self.cache.clear()
            logger.debug("Recommendation cache cleared")
        else:
            self._generations[user_id] = self._generations.get(user_id, 0) + 1
            self.cache.invalidate(user_id)

    def _generation(self, user_id: str) -> Tuple[int, int]:
        return self._epoch, self._generations.get(user_id, 0)

    # -----------------------
    # Public API
    # -----------------------
    async def get_recommendations(
        self,
        user_id: str,
        limit: Optional[int] = None,
        min_score: Optional[float] = None,
    ) -> List[Recommendation]:
        """Ranked recommendations for one user (the only supported mode)."""
        if not user_id:
            raise ValueError("user_id is required")

        recs = self.cache.get(user_id) if self.cache is not None else None
        if recs is None:
            generation = self._generation(user_id)
            recs = await self._compute(user_id)
            if self.cache is not None and generation == self._generation(user_id):
                self.cache.put(user_id, recs)
            elif self.cache is not None:
                logger.debug("Recommendations for user=%s changed mid-compute; not cached", user_id)
        else:
            logger.debug("Recommendation cache hit user=%s", user_id)

        if min_score is not None:
            recs = [r for r in recs if r.v_score >= min_score]
        if limit is not None:
            recs = recs[: max(limit, 0)]
        return recs

    async def get_recipe_match(self, user_id: str, recipe_id: str) -> Recommendation:
        """
        Score a single recipe for the user.

        Raises NotFound when the recipe does not exist or is not eligible
        (no requirements, or it uses a restricted ingredient).
        """
        recipe, requirements, ingredients, pantry, restrictions = await asyncio.gather(
            run_blocking(self.store.get_recipe, recipe_id),
            run_blocking(self.store.list_requirements, [recipe_id]),
            run_blocking(self.store.list_ingredients),
            run_blocking(self.store.list_pantry, user_id),
            run_blocking(self.store.list_restrictions, user_id),
        )
        if recipe is None:
            raise NotFound("recipe_not_found", {"recipe_id": recipe_id})

        recs = compute_recommendations(
            user_id, [recipe], requirements, ingredients, pantry, restrictions
        )
        if not recs:
            raise NotFound("recipe_not_eligible", {"recipe_id": recipe_id})
        return recs[0]

    # -----------------------
    # Internals
    # -----------------------
    async def _compute(self, user_id: str) -> List[Recommendation]:
        started = time.perf_counter()
        recipes, requirements, ingredients, pantry, restrictions = await asyncio.gather(
            run_blocking(self.store.list_recipes),
            run_blocking(self.store.list_requirements),
            run_blocking(self.store.list_ingredients),
            run_blocking(self.store.list_pantry, user_id),
            run_blocking(self.store.list_restrictions, user_id),
        )
        recs = compute_recommendations(
            user_id, recipes, requirements, ingredients, pantry, restrictions
        )
        logger.info(
            "Computed %d recommendations user=%s pantry=%d restrictions=%d in %.1fms",
            len(recs),
            user_id,
            len(pantry),
            len(restrictions),
            (time.perf_counter() - started) * 1000,
        )
        return recs
