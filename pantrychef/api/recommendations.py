"""
Recommendation endpoints. Always scoped to the calling user.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from pantrychef.api.deps import get_current_user_id, get_recommendation_service
from pantrychef.schemas import Recommendation
from pantrychef.services.recommendation_service import RecommendationService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[Recommendation])
async def list_recommendations(
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    min_score: Optional[float] = Query(default=None, ge=0, le=100),
    user_id: str = Depends(get_current_user_id),
    service: RecommendationService = Depends(get_recommendation_service),
):
    return await service.get_recommendations(user_id, limit=limit, min_score=min_score)


@router.get("/{recipe_id}", response_model=Recommendation)
async def get_recipe_match(
    recipe_id: str,
    user_id: str = Depends(get_current_user_id),
    service: RecommendationService = Depends(get_recommendation_service),
):
    return await service.get_recipe_match(user_id, recipe_id)
