"""
Allergy / dietary restriction endpoints for the calling user.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Response

from pantrychef.api.deps import get_current_user_id, get_restriction_service, raise_for_result
from pantrychef.schemas import Restriction, RestrictionCreate
from pantrychef.services.restriction_service import RestrictionService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[Restriction])
async def list_restrictions(
    user_id: str = Depends(get_current_user_id),
    restrictions: RestrictionService = Depends(get_restriction_service),
):
    return await restrictions.list_restrictions(user_id)


@router.post("", response_model=Restriction, status_code=201)
async def add_restriction(
    body: RestrictionCreate,
    user_id: str = Depends(get_current_user_id),
    restrictions: RestrictionService = Depends(get_restriction_service),
):
    res = await restrictions.add_restriction(
        user_id, body.ingredient_id, body.restriction_type, body.notes
    )
    return raise_for_result(res)


@router.delete("/{restriction_id}", status_code=204)
async def remove_restriction(
    restriction_id: str,
    user_id: str = Depends(get_current_user_id),
    restrictions: RestrictionService = Depends(get_restriction_service),
):
    raise_for_result(await restrictions.remove_restriction(user_id, restriction_id))
    return Response(status_code=204)
