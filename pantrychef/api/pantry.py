"""
Pantry endpoints for the calling user.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Response

from pantrychef.api.deps import get_current_user_id, get_pantry_service, raise_for_result
from pantrychef.schemas import PantryEntry, PantryItemCreate, PantryItemUpdate
from pantrychef.services.pantry_service import PantryService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[PantryEntry])
async def list_pantry(
    user_id: str = Depends(get_current_user_id),
    pantry: PantryService = Depends(get_pantry_service),
):
    return await pantry.list_items(user_id)


@router.post("", response_model=PantryEntry, status_code=201)
async def add_pantry_item(
    body: PantryItemCreate,
    user_id: str = Depends(get_current_user_id),
    pantry: PantryService = Depends(get_pantry_service),
):
    res = await pantry.add_item(user_id, body.ingredient_id, body.quantity, body.unit)
    return raise_for_result(res)


@router.patch("/{item_id}", response_model=PantryEntry)
async def update_pantry_item(
    item_id: str,
    body: PantryItemUpdate,
    user_id: str = Depends(get_current_user_id),
    pantry: PantryService = Depends(get_pantry_service),
):
    res = await pantry.update_item(user_id, item_id, quantity=body.quantity, unit=body.unit)
    return raise_for_result(res)


@router.delete("/{item_id}", status_code=204)
async def remove_pantry_item(
    item_id: str,
    user_id: str = Depends(get_current_user_id),
    pantry: PantryService = Depends(get_pantry_service),
):
    raise_for_result(await pantry.remove_item(user_id, item_id))
    return Response(status_code=204)
