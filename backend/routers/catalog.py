import logging
from typing import List

from fastapi import APIRouter, HTTPException, status

from core.catalog import (
    category_options,
    delete_category,
    delete_location,
    location_delete_blocker,
    save_category,
    save_location,
)
from schemas.catalog import (
    Category,
    CategoryDeleteRequest,
    CategoryListRequest,
    CategoryOption,
    CategorySaveRequest,
    Location,
    LocationSaveRequest,
)
from schemas.inventory import LocationDeleteRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/categories/options", response_model=List[CategoryOption])
async def list_category_options(payload: CategoryListRequest):
    return category_options(payload.categories)


@router.post("/categories/save", response_model=List[Category])
async def upsert_category(payload: CategorySaveRequest):
    parent_id = payload.category.parent_category_id
    if parent_id and not any(c.id == parent_id for c in payload.categories):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Parent category not found")
    try:
        return save_category(payload.categories, payload.category)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/categories/delete", response_model=List[Category])
async def remove_category(payload: CategoryDeleteRequest):
    """Delete a category together with its direct sub-categories."""
    if not any(c.id == payload.category_id for c in payload.categories):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return delete_category(payload.categories, payload.category_id)


@router.post("/locations/save", response_model=List[Location])
async def upsert_location(payload: LocationSaveRequest):
    return save_location(payload.locations, payload.location)


@router.post("/locations/delete", response_model=List[Location])
async def remove_location(payload: LocationDeleteRequest):
    if not any(loc.id == payload.location_id for loc in payload.locations):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")

    reason = location_delete_blocker(
        payload.location_id, payload.locations, payload.ledger, payload.batches
    )
    if reason:
        logger.info("location %s not deleted: %s", payload.location_id, reason)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=reason)
    return delete_location(payload.locations, payload.location_id)
