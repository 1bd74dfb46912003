import logging

from fastapi import APIRouter, HTTPException, status

from core.occupancy import (
    NO_TANKS_MESSAGE,
    available_tanks_for_batch,
    check_new_batch,
    plan_transfer,
    recipes_by_id,
    required_volume,
    tank_for_date,
)
from schemas.batches import Batch
from schemas.tanks import (
    AvailableTanksOut,
    AvailableTanksRequest,
    NewBatchCheck,
    NewBatchCheckRequest,
    TankSnapshot,
    TankTimelineOut,
    TankTimelineRequest,
    TransferCreate,
    TransferRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_batch(snapshot: TankSnapshot, batch_id: str) -> Batch:
    batch = next((b for b in snapshot.batches if b.id == batch_id), None)
    if batch is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Batch not found")
    return batch


@router.post("/available", response_model=AvailableTanksOut)
async def list_available_tanks(payload: AvailableTanksRequest):
    """
    Tanks the batch could be transferred into on `transfer_date`.

    An empty list is a valid answer; `message` then explains it.
    """
    batch = _get_batch(payload, payload.batch_id)
    recipe = recipes_by_id(payload.recipes).get(batch.recipe_id)
    tanks = available_tanks_for_batch(
        batch, payload.transfer_date, payload.locations, payload.batches, payload.recipes
    )
    return AvailableTanksOut(
        batch_id=batch.id,
        transfer_date=payload.transfer_date,
        required_volume_l=required_volume(recipe),
        tanks=tanks,
        message=None if tanks else NO_TANKS_MESSAGE,
    )


@router.post("/transfer", response_model=TransferRequest)
async def confirm_transfer(payload: TransferCreate):
    batch = _get_batch(payload, payload.batch_id)
    plan = plan_transfer(
        batch,
        payload.new_fermenter_id,
        payload.transfer_date,
        payload.locations,
        payload.batches,
        payload.recipes,
    )
    if not plan.ok:
        logger.info("transfer of batch %s rejected: %s", batch.id, plan.message)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=plan.message)
    return plan.request


@router.post("/new-batch-check", response_model=NewBatchCheck)
async def new_batch_check(payload: NewBatchCheckRequest):
    """
    Check a tank before a new batch is planned into it.

    - `conflict`: another batch still holds the tank; `conflict.available_from`
      is the first free day.
    - `insufficient_volume`: the tank is free but too small; pick one of
      `suitable_tanks` instead.
    """
    result = check_new_batch(
        payload.recipe_id,
        payload.cook_date,
        payload.fermenter_id,
        payload.locations,
        payload.batches,
        payload.recipes,
    )
    if result.status == "invalid":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.message)
    return result


@router.post("/timeline", response_model=TankTimelineOut)
async def batch_tank_on_day(payload: TankTimelineRequest):
    return TankTimelineOut(
        batch_id=payload.batch.id,
        day=payload.day,
        tank_id=tank_for_date(payload.batch, payload.day),
    )
