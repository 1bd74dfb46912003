import logging
from typing import List

from fastapi import APIRouter, HTTPException, status

from core.ledger import apply_move, load_items, stock_summary, unload_fifo
from core.movements import filter_movements
from core.stock_moves import INCOMPLETE_MESSAGE, move_options
from schemas.inventory import (
    LedgerUpdate,
    LoadCreate,
    MoveCreate,
    MoveOptions,
    MoveOptionsRequest,
    MovementRow,
    MovementSearchRequest,
    StockSummaryItem,
    StockSummaryRequest,
    UnloadCreate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/move/options", response_model=MoveOptions)
async def get_move_options(payload: MoveOptionsRequest):
    """
    Options for the move form given what has been picked so far.

    item -> lots -> source locations (holding stock) -> destinations
    (any non-tank location other than the source).
    """
    return move_options(payload.ledger, payload.locations, payload.selection)


@router.post("/move", response_model=LedgerUpdate, status_code=status.HTTP_201_CREATED)
async def move_stock(payload: MoveCreate):
    """
    Move a lot between locations.

    - Rejected when source and destination are the same, or when the source
      holds less than the requested quantity of that exact item/lot.
    - Returns the ledger after the move plus two `move` movements
      (negative at the source, positive at the destination).
    """
    known = {loc.id for loc in payload.locations}
    sel = payload.selection
    for loc_id in (sel.from_location_id, sel.to_location_id):
        if known and loc_id and loc_id not in known:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Location {loc_id} not found")

    try:
        result = apply_move(payload.ledger, sel)
    except Exception as e:
        logger.exception("move_stock failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to move stock: {e}")

    if not result.ok:
        logger.info("move rejected: %s", result.message)
        code = status.HTTP_400_BAD_REQUEST if result.message == INCOMPLETE_MESSAGE else status.HTTP_409_CONFLICT
        raise HTTPException(status_code=code, detail=result.message)
    return result


@router.post("/load", response_model=LedgerUpdate, status_code=status.HTTP_201_CREATED)
async def load_stock(payload: LoadCreate):
    if not payload.items:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="items must not be empty")
    try:
        return load_items(payload.ledger, payload.items)
    except Exception as e:
        logger.exception("load_stock failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to load stock: {e}")


@router.post("/unload", response_model=LedgerUpdate)
async def unload_stock(payload: UnloadCreate):
    """
    Unload lots oldest-arrival first.

    Partial unloads are not an error: `ok` is false and `shortfalls` lists
    what could not be taken.
    """
    if not payload.requests:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="requests must not be empty")
    try:
        return unload_fifo(payload.ledger, payload.requests)
    except Exception as e:
        logger.exception("unload_stock failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to unload stock: {e}")


@router.post("/summary", response_model=List[StockSummaryItem])
async def get_stock_summary(payload: StockSummaryRequest):
    return stock_summary(
        payload.ledger,
        payload.master_items,
        payload.categories,
        payload.locations,
        search=payload.search,
    )


@router.post("/movements/search", response_model=List[MovementRow])
async def search_movements(payload: MovementSearchRequest):
    f = payload.filters
    if f.start and f.end and f.start > f.end:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="start must be on or before end")
    return filter_movements(
        payload.movements,
        payload.master_items,
        payload.categories,
        payload.locations,
        f,
    )
