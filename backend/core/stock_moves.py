"""Move-stock form logic: cascading options and the final validation."""

import logging
import math
from typing import List, Optional, Sequence

from schemas.catalog import Location
from schemas.inventory import MoveCheck, MoveOptions, MoveRequest, MoveSelection, WarehouseItem

logger = logging.getLogger(__name__)

INCOMPLETE_MESSAGE = "Select an item, lot, source, destination and a positive quantity."
SAME_LOCATION_MESSAGE = "Destination location must be different from source."
INSUFFICIENT_MESSAGE = "Insufficient quantity to move."


def lots_for_item(ledger: Sequence[WarehouseItem], master_item_id: Optional[str]) -> List[str]:
    if not master_item_id:
        return []
    seen = {}
    for row in ledger:
        if row.master_item_id == master_item_id:
            seen.setdefault(row.lot_number, None)
    return list(seen)


def source_locations(
    ledger: Sequence[WarehouseItem],
    locations: Sequence[Location],
    master_item_id: Optional[str],
    lot_number: Optional[str],
) -> List[Location]:
    if not master_item_id or not lot_number:
        return []
    by_id = {loc.id: loc for loc in locations}
    out = []
    for row in ledger:
        if row.master_item_id != master_item_id or row.lot_number != lot_number:
            continue
        if row.quantity <= 0:
            continue
        loc = by_id.get(row.location_id)
        if loc is not None:
            out.append(loc)
    return out


def destination_locations(
    locations: Sequence[Location], from_location_id: Optional[str]
) -> List[Location]:
    # tanks are fed through batch transfers, never through stock moves
    return [loc for loc in locations if not loc.is_tank and loc.id != from_location_id]


def available_quantity(
    ledger: Sequence[WarehouseItem],
    master_item_id: Optional[str],
    lot_number: Optional[str],
    location_id: Optional[str],
) -> float:
    if not (master_item_id and lot_number and location_id):
        return 0.0
    for row in ledger:
        if (
            row.master_item_id == master_item_id
            and row.lot_number == lot_number
            and row.location_id == location_id
        ):
            return float(row.quantity or 0)
    return 0.0


def move_options(
    ledger: Sequence[WarehouseItem],
    locations: Sequence[Location],
    selection: MoveSelection,
) -> MoveOptions:
    return MoveOptions(
        lots=lots_for_item(ledger, selection.master_item_id),
        from_locations=source_locations(
            ledger, locations, selection.master_item_id, selection.lot_number
        ),
        to_locations=destination_locations(locations, selection.from_location_id)
        if selection.from_location_id
        else [],
        available_quantity=available_quantity(
            ledger,
            selection.master_item_id,
            selection.lot_number,
            selection.from_location_id,
        ),
    )


def validate_move(ledger: Sequence[WarehouseItem], selection: MoveSelection) -> MoveCheck:
    """
    Check a move before it is handed to the store.

    Failures come back as a message for the user, never as an exception.
    """
    s = selection
    qty = s.quantity
    if not (s.master_item_id and s.lot_number and s.from_location_id and s.to_location_id):
        return MoveCheck(ok=False, message=INCOMPLETE_MESSAGE)
    if qty is None or not math.isfinite(qty) or qty <= 0:
        return MoveCheck(ok=False, message=INCOMPLETE_MESSAGE)

    have = available_quantity(ledger, s.master_item_id, s.lot_number, s.from_location_id)
    if s.from_location_id == s.to_location_id:
        return MoveCheck(ok=False, message=SAME_LOCATION_MESSAGE, available_quantity=have)
    if qty > have:
        logger.debug(
            "move rejected: item=%s lot=%s from=%s requested=%s available=%s",
            s.master_item_id, s.lot_number, s.from_location_id, qty, have,
        )
        return MoveCheck(ok=False, message=INSUFFICIENT_MESSAGE, available_quantity=have)

    return MoveCheck(
        ok=True,
        available_quantity=have,
        request=MoveRequest(
            master_item_id=s.master_item_id,
            lot_number=s.lot_number,
            from_location_id=s.from_location_id,
            to_location_id=s.to_location_id,
            quantity=float(qty),
        ),
    )
