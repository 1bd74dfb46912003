"""
Warehouse ledger updates.

Nothing here mutates its input: each operation returns the ledger the store
should hold afterwards plus the movement records to append to the history.
"""

import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from core.catalog import categories_by_id, category_display_name, location_name
from core.config import settings
from core.dates import utc_now
from core.stock_moves import validate_move
from schemas.catalog import Category, Location, MasterItem
from schemas.inventory import (
    LedgerUpdate,
    MoveSelection,
    StockLot,
    StockSummaryItem,
    UnloadRequest,
    UnloadShortfall,
    WarehouseItem,
    WarehouseItemCreate,
    WarehouseMovement,
)

logger = logging.getLogger(__name__)


def _row_id() -> str:
    return f"wh_{uuid.uuid4().hex}"


def _movement_id() -> str:
    return f"mov_{uuid.uuid4().hex}"


def _movement(
    *,
    type_: str,
    row: WarehouseItem,
    quantity: float,
    location_id: str,
    timestamp: datetime,
    document_number: Optional[str] = None,
) -> WarehouseMovement:
    return WarehouseMovement(
        id=_movement_id(),
        timestamp=timestamp,
        type=type_,
        master_item_id=row.master_item_id,
        lot_number=row.lot_number,
        quantity=quantity,
        location_id=location_id,
        document_number=document_number if document_number is not None else row.document_number,
    )


def _prune(rows: List[WarehouseItem]) -> List[WarehouseItem]:
    return [r for r in rows if r.quantity > settings.unload_epsilon]


def load_items(
    ledger: Sequence[WarehouseItem],
    items: Sequence[WarehouseItemCreate],
    now: Optional[datetime] = None,
) -> LedgerUpdate:
    now = now or utc_now()
    new_rows = [WarehouseItem(id=_row_id(), **item.model_dump()) for item in items]
    movements = [
        _movement(type_="load", row=r, quantity=r.quantity, location_id=r.location_id, timestamp=now)
        for r in new_rows
    ]
    logger.info("loaded %d item(s) into warehouse", len(new_rows))
    return LedgerUpdate(
        items=[*ledger, *new_rows],
        movements=movements,
        message=f"{len(new_rows)} item(s) loaded into warehouse.",
    )


def unload_fifo(
    ledger: Sequence[WarehouseItem],
    requests: Sequence[UnloadRequest],
    now: Optional[datetime] = None,
) -> LedgerUpdate:
    """
    Take each requested (item, lot) quantity out of the ledger, oldest arrival
    first, across every location holding that lot.

    Asking for more than is held empties what exists and reports the rest as
    a shortfall.
    """
    now = now or utc_now()
    rows = [r.model_copy() for r in ledger]
    movements: List[WarehouseMovement] = []
    shortfalls: List[UnloadShortfall] = []

    for req in requests:
        remaining = float(req.quantity)
        lots = sorted(
            (r for r in rows if r.master_item_id == req.master_item_id and r.lot_number == req.lot_number),
            key=lambda r: r.arrival_date,
        )
        taken_by_location: Dict[str, float] = {}
        first_row: Dict[str, WarehouseItem] = {}
        for row in lots:
            if remaining <= 0:
                break
            take = min(remaining, row.quantity)
            if take <= 0:
                continue
            row.quantity -= take
            remaining -= take
            taken_by_location[row.location_id] = taken_by_location.get(row.location_id, 0.0) + take
            first_row.setdefault(row.location_id, row)

        for location_id, taken in taken_by_location.items():
            movements.append(
                _movement(
                    type_="brew_unload" if req.brew else "unload",
                    row=first_row[location_id],
                    quantity=-taken,
                    location_id=location_id,
                    timestamp=now,
                    document_number=req.document_number,
                )
            )
        if remaining > settings.unload_epsilon:
            logger.info(
                "unload short: item=%s lot=%s requested=%s missing=%s",
                req.master_item_id, req.lot_number, req.quantity, remaining,
            )
            shortfalls.append(
                UnloadShortfall(
                    master_item_id=req.master_item_id,
                    lot_number=req.lot_number,
                    requested=float(req.quantity),
                    missing=remaining,
                )
            )

    return LedgerUpdate(
        ok=not shortfalls,
        items=_prune(rows),
        movements=movements,
        shortfalls=shortfalls,
        message=f"{len(requests)} type(s) of items unloaded from warehouse.",
    )


def apply_move(
    ledger: Sequence[WarehouseItem],
    selection: MoveSelection,
    now: Optional[datetime] = None,
) -> LedgerUpdate:
    check = validate_move(ledger, selection)
    if not check.ok:
        return LedgerUpdate(ok=False, message=check.message, items=list(ledger))

    req = check.request
    now = now or utc_now()
    rows = [r.model_copy() for r in ledger]

    source = next(
        r for r in rows
        if r.master_item_id == req.master_item_id
        and r.lot_number == req.lot_number
        and r.location_id == req.from_location_id
    )
    source.quantity -= req.quantity

    target = next(
        (
            r for r in rows
            if r.master_item_id == req.master_item_id
            and r.lot_number == req.lot_number
            and r.location_id == req.to_location_id
        ),
        None,
    )
    if target is None:
        target = source.model_copy(
            update={"id": _row_id(), "location_id": req.to_location_id, "quantity": 0.0}
        )
        rows.append(target)
    target.quantity += req.quantity

    movements = [
        _movement(type_="move", row=source, quantity=-req.quantity, location_id=req.from_location_id, timestamp=now),
        _movement(type_="move", row=source, quantity=req.quantity, location_id=req.to_location_id, timestamp=now),
    ]
    return LedgerUpdate(items=_prune(rows), movements=movements, message="Stock moved.")


def stock_summary(
    ledger: Sequence[WarehouseItem],
    master_items: Sequence[MasterItem],
    categories: Sequence[Category],
    locations: Sequence[Location],
    search: Optional[str] = None,
) -> List[StockSummaryItem]:
    """Per-item totals with their lots, sorted by item name."""
    items = {mi.id: mi for mi in master_items}
    cats = categories_by_id(categories)
    locs = {loc.id: loc for loc in locations}

    summary: Dict[str, StockSummaryItem] = {}
    for row in ledger:
        mi = items.get(row.master_item_id)
        if mi is None:
            continue
        entry = summary.get(mi.id)
        if entry is None:
            entry = summary[mi.id] = StockSummaryItem(
                master_item_id=mi.id,
                name=mi.name,
                unit=mi.unit,
                category_name=category_display_name(mi.category_id, cats),
                total_quantity=0.0,
            )
        entry.total_quantity += float(row.quantity)
        entry.lots.append(
            StockLot(
                id=row.id,
                lot_number=row.lot_number,
                quantity=float(row.quantity),
                location_id=row.location_id,
                location_name=location_name(row.location_id, locs),
                arrival_date=row.arrival_date,
                expiry_date=row.expiry_date,
            )
        )

    for entry in summary.values():
        mi = items[entry.master_item_id]
        entry.below_reorder_point = (
            mi.reorder_point is not None and entry.total_quantity <= mi.reorder_point
        )

    out = sorted(summary.values(), key=lambda e: e.name.lower())
    term = (search or "").strip().lower()
    if not term:
        return out
    return [
        e for e in out
        if term in e.name.lower()
        or term in e.category_name.lower()
        or any(term in lot.lot_number.lower() for lot in e.lots)
    ]
