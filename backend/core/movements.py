import logging
from typing import List, Sequence

from core.catalog import categories_by_id, category_display_name, location_name
from core.dates import as_utc, parse_day
from schemas.catalog import Category, Location, MasterItem
from schemas.inventory import MovementFilters, MovementRow, WarehouseMovement

logger = logging.getLogger(__name__)


def filter_movements(
    movements: Sequence[WarehouseMovement],
    master_items: Sequence[MasterItem],
    categories: Sequence[Category],
    locations: Sequence[Location],
    filters: MovementFilters,
) -> List[MovementRow]:
    """
    Movement history rows matching `filters`, newest first.

    - start/end compare calendar days; the end day is included in full.
    - category is an exact match on the item's own category.
    - search looks at item name, lot number and document number.
    """
    items = {mi.id: mi for mi in master_items}
    cats = categories_by_id(categories)
    locs = {loc.id: loc for loc in locations}
    term = (filters.search or "").strip().lower()

    out: List[MovementRow] = []
    for mov in movements:
        mi = items.get(mov.master_item_id)
        if mi is None:
            continue
        day = parse_day(mov.timestamp)
        if filters.start and day < filters.start:
            continue
        if filters.end and day > filters.end:
            continue
        if filters.type and mov.type != filters.type:
            continue
        if filters.location_id and mov.location_id != filters.location_id:
            continue
        if filters.category_id and mi.category_id != filters.category_id:
            continue
        if term and not (
            term in mi.name.lower()
            or term in mov.lot_number.lower()
            or (mov.document_number and term in mov.document_number.lower())
        ):
            continue
        out.append(
            MovementRow(
                id=mov.id,
                timestamp=mov.timestamp,
                type=mov.type,
                master_item_id=mi.id,
                item_name=mi.name,
                category_name=category_display_name(mi.category_id, cats),
                lot_number=mov.lot_number,
                quantity=mov.quantity,
                location_id=mov.location_id,
                location_name=location_name(mov.location_id, locs),
                document_number=mov.document_number,
            )
        )

    out.sort(key=lambda r: as_utc(r.timestamp), reverse=True)
    logger.debug("filter_movements kept %d of %d", len(out), len(movements))
    return out
