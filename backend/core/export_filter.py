"""Stock report selection.

Filters combine with AND across dimensions and OR within one; an empty filter
lets everything through. A category filter also matches items filed under a
direct sub-category of a selected category.
"""

import logging
from typing import Dict, List, Optional, Sequence

from core.catalog import categories_by_id, category_display_name, location_name
from schemas.catalog import Category, Location, MasterItem
from schemas.exports import ExportFilters, ExportRow
from schemas.inventory import WarehouseItem

logger = logging.getLogger(__name__)


def _category_matches(
    category_id: Optional[str],
    wanted: set,
    by_id: Dict[str, Category],
) -> bool:
    if not wanted:
        return True
    if category_id in wanted:
        return True
    category = by_id.get(category_id) if category_id else None
    return bool(category and category.parent_category_id in wanted)


def filter_stock(
    ledger: Sequence[WarehouseItem],
    master_items: Sequence[MasterItem],
    categories: Sequence[Category],
    filters: ExportFilters,
) -> List[WarehouseItem]:
    """Ledger rows selected by `filters`, in ledger order."""
    items = {mi.id: mi for mi in master_items}
    cats = categories_by_id(categories)
    location_ids = set(filters.location_ids)
    category_ids = set(filters.category_ids)
    needle = filters.item_name.lower()

    out = []
    for row in ledger:
        mi = items.get(row.master_item_id)
        if mi is None:
            continue
        if location_ids and row.location_id not in location_ids:
            continue
        if not _category_matches(mi.category_id, category_ids, cats):
            continue
        if needle and needle not in mi.name.lower():
            continue
        out.append(row)

    logger.debug("filter_stock kept %d of %d rows", len(out), len(ledger))
    return out


def export_rows(
    ledger: Sequence[WarehouseItem],
    master_items: Sequence[MasterItem],
    categories: Sequence[Category],
    locations: Sequence[Location],
    filters: ExportFilters,
) -> List[ExportRow]:
    """Filtered rows with display names attached, ordered by item then lot."""
    items = {mi.id: mi for mi in master_items}
    cats = categories_by_id(categories)
    locs = {loc.id: loc for loc in locations}

    rows = []
    for row in filter_stock(ledger, master_items, categories, filters):
        mi = items[row.master_item_id]
        rows.append(
            ExportRow(
                warehouse_item_id=row.id,
                master_item_id=mi.id,
                item_name=mi.name,
                unit=mi.unit,
                category_name=category_display_name(mi.category_id, cats),
                lot_number=row.lot_number,
                quantity=float(row.quantity),
                location_id=row.location_id,
                location_name=location_name(row.location_id, locs),
                arrival_date=row.arrival_date,
                expiry_date=row.expiry_date,
                document_number=row.document_number,
            )
        )
    rows.sort(key=lambda r: (r.item_name.lower(), r.lot_number))
    return rows
