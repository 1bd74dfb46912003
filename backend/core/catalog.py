import logging
import uuid
from typing import Dict, Iterable, List, Optional, Sequence

from schemas.batches import Batch
from schemas.catalog import Category, CategoryIn, CategoryOption, Location, LocationIn
from schemas.inventory import WarehouseItem

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def categories_by_id(categories: Iterable[Category]) -> Dict[str, Category]:
    return {c.id: c for c in categories}


def category_display_name(category_id: Optional[str], by_id: Dict[str, Category]) -> str:
    """`Parent - Child` for sub-categories, the bare name otherwise."""
    category = by_id.get(category_id) if category_id else None
    if category is None:
        return NOT_AVAILABLE
    if category.parent_category_id:
        parent = by_id.get(category.parent_category_id)
        if parent is not None:
            return f"{parent.name} - {category.name}"
    return category.name


def location_name(location_id: Optional[str], by_id: Dict[str, Location]) -> str:
    loc = by_id.get(location_id) if location_id else None
    return loc.name if loc else NOT_AVAILABLE


def category_options(categories: Sequence[Category]) -> List[CategoryOption]:
    """Top-level categories by name, each followed by its children (indented)."""

    def _key(c: Category) -> str:
        return c.name.lower()

    parents = sorted((c for c in categories if not c.parent_category_id), key=_key)
    out: List[CategoryOption] = []
    for parent in parents:
        out.append(CategoryOption(value=parent.id, label=parent.name))
        children = sorted(
            (c for c in categories if c.parent_category_id == parent.id), key=_key
        )
        out.extend(CategoryOption(value=c.id, label=f"  - {c.name}") for c in children)
    return out


def save_category(categories: Sequence[Category], payload: CategoryIn) -> List[Category]:
    if payload.parent_category_id and payload.parent_category_id == payload.id:
        raise ValueError("a category cannot be its own parent")
    if payload.id and any(c.id == payload.id for c in categories):
        updated = Category(**payload.model_dump())
        return [updated if c.id == payload.id else c for c in categories]
    created = Category(
        id=payload.id or _new_id("cat"),
        name=payload.name,
        parent_category_id=payload.parent_category_id,
    )
    return [*categories, created]


def delete_category(categories: Sequence[Category], category_id: str) -> List[Category]:
    # one level only: grandchildren keep a dangling parent id
    return [
        c for c in categories
        if c.id != category_id and c.parent_category_id != category_id
    ]


def save_location(locations: Sequence[Location], payload: LocationIn) -> List[Location]:
    data = payload.model_dump()
    if data["type"] != "Tank":
        data["gross_volume_l"] = None
    if payload.id and any(loc.id == payload.id for loc in locations):
        updated = Location(**data)
        return [updated if loc.id == payload.id else loc for loc in locations]
    data["id"] = payload.id or _new_id("loc")
    return [*locations, Location(**data)]


def location_delete_blocker(
    location_id: str,
    locations: Sequence[Location],
    ledger: Sequence[WarehouseItem],
    batches: Sequence[Batch],
) -> Optional[str]:
    """Reason the location cannot be removed, or None when it is free."""
    loc = next((x for x in locations if x.id == location_id), None)
    name = loc.name if loc else location_id
    if any(row.location_id == location_id and row.quantity > 0 for row in ledger):
        return f"Location {name} still holds stock."
    busy = next(
        (b for b in batches if b.fermenter_id == location_id and not b.is_completed),
        None,
    )
    if busy is not None:
        return f"Tank {name} is in use by lot {busy.lot or busy.id}."
    return None


def delete_location(locations: Sequence[Location], location_id: str) -> List[Location]:
    return [loc for loc in locations if loc.id != location_id]
