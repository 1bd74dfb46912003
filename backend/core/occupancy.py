"""
Tank occupancy.

A batch keeps its fermenter busy from the cook day up to and including the
packaging day. Until packaging has happened the last day is planned as
cook day + the recipe's total fermentation days.

Completed batches, and batches whose recipe is unknown, occupy nothing.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.dates import add_days, as_utc, format_day, parse_day
from schemas.batches import Batch, Recipe
from schemas.catalog import Location
from schemas.tanks import NewBatchCheck, TankConflict, TransferPlan, TransferRequest

logger = logging.getLogger(__name__)

NO_TANKS_MESSAGE = "No suitable tanks available for this date and volume."
NO_TANKS_FOR_VOLUME_MESSAGE = "No suitable tanks available for the required volume."
SAME_TANK_MESSAGE = "The destination tank must be different from the source."
TANK_UNAVAILABLE_MESSAGE = "The selected tank is not available on this date."


def recipes_by_id(recipes: Iterable[Recipe]) -> Dict[str, Recipe]:
    return {r.id: r for r in recipes}


def fermentation_days(recipe: Recipe) -> int:
    return sum(int(step.days or 0) for step in recipe.fermentation_steps)


def required_volume(recipe: Optional[Recipe]) -> float:
    if recipe is None:
        return 0.0
    return float(recipe.target_volume_l or 0)


def tank_volume(location: Optional[Location]) -> float:
    if location is None:
        return 0.0
    return float(location.gross_volume_l or 0)


def occupancy_window(batch: Batch, recipe: Recipe) -> Tuple[date, date]:
    start = batch.cook_date
    if batch.packaging_date:
        return start, batch.packaging_date
    return start, add_days(start, fermentation_days(recipe))


def occupies(batch: Batch, tank_id: str, day: date, recipes: Dict[str, Recipe]) -> bool:
    if batch.fermenter_id != tank_id or batch.is_completed:
        return False
    recipe = recipes.get(batch.recipe_id)
    if recipe is None:
        return False
    start, end = occupancy_window(batch, recipe)
    return start <= day <= end


def is_tank_occupied(
    tank_id: str,
    day: date,
    batches: Iterable[Batch],
    recipes: Dict[str, Recipe],
    exclude_batch_id: Optional[str] = None,
) -> bool:
    return any(
        occupies(b, tank_id, day, recipes)
        for b in batches
        if b.id != exclude_batch_id
    )


def available_tanks(
    *,
    day: date,
    required_volume_l: float,
    locations: Sequence[Location],
    batches: Sequence[Batch],
    recipes: Sequence[Recipe],
    current_batch_id: Optional[str] = None,
    current_fermenter_id: Optional[str] = None,
) -> List[Location]:
    """
    Tanks a batch could be moved into on `day`.

    A tank qualifies when it is not the current fermenter, its gross volume
    covers `required_volume_l`, and no other live batch occupies it that day.
    Catalog order is preserved.
    """
    day = parse_day(day)
    by_id = recipes_by_id(recipes)
    out: List[Location] = []
    for loc in locations:
        if not loc.is_tank or loc.id == current_fermenter_id:
            continue
        if tank_volume(loc) < required_volume_l:
            continue
        if is_tank_occupied(loc.id, day, batches, by_id, exclude_batch_id=current_batch_id):
            continue
        out.append(loc)
    logger.debug(
        "available_tanks day=%s volume=%s -> %d of %d locations",
        format_day(day), required_volume_l, len(out), len(locations),
    )
    return out


def available_tanks_for_batch(
    batch: Batch,
    day: date,
    locations: Sequence[Location],
    batches: Sequence[Batch],
    recipes: Sequence[Recipe],
) -> List[Location]:
    recipe = recipes_by_id(recipes).get(batch.recipe_id)
    if recipe is None:
        return []
    return available_tanks(
        day=day,
        required_volume_l=required_volume(recipe),
        locations=locations,
        batches=batches,
        recipes=recipes,
        current_batch_id=batch.id,
        current_fermenter_id=batch.fermenter_id,
    )


def plan_transfer(
    batch: Batch,
    new_fermenter_id: str,
    transfer_date: date,
    locations: Sequence[Location],
    batches: Sequence[Batch],
    recipes: Sequence[Recipe],
) -> TransferPlan:
    transfer_date = parse_day(transfer_date)
    if new_fermenter_id == batch.fermenter_id:
        return TransferPlan(ok=False, message=SAME_TANK_MESSAGE)

    candidates = available_tanks_for_batch(batch, transfer_date, locations, batches, recipes)
    if not candidates:
        return TransferPlan(ok=False, message=NO_TANKS_MESSAGE)
    if new_fermenter_id not in {t.id for t in candidates}:
        return TransferPlan(ok=False, message=TANK_UNAVAILABLE_MESSAGE, available=candidates)

    return TransferPlan(
        ok=True,
        request=TransferRequest(
            batch_id=batch.id,
            new_fermenter_id=new_fermenter_id,
            transfer_date=transfer_date,
        ),
        available=candidates,
    )


def find_tank_conflict(
    cook_date: date,
    fermenter_id: str,
    batches: Sequence[Batch],
    recipes: Sequence[Recipe],
    locations: Sequence[Location] = (),
) -> Optional[TankConflict]:
    """
    First live batch that still holds `fermenter_id` on or after `cook_date`.

    Only the end of the existing window matters: a new batch cannot be
    planned into a tank before an earlier batch in it has been packaged.
    """
    cook_date = parse_day(cook_date)
    by_id = recipes_by_id(recipes)
    for b in batches:
        if b.fermenter_id != fermenter_id or b.is_completed:
            continue
        recipe = by_id.get(b.recipe_id)
        if recipe is None:
            continue
        _start, last = occupancy_window(b, recipe)
        if cook_date <= last:
            free_from = add_days(last, 1)
            tank = next((loc for loc in locations if loc.id == fermenter_id), None)
            tank_name = tank.name if tank else fermenter_id
            return TankConflict(
                batch_id=b.id,
                lot=b.lot,
                tank_id=fermenter_id,
                last_occupied=last,
                available_from=free_from,
                message=(
                    f"Tank {tank_name} is occupied by lot {b.lot or b.id}. "
                    f"Available from {format_day(free_from)}."
                ),
            )
    return None


def suitable_tanks(locations: Sequence[Location], required_volume_l: float) -> List[Location]:
    return [loc for loc in locations if loc.is_tank and tank_volume(loc) >= required_volume_l]


def check_new_batch(
    recipe_id: str,
    cook_date: date,
    fermenter_id: str,
    locations: Sequence[Location],
    batches: Sequence[Batch],
    recipes: Sequence[Recipe],
) -> NewBatchCheck:
    recipe = recipes_by_id(recipes).get(recipe_id)
    tank = next((loc for loc in locations if loc.id == fermenter_id), None)
    if recipe is None or tank is None or not tank.is_tank:
        return NewBatchCheck(status="invalid", message="Unknown recipe or tank.")

    conflict = find_tank_conflict(cook_date, fermenter_id, batches, recipes, locations)
    if conflict is not None:
        return NewBatchCheck(
            status="conflict",
            message=conflict.message,
            conflict=conflict,
            required_volume_l=required_volume(recipe),
            tank_volume_l=tank_volume(tank),
        )

    needed = required_volume(recipe)
    have = tank_volume(tank)
    if needed > have:
        options = suitable_tanks(locations, needed)
        return NewBatchCheck(
            status="insufficient_volume",
            message=(
                f"The selected tank {tank.name} ({have:g} L) is too small for the "
                f"required volume of {needed:.0f} L."
                if options
                else NO_TANKS_FOR_VOLUME_MESSAGE
            ),
            required_volume_l=needed,
            tank_volume_l=have,
            suitable_tanks=options,
        )

    return NewBatchCheck(status="ok", required_volume_l=needed, tank_volume_l=have)


def tank_for_date(batch: Batch, day: date) -> str:
    """Tank holding `batch` on `day`, following its transfer log."""
    day = parse_day(day)
    transfers = sorted(batch.transfers, key=lambda t: as_utc(t.timestamp))
    tank_id = (transfers[0].from_tank_id if transfers else None) or batch.fermenter_id
    for t in transfers:
        if parse_day(t.timestamp) > day:
            break
        tank_id = t.to_tank_id or tank_id
    return tank_id
