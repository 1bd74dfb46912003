from datetime import date, datetime, timezone

from core.occupancy import (
    NO_TANKS_FOR_VOLUME_MESSAGE,
    NO_TANKS_MESSAGE,
    SAME_TANK_MESSAGE,
    TANK_UNAVAILABLE_MESSAGE,
    available_tanks,
    available_tanks_for_batch,
    check_new_batch,
    find_tank_conflict,
    is_tank_occupied,
    occupancy_window,
    plan_transfer,
    recipes_by_id,
    tank_for_date,
)
from schemas.batches import Batch, Recipe, TransferLogEntry


def _ids(tanks):
    return [t.id for t in tanks]


def test_window_runs_cook_day_plus_fermentation_days(batches, recipes):
    b1 = batches[0]
    assert occupancy_window(b1, recipes_by_id(recipes)["r_ipa"]) == (date(2024, 1, 1), date(2024, 1, 15))


def test_window_ends_on_packaging_day(batches, recipes):
    b2 = batches[1]
    assert occupancy_window(b2, recipes_by_id(recipes)["r_lager"]) == (date(2024, 1, 5), date(2024, 1, 20))


def test_tank_occupied_on_every_day_of_window(batches, recipes):
    by_id = recipes_by_id(recipes)
    for day in (date(2024, 1, 1), date(2024, 1, 10), date(2024, 1, 15)):
        assert is_tank_occupied("tank_1", day, batches, by_id)
    assert not is_tank_occupied("tank_1", date(2023, 12, 31), batches, by_id)
    assert not is_tank_occupied("tank_1", date(2024, 1, 16), batches, by_id)


def test_transfer_query_marks_occupied_tank(locations, batches, recipes):
    kwargs = dict(required_volume_l=0, locations=locations, batches=batches, recipes=recipes,
                  current_batch_id="new", current_fermenter_id="tank_2")
    assert "tank_1" not in _ids(available_tanks(day=date(2024, 1, 10), **kwargs))
    assert "tank_1" in _ids(available_tanks(day=date(2024, 1, 16), **kwargs))


def test_small_tanks_are_excluded(locations, batches, recipes):
    tanks = available_tanks(day=date(2024, 3, 1), required_volume_l=800, locations=locations,
                            batches=batches, recipes=recipes)
    assert _ids(tanks) == ["tank_1", "tank_3"]


def test_warehouses_are_never_candidates(locations, batches, recipes):
    tanks = available_tanks(day=date(2024, 3, 1), required_volume_l=0, locations=locations,
                            batches=batches, recipes=recipes)
    assert _ids(tanks) == ["tank_1", "tank_2", "tank_3"]


def test_completed_batches_do_not_occupy(batches, recipes):
    assert not is_tank_occupied("tank_2", date(2023, 12, 5), batches, recipes_by_id(recipes))


def test_batch_does_not_block_itself(locations, batches, recipes):
    b2 = batches[1]
    # b2 lives in tank_3 until 2024-01-20 and is the only thing there
    tanks = available_tanks(day=date(2024, 1, 10), required_volume_l=0, locations=locations,
                            batches=batches, recipes=recipes, current_batch_id="b2")
    assert "tank_3" in _ids(tanks)
    assert b2.fermenter_id == "tank_3"


def test_available_for_batch_excludes_current_fermenter(locations, batches, recipes):
    b1 = batches[0]
    assert available_tanks_for_batch(b1, date(2024, 1, 10), locations, batches, recipes) == []
    assert _ids(available_tanks_for_batch(b1, date(2024, 1, 21), locations, batches, recipes)) == ["tank_3"]


def test_unknown_recipe_has_no_candidates(locations, batches, recipes):
    orphan = Batch(id="b9", recipe_id="missing", fermenter_id="tank_1", cook_date=date(2024, 1, 1))
    assert available_tanks_for_batch(orphan, date(2024, 3, 1), locations, batches, recipes) == []


def test_unknown_recipe_batch_occupies_nothing(locations, batches, recipes):
    orphan = Batch(id="b9", recipe_id="missing", fermenter_id="tank_2", cook_date=date(2024, 3, 1))
    tanks = available_tanks(day=date(2024, 3, 1), required_volume_l=0, locations=locations,
                            batches=[*batches, orphan], recipes=recipes)
    assert "tank_2" in _ids(tanks)


def test_missing_target_volume_counts_as_zero(locations, batches, recipes):
    tiny = Recipe(id="r_tiny", fermentation_steps=[])
    b = Batch(id="b9", recipe_id="r_tiny", fermenter_id="tank_3", cook_date=date(2024, 3, 1))
    tanks = available_tanks_for_batch(b, date(2024, 3, 1), locations, [*batches, b], [*recipes, tiny])
    assert _ids(tanks) == ["tank_1", "tank_2"]


def test_plan_transfer_rejects_same_tank(locations, batches, recipes):
    plan = plan_transfer(batches[0], "tank_1", date(2024, 1, 21), locations, batches, recipes)
    assert not plan.ok
    assert plan.message == SAME_TANK_MESSAGE


def test_plan_transfer_without_candidates(locations, batches, recipes):
    plan = plan_transfer(batches[0], "tank_3", date(2024, 1, 10), locations, batches, recipes)
    assert not plan.ok
    assert plan.message == NO_TANKS_MESSAGE


def test_plan_transfer_rejects_ineligible_destination(locations, batches, recipes):
    plan = plan_transfer(batches[0], "tank_2", date(2024, 1, 21), locations, batches, recipes)
    assert not plan.ok
    assert plan.message == TANK_UNAVAILABLE_MESSAGE
    assert _ids(plan.available) == ["tank_3"]


def test_plan_transfer_ok(locations, batches, recipes):
    plan = plan_transfer(batches[0], "tank_3", "2024-01-21", locations, batches, recipes)
    assert plan.ok
    assert plan.request.batch_id == "b1"
    assert plan.request.new_fermenter_id == "tank_3"
    assert plan.request.transfer_date == date(2024, 1, 21)


def test_conflict_reports_first_free_day(locations, batches, recipes):
    conflict = find_tank_conflict(date(2024, 1, 10), "tank_1", batches, recipes, locations)
    assert conflict is not None
    assert conflict.batch_id == "b1"
    assert conflict.last_occupied == date(2024, 1, 15)
    assert conflict.available_from == date(2024, 1, 16)
    assert conflict.message == "Tank FV-1 is occupied by lot L001. Available from 2024-01-16."


def test_no_conflict_after_window(locations, batches, recipes):
    assert find_tank_conflict(date(2024, 1, 16), "tank_1", batches, recipes, locations) is None
    # only a completed batch ever used tank_2
    assert find_tank_conflict(date(2023, 12, 2), "tank_2", batches, recipes, locations) is None


def test_new_batch_ok(locations, batches, recipes):
    result = check_new_batch("r_ipa", date(2024, 2, 1), "tank_3", locations, batches, recipes)
    assert result.ok
    assert result.required_volume_l == 800
    assert result.tank_volume_l == 2000


def test_new_batch_conflict(locations, batches, recipes):
    result = check_new_batch("r_ipa", date(2024, 1, 10), "tank_3", locations, batches, recipes)
    assert result.status == "conflict"
    assert result.conflict.available_from == date(2024, 1, 21)


def test_new_batch_tank_too_small(locations, batches, recipes):
    result = check_new_batch("r_lager", date(2024, 2, 1), "tank_2", locations, batches, recipes)
    assert result.status == "insufficient_volume"
    assert "too small" in result.message
    assert _ids(result.suitable_tanks) == ["tank_3"]


def test_new_batch_no_tank_big_enough(locations, batches, recipes):
    huge = Recipe(id="r_huge", target_volume_l=5000)
    result = check_new_batch("r_huge", date(2024, 2, 1), "tank_3", locations, batches, [*recipes, huge])
    assert result.status == "insufficient_volume"
    assert result.message == NO_TANKS_FOR_VOLUME_MESSAGE
    assert result.suitable_tanks == []


def test_new_batch_unknown_recipe(locations, batches, recipes):
    assert check_new_batch("nope", date(2024, 2, 1), "tank_3", locations, batches, recipes).status == "invalid"


def test_tank_for_date_follows_transfers():
    batch = Batch(
        id="b1",
        recipe_id="r_ipa",
        fermenter_id="tank_3",
        cook_date=date(2024, 1, 1),
        transfers=[
            TransferLogEntry(timestamp=datetime(2024, 1, 8, 10, tzinfo=timezone.utc),
                             from_tank_id="tank_1", to_tank_id="tank_3"),
        ],
    )
    assert tank_for_date(batch, date(2024, 1, 7)) == "tank_1"
    assert tank_for_date(batch, date(2024, 1, 8)) == "tank_3"
    assert tank_for_date(batch, date(2024, 1, 30)) == "tank_3"


def test_tank_for_date_without_transfers(batches):
    assert tank_for_date(batches[0], date(2024, 1, 5)) == "tank_1"


def test_tank_exactly_the_required_volume_qualifies(locations, batches, recipes):
    tanks = available_tanks(day=date(2024, 3, 1), required_volume_l=1000, locations=locations,
                            batches=batches, recipes=recipes)
    assert _ids(tanks) == ["tank_1", "tank_3"]
    tanks = available_tanks(day=date(2024, 3, 1), required_volume_l=1000.5, locations=locations,
                            batches=batches, recipes=recipes)
    assert _ids(tanks) == ["tank_3"]


def test_new_batch_fills_tank_exactly(locations, batches, recipes):
    full = Recipe(id="r_full", target_volume_l=500)
    result = check_new_batch("r_full", date(2024, 2, 1), "tank_2", locations, batches, [*recipes, full])
    assert result.ok
    assert result.tank_volume_l == result.required_volume_l == 500


def test_new_batch_in_warehouse_is_invalid(locations, batches, recipes):
    empty = Recipe(id="r_empty", target_volume_l=0)
    result = check_new_batch("r_empty", date(2024, 2, 1), "wh_main", locations, batches, [*recipes, empty])
    assert result.status == "invalid"
