import pytest

from core.stock_moves import (
    INCOMPLETE_MESSAGE,
    INSUFFICIENT_MESSAGE,
    SAME_LOCATION_MESSAGE,
    available_quantity,
    destination_locations,
    lots_for_item,
    move_options,
    source_locations,
    validate_move,
)
from schemas.inventory import MoveSelection


def test_lots_in_first_seen_order(ledger):
    assert lots_for_item(ledger, "mi_malt") == ["M1", "M2"]
    assert lots_for_item(ledger, None) == []


def test_sources_hold_the_lot(ledger, locations):
    assert [l.id for l in source_locations(ledger, locations, "mi_malt", "M1")] == ["wh_main", "wh_cold"]
    assert source_locations(ledger, locations, "mi_malt", None) == []


def test_destinations_skip_tanks_and_source(locations):
    assert [l.id for l in destination_locations(locations, "wh_main")] == ["wh_cold"]


def test_available_quantity_is_exact_match(ledger):
    assert available_quantity(ledger, "mi_malt", "M1", "wh_cold") == 40
    assert available_quantity(ledger, "mi_malt", "M2", "wh_cold") == 0


def test_options_cascade(ledger, locations):
    opts = move_options(ledger, locations, MoveSelection(master_item_id="mi_malt", lot_number="M1"))
    assert opts.lots == ["M1", "M2"]
    assert [l.id for l in opts.from_locations] == ["wh_main", "wh_cold"]
    assert opts.to_locations == []

    opts = move_options(
        ledger, locations,
        MoveSelection(master_item_id="mi_malt", lot_number="M1", from_location_id="wh_cold"),
    )
    assert [l.id for l in opts.to_locations] == ["wh_main"]
    assert opts.available_quantity == 40


def _sel(**kw):
    base = dict(master_item_id="mi_malt", lot_number="M1", from_location_id="wh_main",
                to_location_id="wh_cold", quantity=30)
    base.update(kw)
    return MoveSelection(**base)


def test_valid_move(ledger):
    check = validate_move(ledger, _sel())
    assert check.ok
    assert check.request.quantity == 30
    assert check.available_quantity == 100


def test_move_all_of_it(ledger):
    assert validate_move(ledger, _sel(quantity=100)).ok


@pytest.mark.parametrize("qty", [1, 100])
def test_same_location_always_rejected(ledger, qty):
    check = validate_move(ledger, _sel(to_location_id="wh_main", quantity=qty))
    assert not check.ok
    assert check.message == SAME_LOCATION_MESSAGE


def test_more_than_available_rejected(ledger):
    check = validate_move(ledger, _sel(quantity=100.5))
    assert not check.ok
    assert check.message == INSUFFICIENT_MESSAGE
    assert check.available_quantity == 100


def test_lot_missing_at_source_rejected(ledger):
    check = validate_move(ledger, _sel(lot_number="M2", from_location_id="wh_cold", to_location_id="wh_main", quantity=1))
    assert check.message == INSUFFICIENT_MESSAGE


@pytest.mark.parametrize(
    "changes",
    [{"lot_number": None}, {"to_location_id": "  "}, {"quantity": 0}, {"quantity": -5}, {"quantity": None}],
)
def test_incomplete_selection(ledger, changes):
    check = validate_move(ledger, _sel(**changes))
    assert not check.ok
    assert check.message == INCOMPLETE_MESSAGE


@pytest.mark.parametrize("qty", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_quantity_rejected(ledger, qty):
    check = validate_move(ledger, _sel(quantity=qty))
    assert not check.ok
    assert check.message == INCOMPLETE_MESSAGE
