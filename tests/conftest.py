"""
Shared fixtures: a small brewery with three fermenters, two warehouses,
two recipes and a handful of ledger rows.
"""
from datetime import date

import pytest
from fastapi.testclient import TestClient

from main import app
from schemas.batches import Batch, FermentationStep, Recipe
from schemas.catalog import Category, Location, MasterItem
from schemas.inventory import WarehouseItem


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def locations():
    return [
        Location(id="tank_1", name="FV-1", type="Tank", gross_volume_l=1000),
        Location(id="tank_2", name="FV-2", type="Tank", gross_volume_l=500),
        Location(id="tank_3", name="FV-3", type="Tank", gross_volume_l=2000),
        Location(id="wh_main", name="Main Warehouse", type="Warehouse"),
        Location(id="wh_cold", name="Cold Room", type="Warehouse"),
    ]


@pytest.fixture
def recipes():
    return [
        # 7 + 7 days of fermentation
        Recipe(
            id="r_ipa",
            name="IPA",
            target_volume_l=800,
            fermentation_steps=[
                FermentationStep(description="Primary", temperature=19, days=7),
                FermentationStep(description="Dry hop", temperature=19, days=7),
            ],
        ),
        Recipe(
            id="r_lager",
            name="Lager",
            target_volume_l=1500,
            fermentation_steps=[
                FermentationStep(description="Primary", temperature=10, days=10),
                FermentationStep(description="Lagering", temperature=1, days=11),
            ],
        ),
    ]


@pytest.fixture
def batches():
    return [
        Batch(id="b1", recipe_id="r_ipa", fermenter_id="tank_1", cook_date=date(2024, 1, 1),
              status="Fermenting", lot="L001", beer_name="IPA"),
        Batch(id="b2", recipe_id="r_lager", fermenter_id="tank_3", cook_date=date(2024, 1, 5),
              packaging_date=date(2024, 1, 20), status="Packaged", lot="L002", beer_name="Lager"),
        Batch(id="b3", recipe_id="r_ipa", fermenter_id="tank_2", cook_date=date(2023, 12, 1),
              status="Completed", lot="L000", beer_name="IPA"),
    ]


@pytest.fixture
def categories():
    return [
        Category(id="cat_malt", name="Malt"),
        Category(id="cat_malt_base", name="Base Malt", parent_category_id="cat_malt"),
        Category(id="cat_hops", name="Hops"),
        Category(id="cat_pack", name="Packaging"),
    ]


@pytest.fixture
def master_items():
    return [
        MasterItem(id="mi_malt", name="Pilsner Malt", category_id="cat_malt_base", unit="Kg", reorder_point=50),
        MasterItem(id="mi_hops", name="Citra", category_id="cat_hops", unit="g"),
        MasterItem(id="mi_caps", name="Crown Caps", category_id="cat_pack", unit="pcs"),
    ]


@pytest.fixture
def ledger():
    return [
        WarehouseItem(id="w1", master_item_id="mi_malt", lot_number="M1", quantity=100,
                      location_id="wh_main", arrival_date=date(2024, 1, 2), document_number="INV-1"),
        WarehouseItem(id="w2", master_item_id="mi_malt", lot_number="M1", quantity=40,
                      location_id="wh_cold", arrival_date=date(2024, 1, 5), document_number="INV-2"),
        WarehouseItem(id="w3", master_item_id="mi_malt", lot_number="M2", quantity=25,
                      location_id="wh_main", arrival_date=date(2023, 12, 15)),
        WarehouseItem(id="w4", master_item_id="mi_hops", lot_number="H1", quantity=500,
                      location_id="wh_cold", arrival_date=date(2024, 1, 3), expiry_date=date(2025, 1, 3)),
        WarehouseItem(id="w5", master_item_id="mi_caps", lot_number="C1", quantity=1000,
                      location_id="wh_main", arrival_date=date(2024, 1, 1)),
    ]


def dump(models):
    return [m.model_dump(mode="json") for m in models]


@pytest.fixture
def tank_snapshot(locations, batches, recipes):
    return {
        "locations": dump(locations),
        "batches": dump(batches),
        "recipes": dump(recipes),
    }


@pytest.fixture
def stock_snapshot(ledger, master_items, categories, locations):
    return {
        "ledger": dump(ledger),
        "master_items": dump(master_items),
        "categories": dump(categories),
        "locations": dump(locations),
    }
