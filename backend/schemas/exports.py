from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .catalog import Category, Location, MasterItem
from .inventory import WarehouseItem, WarehouseItemCreate


class ExportFilters(BaseModel):
    location_ids: List[str] = []
    category_ids: List[str] = []
    item_name: str = ""

    @field_validator("item_name", mode="before")
    @classmethod
    def _strip_name(cls, v) -> str:
        return (v or "").strip()


class ExportRequest(BaseModel):
    ledger: List[WarehouseItem] = []
    master_items: List[MasterItem] = []
    categories: List[Category] = []
    locations: List[Location] = []
    filters: ExportFilters = Field(default_factory=ExportFilters)


class ExportRow(BaseModel):
    warehouse_item_id: str
    master_item_id: str
    item_name: str
    unit: str
    category_name: str
    lot_number: str
    quantity: float
    location_id: str
    location_name: str
    arrival_date: date
    expiry_date: Optional[date] = None
    document_number: Optional[str] = None


class SkippedRow(BaseModel):
    row: int
    reason: str


class StockImportResult(BaseModel):
    items: List[WarehouseItemCreate] = []
    imported: int = 0
    skipped: int = 0
    skipped_rows: List[SkippedRow] = []
    message: str = ""
