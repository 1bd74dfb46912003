import math
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .batches import Batch
from .catalog import Category, Location, MasterItem


MovementType = Literal["load", "unload", "brew_unload", "move"]


class WarehouseItem(BaseModel):
    id: str
    master_item_id: str
    lot_number: str
    quantity: float
    location_id: str
    arrival_date: date
    expiry_date: Optional[date] = None
    document_number: Optional[str] = None

    @field_validator("quantity")
    @classmethod
    def _quantity_non_negative(cls, v: float) -> float:
        if not math.isfinite(v) or v < 0:
            raise ValueError("quantity must be a finite number >= 0")
        return v

    @field_validator("expiry_date", mode="before")
    @classmethod
    def _blank_expiry(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class WarehouseItemCreate(BaseModel):
    master_item_id: str
    lot_number: str
    quantity: float
    location_id: str
    arrival_date: date
    expiry_date: Optional[date] = None
    document_number: Optional[str] = None

    @field_validator("lot_number", "master_item_id", "location_id")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("quantity")
    @classmethod
    def _quantity_positive(cls, v: float) -> float:
        if not math.isfinite(v) or v <= 0:
            raise ValueError("quantity must be a finite number > 0")
        return v

    @field_validator("expiry_date", mode="before")
    @classmethod
    def _blank_expiry(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("document_number")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class WarehouseMovement(BaseModel):
    id: str
    timestamp: datetime
    type: MovementType
    master_item_id: str
    lot_number: str
    quantity: float
    location_id: str
    document_number: Optional[str] = None


class MoveSelection(BaseModel):
    """What the user picked in the move form; any field may still be empty."""

    master_item_id: Optional[str] = None
    lot_number: Optional[str] = None
    from_location_id: Optional[str] = None
    to_location_id: Optional[str] = None
    quantity: Optional[float] = None

    @field_validator("master_item_id", "lot_number", "from_location_id", "to_location_id")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class MoveRequest(BaseModel):
    master_item_id: str
    lot_number: str
    from_location_id: str
    to_location_id: str
    quantity: float


class MoveCheck(BaseModel):
    ok: bool
    message: Optional[str] = None
    request: Optional[MoveRequest] = None
    available_quantity: float = 0.0


class MoveOptions(BaseModel):
    lots: List[str] = []
    from_locations: List[Location] = []
    to_locations: List[Location] = []
    available_quantity: float = 0.0


class UnloadRequest(BaseModel):
    master_item_id: str
    lot_number: str
    quantity: float
    document_number: Optional[str] = None
    # brew-day consumption is logged separately from plain unloads
    brew: bool = False

    @field_validator("quantity")
    @classmethod
    def _quantity_positive(cls, v: float) -> float:
        if not math.isfinite(v) or v <= 0:
            raise ValueError("quantity must be a finite number > 0")
        return v


class UnloadShortfall(BaseModel):
    master_item_id: str
    lot_number: str
    requested: float
    missing: float


class LedgerUpdate(BaseModel):
    ok: bool = True
    message: Optional[str] = None
    items: List[WarehouseItem] = []
    movements: List[WarehouseMovement] = []
    shortfalls: List[UnloadShortfall] = []


class StockLot(BaseModel):
    id: str
    lot_number: str
    quantity: float
    location_id: str
    location_name: str
    arrival_date: date
    expiry_date: Optional[date] = None


class StockSummaryItem(BaseModel):
    master_item_id: str
    name: str
    unit: str
    category_name: str
    total_quantity: float
    below_reorder_point: bool = False
    lots: List[StockLot] = []


class MoveOptionsRequest(BaseModel):
    ledger: List[WarehouseItem] = []
    locations: List[Location] = []
    selection: MoveSelection = Field(default_factory=MoveSelection)


class MoveCreate(BaseModel):
    ledger: List[WarehouseItem] = []
    locations: List[Location] = []
    selection: MoveSelection


class LoadCreate(BaseModel):
    ledger: List[WarehouseItem] = []
    items: List[WarehouseItemCreate]


class UnloadCreate(BaseModel):
    ledger: List[WarehouseItem] = []
    requests: List[UnloadRequest]


class StockSummaryRequest(BaseModel):
    ledger: List[WarehouseItem] = []
    master_items: List[MasterItem] = []
    categories: List[Category] = []
    locations: List[Location] = []
    search: Optional[str] = None


class MovementFilters(BaseModel):
    start: Optional[date] = None
    end: Optional[date] = None
    type: Optional[MovementType] = None
    location_id: Optional[str] = None
    category_id: Optional[str] = None
    search: Optional[str] = None

    @field_validator("location_id", "category_id", "search", mode="before")
    @classmethod
    def _all_means_none(cls, v):
        # the history page sends "all" for an unset dropdown
        if isinstance(v, str) and v.strip().lower() in ("", "all"):
            return None
        return v

    @field_validator("type", mode="before")
    @classmethod
    def _all_type(cls, v):
        if isinstance(v, str) and v.strip().lower() in ("", "all"):
            return None
        return v


class MovementRow(BaseModel):
    id: str
    timestamp: datetime
    type: MovementType
    master_item_id: str
    item_name: str
    category_name: str
    lot_number: str
    quantity: float
    location_id: str
    location_name: str
    document_number: Optional[str] = None


class MovementSearchRequest(BaseModel):
    movements: List[WarehouseMovement] = []
    master_items: List[MasterItem] = []
    categories: List[Category] = []
    locations: List[Location] = []
    filters: MovementFilters = Field(default_factory=MovementFilters)


class LocationDeleteRequest(BaseModel):
    location_id: str
    locations: List[Location] = []
    ledger: List[WarehouseItem] = []
    batches: List[Batch] = []
