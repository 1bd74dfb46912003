from typing import List, Literal, Optional

from pydantic import BaseModel, field_validator


LocationType = Literal["Tank", "Warehouse", "Other"]
Unit = Literal["Kg", "g", "L", "pcs"]

# Location tags as stored by the front-end before the type keys were split out.
_LEGACY_LOCATION_TYPES = {
    "LocationType_Warehouse": "Warehouse",
    "LocationType_Other": "Other",
}


class Location(BaseModel):
    id: str
    name: str
    type: LocationType = "Warehouse"
    gross_volume_l: Optional[float] = None

    @field_validator("type", mode="before")
    @classmethod
    def _legacy_type(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return _LEGACY_LOCATION_TYPES.get(v, v)
        return v

    @field_validator("gross_volume_l")
    @classmethod
    def _volume_non_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("gross_volume_l must be >= 0")
        return v

    @property
    def is_tank(self) -> bool:
        return self.type == "Tank"


class LocationIn(BaseModel):
    id: Optional[str] = None
    name: str
    type: LocationType = "Warehouse"
    gross_volume_l: Optional[float] = None

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("name is required")
        return v

    @field_validator("type", mode="before")
    @classmethod
    def _legacy_type(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return _LEGACY_LOCATION_TYPES.get(v, v)
        return v


class Category(BaseModel):
    id: str
    name: str
    parent_category_id: Optional[str] = None


class CategoryIn(BaseModel):
    id: Optional[str] = None
    name: str
    parent_category_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("name is required")
        return v


class CategoryOption(BaseModel):
    value: str
    label: str


class MasterItem(BaseModel):
    id: str
    name: str
    category_id: str
    unit: Unit = "pcs"
    reorder_point: Optional[float] = None


class CatalogSnapshot(BaseModel):
    """Catalog collections the parent application sends along with stock requests."""

    master_items: List[MasterItem] = []
    categories: List[Category] = []
    locations: List[Location] = []


class CategoryListRequest(BaseModel):
    categories: List[Category] = []


class CategorySaveRequest(BaseModel):
    categories: List[Category] = []
    category: CategoryIn


class CategoryDeleteRequest(BaseModel):
    categories: List[Category] = []
    category_id: str


class LocationSaveRequest(BaseModel):
    locations: List[Location] = []
    location: LocationIn
