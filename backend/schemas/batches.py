from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, field_validator


BatchStatus = Literal["Planned", "In Progress", "Fermenting", "Packaged", "Completed"]


class FermentationStep(BaseModel):
    description: Optional[str] = None
    temperature: Optional[float] = None
    pressure: Optional[float] = None
    days: int = 0

    @field_validator("days")
    @classmethod
    def _days_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("days must be >= 0")
        return v


class Recipe(BaseModel):
    id: str
    name: Optional[str] = None
    # qualityControlSpec.liters.target on the front-end
    target_volume_l: Optional[float] = None
    fermentation_steps: List[FermentationStep] = []


class TransferLogEntry(BaseModel):
    timestamp: datetime
    from_tank_id: Optional[str] = None
    to_tank_id: Optional[str] = None


class Batch(BaseModel):
    id: str
    recipe_id: str
    fermenter_id: str
    cook_date: date
    packaging_date: Optional[date] = None
    status: BatchStatus = "Planned"
    lot: Optional[str] = None
    beer_name: Optional[str] = None
    transfers: List[TransferLogEntry] = []

    @field_validator("packaging_date", mode="before")
    @classmethod
    def _blank_packaging_date(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_completed(self) -> bool:
        return self.status == "Completed"
