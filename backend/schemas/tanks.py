from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel

from .batches import Batch, Recipe
from .catalog import Location


class TankSnapshot(BaseModel):
    locations: List[Location] = []
    batches: List[Batch] = []
    recipes: List[Recipe] = []


class AvailableTanksRequest(TankSnapshot):
    batch_id: str
    transfer_date: date


class AvailableTanksOut(BaseModel):
    batch_id: str
    transfer_date: date
    required_volume_l: float
    tanks: List[Location]
    message: Optional[str] = None


class TransferCreate(TankSnapshot):
    batch_id: str
    new_fermenter_id: str
    transfer_date: date


class TransferRequest(BaseModel):
    batch_id: str
    new_fermenter_id: str
    transfer_date: date


class TransferPlan(BaseModel):
    ok: bool
    message: Optional[str] = None
    request: Optional[TransferRequest] = None
    available: List[Location] = []


class NewBatchCheckRequest(TankSnapshot):
    recipe_id: str
    cook_date: date
    fermenter_id: str


class TankConflict(BaseModel):
    batch_id: str
    lot: Optional[str] = None
    tank_id: str
    last_occupied: date
    available_from: date
    message: str


NewBatchStatus = Literal["ok", "conflict", "insufficient_volume", "invalid"]


class NewBatchCheck(BaseModel):
    status: NewBatchStatus
    message: Optional[str] = None
    required_volume_l: float = 0.0
    tank_volume_l: float = 0.0
    conflict: Optional[TankConflict] = None
    suitable_tanks: List[Location] = []

    @property
    def ok(self) -> bool:
        return self.status == "ok"


class TankTimelineRequest(BaseModel):
    batch: Batch
    day: date


class TankTimelineOut(BaseModel):
    batch_id: str
    day: date
    tank_id: str
