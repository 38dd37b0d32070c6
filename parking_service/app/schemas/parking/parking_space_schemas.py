from datetime import date
from typing import List, Optional
from pydantic import BaseModel, field_validator

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.parking_enum import ShiftType, SpaceType


def normalize_space_id(value):
    """Accept ``3``/``"3"`` as shorthand for the ``space-3`` document id."""
    if value is None:
        return value
    raw = str(value).strip()
    if raw.isdigit():
        return f"space-{int(raw)}"
    return raw


class ParkingSpaceOut(BaseModel):
    id: str
    space_number: int
    type: SpaceType
    location: Optional[str] = None

    model_config = {
        "from_attributes": True
    }


class ParkingSpaceListResponse(BaseModel):
    spaces: List[ParkingSpaceOut]
    total: int


class ShiftAvailability(BaseModel):
    morning: bool
    afternoon: bool
    full_day: bool


class DashboardSpaceOut(ParkingSpaceOut):
    is_available: ShiftAvailability


class DashboardResponse(BaseModel):
    date: date
    spaces: List[DashboardSpaceOut]


class AvailabilityRequest(EmptyStringModel):
    space_id: str
    start_date: date
    end_date: Optional[date] = None
    shift_type: ShiftType

    @field_validator("space_id", mode="before")
    @classmethod
    def _space_id(cls, value):
        return normalize_space_id(value)

    @field_validator("shift_type", mode="before")
    @classmethod
    def _shift_type(cls, value):
        return ShiftType.parse(value)


class AvailabilityResponse(BaseModel):
    space_id: str
    start_date: date
    end_date: date
    shift_type: ShiftType
    is_available: bool
