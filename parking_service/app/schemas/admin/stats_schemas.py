from datetime import date
from typing import Dict, List, Optional
from pydantic import BaseModel

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ..parking.reservation_schemas import ReservationOut


class StatsRequest(EmptyStringModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class StatsTotals(BaseModel):
    reservations: int
    users: int
    active_users: int
    spaces: int


class StatsPeriod(BaseModel):
    start_date: date
    end_date: date
    new_reservations: int


class SpaceUtilization(BaseModel):
    space_id: str
    space_number: Optional[int] = None
    active_reservations: int


class UserActivity(BaseModel):
    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    reservations: int


class StatsResponse(BaseModel):
    totals: StatsTotals
    by_status: Dict[str, int]
    with_documents: int
    period: StatsPeriod
    by_shift_type: Dict[str, int]
    space_utilization: List[SpaceUtilization]
    user_activity: List[UserActivity]
    recent_reservations: List[ReservationOut]
