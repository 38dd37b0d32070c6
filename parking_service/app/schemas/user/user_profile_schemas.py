from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict

from shared.utils.enums import Department, UserRole
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ..parking.reservation_schemas import ReservationWithSpaceOut


class UserProfileOut(BaseModel):
    uid: UUID
    email: str
    username: str
    first_name: str
    last_name: str
    full_name: Optional[str] = None
    department: Optional[Department] = None
    role: UserRole
    is_active: bool
    password_reset: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserProfileResponse(BaseModel):
    profile: UserProfileOut
    reservations: List[ReservationWithSpaceOut]


class UserProfileUpdate(EmptyStringModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    department: Optional[Department] = None
    username: Optional[str] = None
