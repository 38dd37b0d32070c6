from datetime import date
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, field_validator

from shared.core.schemas import CommonQueryParams
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.parking_enum import ReservationAdminAction, ReservationStatus, ShiftType
from ..parking.parking_space_schemas import normalize_space_id
from ..parking.reservation_schemas import DocumentLinkOut, ReservationWithSpaceOut


class AdminReservationRequest(CommonQueryParams):
    status: Optional[ReservationStatus] = None
    user_id: Optional[UUID] = None
    space_id: Optional[str] = None
    limit: Optional[int] = 50

    @field_validator("space_id", mode="before")
    @classmethod
    def _space_id(cls, value):
        return normalize_space_id(value)


class ReservationOwnerOut(BaseModel):
    uid: UUID
    email: str
    username: str
    first_name: str
    last_name: str
    department: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AdminReservationOut(ReservationWithSpaceOut):
    user: Optional[ReservationOwnerOut] = None


class AdminReservationListResponse(BaseModel):
    reservations: List[AdminReservationOut]
    total: int
    has_more: bool


class AdminReservationActionData(EmptyStringModel):
    reason: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    shift_type: Optional[ShiftType] = None
    admin_notes: Optional[str] = None

    @field_validator("shift_type", mode="before")
    @classmethod
    def _shift_type(cls, value):
        return ShiftType.parse(value) if value is not None else None


class AdminReservationAction(BaseModel):
    reservation_id: UUID
    action: ReservationAdminAction
    data: Optional[AdminReservationActionData] = None


class ReservationSummaryOut(BaseModel):
    id: UUID
    space_id: str
    start_date: date
    end_date: date
    shift_type: ShiftType
    status: ReservationStatus

    model_config = ConfigDict(from_attributes=True)


class AdminDocumentOut(BaseModel):
    document: DocumentLinkOut
    reservation: ReservationSummaryOut
    user: Optional[ReservationOwnerOut] = None
