from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, field_validator

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.parking_enum import ReservationStatus, ShiftType
from .parking_space_schemas import ParkingSpaceOut, normalize_space_id


class UploadedDocument(BaseModel):
    """File pulled out of a multipart request, before validation."""
    filename: str
    content_type: Optional[str] = None
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class ScheduleDocumentOut(BaseModel):
    path: str
    filename: str
    size: int
    content_type: Optional[str] = None
    uploaded_at: str


class ReservationCreate(EmptyStringModel):
    space_id: str
    start_date: date
    end_date: date
    shift_type: ShiftType

    @field_validator("space_id", mode="before")
    @classmethod
    def _space_id(cls, value):
        return normalize_space_id(value)

    @field_validator("shift_type", mode="before")
    @classmethod
    def _shift_type(cls, value):
        return ShiftType.parse(value)


class ReservationUpdate(EmptyStringModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    shift_type: Optional[ShiftType] = None

    @field_validator("shift_type", mode="before")
    @classmethod
    def _shift_type(cls, value):
        return ShiftType.parse(value) if value is not None else None


class ReservationOut(BaseModel):
    id: UUID
    user_id: UUID
    space_id: str
    start_date: date
    end_date: date
    shift_type: ShiftType
    status: ReservationStatus
    schedule_document: Optional[ScheduleDocumentOut] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    approved_at: Optional[datetime] = None
    approved_by: Optional[UUID] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[UUID] = None
    rejection_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[UUID] = None
    cancellation_reason: Optional[str] = None
    admin_notes: Optional[str] = None

    model_config = {
        "from_attributes": True
    }


class ReservationWithSpaceOut(ReservationOut):
    space: Optional[ParkingSpaceOut] = None


class ReservationListResponse(BaseModel):
    reservations: List[ReservationWithSpaceOut]
    total: int


class DocumentLinkOut(BaseModel):
    download_url: str
    filename: str
    size: int
    uploaded_at: str
    expires_in: int


class UploadResultOut(BaseModel):
    document: ScheduleDocumentOut
    reservation_id: Optional[str] = None
