from collections import defaultdict
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode
from ...enum.parking_enum import ShiftType
from ...models.parking.parking_spaces import ParkingSpace
from ...schemas.parking.parking_space_schemas import (
    AvailabilityRequest,
    AvailabilityResponse,
    DashboardResponse,
    DashboardSpaceOut,
    ParkingSpaceListResponse,
    ParkingSpaceOut,
    ShiftAvailability,
)
from .availability_crud import find_overlapping_reservations, is_space_available


def get_spaces(db: Session) -> ParkingSpaceListResponse:
    spaces = db.query(ParkingSpace).order_by(ParkingSpace.space_number).all()
    return ParkingSpaceListResponse(
        spaces=[ParkingSpaceOut.model_validate(s) for s in spaces],
        total=len(spaces)
    )


def get_space_or_404(db: Session, space_id: str) -> ParkingSpace:
    space = db.query(ParkingSpace).filter(ParkingSpace.id == space_id).first()
    if not space:
        return error_response(
            message="Parking space not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=404
        )
    return space


def get_dashboard(db: Session, day: Optional[date] = None) -> DashboardResponse:
    """Per-space availability of every shift on one day."""
    day = day or date.today()
    spaces = db.query(ParkingSpace).order_by(ParkingSpace.space_number).all()

    # one query for the day instead of three checks per space
    taken = defaultdict(list)
    for reservation in find_overlapping_reservations(
            db, None, day, day, space_ids=[s.id for s in spaces]):
        taken[reservation.space_id].append(reservation.shift_type)

    def free(space_id: str, shift: ShiftType) -> bool:
        return not any(shift.conflicts_with(other) for other in taken[space_id])

    return DashboardResponse(
        date=day,
        spaces=[
            DashboardSpaceOut(
                **ParkingSpaceOut.model_validate(space).model_dump(),
                is_available=ShiftAvailability(
                    morning=free(space.id, ShiftType.MORNING),
                    afternoon=free(space.id, ShiftType.AFTERNOON),
                    full_day=free(space.id, ShiftType.FULL_DAY),
                )
            )
            for space in spaces
        ]
    )


def check_availability(db: Session, params: AvailabilityRequest) -> AvailabilityResponse:
    get_space_or_404(db, params.space_id)
    end_date = params.end_date or params.start_date
    if end_date < params.start_date:
        return error_response(
            message="End date must be on or after start date",
            status_code=AppStatusCode.RESERVATION_PERIOD_INVALID
        )

    return AvailabilityResponse(
        space_id=params.space_id,
        start_date=params.start_date,
        end_date=end_date,
        shift_type=params.shift_type,
        is_available=is_space_available(
            db, params.space_id, params.start_date, end_date, params.shift_type)
    )
