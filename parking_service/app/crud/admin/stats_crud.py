from datetime import date, datetime, time, timedelta, timezone
from sqlalchemy import func
from sqlalchemy.orm import Session

from shared.helpers.json_response_helper import error_response
from shared.models.user_profiles import UserProfile
from shared.utils.app_status_code import AppStatusCode
from ...enum.parking_enum import ReservationStatus, ShiftType
from ...models.parking.parking_spaces import ParkingSpace
from ...models.parking.reservations import Reservation
from ...schemas.admin.stats_schemas import (
    SpaceUtilization,
    StatsPeriod,
    StatsRequest,
    StatsResponse,
    StatsTotals,
    UserActivity,
)
from ...schemas.parking.reservation_schemas import ReservationOut

DEFAULT_PERIOD_DAYS = 30
TOP_N = 10


def get_stats(db: Session, params: StatsRequest) -> StatsResponse:
    end_date = params.end_date or date.today()
    start_date = params.start_date or end_date - timedelta(days=DEFAULT_PERIOD_DAYS)
    if end_date < start_date:
        return error_response(
            message="End date must be on or after start date",
            status_code=AppStatusCode.INVALID_INPUT
        )

    total_reservations = db.query(func.count(Reservation.id)).scalar() or 0

    by_status = {s.value: 0 for s in ReservationStatus}
    for status, count in (
        db.query(Reservation.status, func.count(Reservation.id))
        .group_by(Reservation.status)
        .all()
    ):
        by_status[status] = count

    by_shift_type = {s.value: 0 for s in ShiftType}
    for shift_type, count in (
        db.query(Reservation.shift_type, func.count(Reservation.id))
        .group_by(Reservation.shift_type)
        .all()
    ):
        by_shift_type[shift_type] = count

    with_documents = db.query(func.count(Reservation.id)).filter(
        Reservation.schedule_document.isnot(None)
    ).scalar() or 0

    period_start = datetime.combine(start_date, time.min, tzinfo=timezone.utc)
    period_end = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
    new_reservations = db.query(func.count(Reservation.id)).filter(
        Reservation.created_at >= period_start,
        Reservation.created_at < period_end
    ).scalar() or 0

    utilization_rows = (
        db.query(Reservation.space_id, ParkingSpace.space_number,
                 func.count(Reservation.id).label("total"))
        .join(ParkingSpace, ParkingSpace.id == Reservation.space_id)
        .filter(Reservation.status == ReservationStatus.active.value)
        .group_by(Reservation.space_id, ParkingSpace.space_number)
        .order_by(func.count(Reservation.id).desc(), ParkingSpace.space_number)
        .limit(TOP_N)
        .all()
    )

    activity_rows = (
        db.query(Reservation.user_id, func.count(Reservation.id).label("total"))
        .group_by(Reservation.user_id)
        .order_by(func.count(Reservation.id).desc())
        .limit(TOP_N)
        .all()
    )
    profiles = {
        p.uid: p for p in db.query(UserProfile).filter(
            UserProfile.uid.in_([row.user_id for row in activity_rows])).all()
    } if activity_rows else {}

    recent = (
        db.query(Reservation)
        .order_by(Reservation.created_at.desc())
        .limit(TOP_N)
        .all()
    )

    return StatsResponse(
        totals=StatsTotals(
            reservations=total_reservations,
            users=db.query(func.count(UserProfile.uid)).scalar() or 0,
            active_users=db.query(func.count(UserProfile.uid)).filter(
                UserProfile.is_active == True).scalar() or 0,
            spaces=db.query(func.count(ParkingSpace.id)).scalar() or 0,
        ),
        by_status=by_status,
        with_documents=with_documents,
        period=StatsPeriod(
            start_date=start_date,
            end_date=end_date,
            new_reservations=new_reservations
        ),
        by_shift_type=by_shift_type,
        space_utilization=[
            SpaceUtilization(space_id=row.space_id, space_number=row.space_number,
                             active_reservations=row.total)
            for row in utilization_rows
        ],
        user_activity=[
            UserActivity(
                user_id=str(row.user_id),
                email=profiles[row.user_id].email if row.user_id in profiles else None,
                full_name=profiles[row.user_id].full_name if row.user_id in profiles else None,
                reservations=row.total
            )
            for row in activity_rows
        ],
        recent_reservations=[ReservationOut.model_validate(r) for r in recent],
    )
