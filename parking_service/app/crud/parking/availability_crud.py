import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional
from uuid import UUID
from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode
from ...enum.parking_enum import BLOCKING_STATUSES, ShiftType
from ...models.parking.reservation_claims import ReservationClaim
from ...models.parking.reservations import Reservation

logger = logging.getLogger(__name__)

SPACE_NOT_AVAILABLE_MESSAGE = "Parking space is not available for the selected period and shift"


def reservation_span_days(start_date: date, end_date: date) -> int:
    """Whole days between the two dates (a same-day booking spans 0)."""
    return (end_date - start_date).days


def validate_reservation_period(
    start_date: date,
    end_date: date,
    today: Optional[date] = None
) -> dict:
    today = today or date.today()

    if end_date < start_date:
        return {"valid": False, "error": "End date must be on or after start date"}

    if start_date < today:
        return {"valid": False, "error": "Start date cannot be in the past"}

    max_days = settings.MAX_RESERVATION_DAYS
    if max_days is not None and reservation_span_days(start_date, end_date) > max_days:
        return {"valid": False, "error": f"Reservation cannot be longer than {max_days} days"}

    return {"valid": True}


def requires_schedule_document(start_date: date, end_date: date) -> bool:
    return reservation_span_days(start_date, end_date) > settings.DOCUMENT_REQUIRED_AFTER_DAYS


def find_overlapping_reservations(
    db: Session,
    space_id: str,
    start_date: date,
    end_date: date,
    exclude_reservation_id: Optional[UUID] = None,
    space_ids: Optional[Iterable[str]] = None
) -> List[Reservation]:
    """Pending/active reservations whose inclusive period touches [start, end]."""
    query = db.query(Reservation).filter(
        Reservation.status.in_([s.value for s in BLOCKING_STATUSES]),
        and_(Reservation.start_date <= end_date,
             Reservation.end_date >= start_date)
    )

    if space_ids is not None:
        query = query.filter(Reservation.space_id.in_(list(space_ids)))
    else:
        query = query.filter(Reservation.space_id == space_id)

    if exclude_reservation_id:
        query = query.filter(Reservation.id != exclude_reservation_id)

    return query.all()


def is_space_available(
    db: Session,
    space_id: str,
    start_date: date,
    end_date: date,
    shift_type,
    exclude_reservation_id: Optional[UUID] = None
) -> bool:
    shift = ShiftType.parse(shift_type)
    overlapping = find_overlapping_reservations(
        db, space_id, start_date, end_date, exclude_reservation_id)

    for reservation in overlapping:
        if shift.conflicts_with(reservation.shift_type):
            logger.debug("Space %s blocked by reservation %s (%s)",
                         space_id, reservation.id, reservation.shift_type)
            return False
    return True


def _each_day(start_date: date, end_date: date):
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def claim_reservation_slots(db: Session, reservation: Reservation):
    """Write the (space, day, half) claims of a reservation and flush them.

    Runs in the caller's transaction. A concurrent booking that already
    holds one of the slots makes the flush fail on the unique constraint;
    the transaction is rolled back and a 409 is raised.
    """
    shift = ShiftType.parse(reservation.shift_type)
    for day in _each_day(reservation.start_date, reservation.end_date):
        for part in sorted(shift.day_parts):
            reservation.claims.append(ReservationClaim(
                space_id=reservation.space_id,
                claim_date=day,
                day_part=part.value,
            ))

    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        logger.warning("Slot claim collision on space %s for %s..%s (%s)",
                       reservation.space_id, reservation.start_date,
                       reservation.end_date, reservation.shift_type)
        return error_response(
            message=SPACE_NOT_AVAILABLE_MESSAGE,
            status_code=AppStatusCode.SPACE_NOT_AVAILABLE,
            http_status=409
        )


def release_reservation_slots(db: Session, reservation: Reservation):
    reservation.claims.clear()
    # deletes must reach the database before any re-claim inserts
    db.flush()
