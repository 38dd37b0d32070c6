import uuid
from datetime import date

from parking_service.app.crud.parking.availability_crud import (
    find_overlapping_reservations,
    is_space_available,
)
from parking_service.app.enum.parking_enum import ShiftType
from parking_service.app.models.parking.reservations import Reservation

MAY_1 = date(2024, 5, 1)


def add_reservation(db, space_id, start, end, shift, status="active"):
    reservation = Reservation(
        user_id=uuid.uuid4(),
        space_id=space_id,
        start_date=start,
        end_date=end,
        shift_type=shift.value,
        status=status,
    )
    db.add(reservation)
    db.commit()
    db.refresh(reservation)
    return reservation


def test_morning_booking_leaves_afternoon_free(db, spaces):
    add_reservation(db, "space-3", MAY_1, MAY_1, ShiftType.MORNING)

    assert is_space_available(db, "space-3", MAY_1, MAY_1, ShiftType.AFTERNOON)
    assert not is_space_available(db, "space-3", MAY_1, MAY_1, ShiftType.FULL_DAY)
    assert not is_space_available(db, "space-3", MAY_1, MAY_1, ShiftType.MORNING)


def test_full_day_blocks_everything(db, spaces):
    add_reservation(db, "space-1", MAY_1, MAY_1, ShiftType.FULL_DAY, status="pending")

    for shift in ShiftType:
        assert not is_space_available(db, "space-1", MAY_1, MAY_1, shift)


def test_other_spaces_are_unaffected(db, spaces):
    add_reservation(db, "space-1", MAY_1, MAY_1, ShiftType.FULL_DAY)

    assert is_space_available(db, "space-2", MAY_1, MAY_1, ShiftType.FULL_DAY)


def test_partial_date_overlap_conflicts(db, spaces):
    add_reservation(db, "space-1", date(2024, 5, 3), date(2024, 5, 6), ShiftType.MORNING)

    assert not is_space_available(db, "space-1", date(2024, 5, 1), date(2024, 5, 3), ShiftType.MORNING)
    assert not is_space_available(db, "space-1", date(2024, 5, 6), date(2024, 5, 9), ShiftType.FULL_DAY)
    assert is_space_available(db, "space-1", date(2024, 5, 7), date(2024, 5, 9), ShiftType.MORNING)
    assert is_space_available(db, "space-1", date(2024, 5, 1), date(2024, 5, 2), ShiftType.FULL_DAY)


def test_rejected_and_cancelled_do_not_block(db, spaces):
    add_reservation(db, "space-1", MAY_1, MAY_1, ShiftType.FULL_DAY, status="rejected")
    add_reservation(db, "space-1", MAY_1, MAY_1, ShiftType.FULL_DAY, status="cancelled")

    assert is_space_available(db, "space-1", MAY_1, MAY_1, ShiftType.FULL_DAY)


def test_reservation_does_not_conflict_with_itself(db, spaces):
    own = add_reservation(db, "space-1", MAY_1, date(2024, 5, 3), ShiftType.FULL_DAY)

    assert not is_space_available(db, "space-1", MAY_1, MAY_1, ShiftType.MORNING)
    assert is_space_available(db, "space-1", MAY_1, MAY_1, ShiftType.MORNING,
                              exclude_reservation_id=own.id)


def test_find_overlapping_only_returns_blocking(db, spaces):
    active = add_reservation(db, "space-2", MAY_1, MAY_1, ShiftType.MORNING)
    add_reservation(db, "space-2", MAY_1, MAY_1, ShiftType.AFTERNOON, status="cancelled")
    add_reservation(db, "space-2", date(2024, 6, 1), date(2024, 6, 1), ShiftType.AFTERNOON)

    found = find_overlapping_reservations(db, "space-2", MAY_1, MAY_1)

    assert [r.id for r in found] == [active.id]


def test_accepts_symbolic_shift_name(db, spaces):
    add_reservation(db, "space-1", MAY_1, MAY_1, ShiftType.AFTERNOON)

    assert is_space_available(db, "space-1", MAY_1, MAY_1, "MORNING")
    assert not is_space_available(db, "space-1", MAY_1, MAY_1, "FULL_DAY")
