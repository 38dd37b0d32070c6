from enum import Enum


class DayPart(str, Enum):
    AM = "am"
    PM = "pm"


class ShiftType(str, Enum):
    """Fixed daily windows a reservation can claim.

    The value is the time-window literal used on the wire and in storage;
    the member name (``MORNING`` ...) is accepted as an input alias.
    """

    MORNING = "8:00-14:00"
    AFTERNOON = "14:00-21:00"
    FULL_DAY = "9:30-18:30"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            raw = value.strip()
            for shift in cls:
                if raw == shift.value or raw.upper() == shift.name:
                    return shift
        raise ValueError(
            "Invalid shift type. Must be one of: "
            + ", ".join(shift.value for shift in cls))

    @property
    def day_parts(self) -> frozenset:
        return SHIFT_DAY_PARTS[self]

    def conflicts_with(self, other: "ShiftType") -> bool:
        return bool(self.day_parts & ShiftType.parse(other).day_parts)

    def conflicting_shifts(self) -> list:
        return [shift for shift in ShiftType if self.conflicts_with(shift)]


# FULL_DAY covers both halves, so it overlaps every other shift.
SHIFT_DAY_PARTS = {
    ShiftType.MORNING: frozenset({DayPart.AM}),
    ShiftType.AFTERNOON: frozenset({DayPart.PM}),
    ShiftType.FULL_DAY: frozenset({DayPart.AM, DayPart.PM}),
}


class ReservationStatus(str, Enum):
    pending = "pending"
    active = "active"
    rejected = "rejected"
    cancelled = "cancelled"

    @property
    def blocks_space(self) -> bool:
        return self in BLOCKING_STATUSES

    def can_transition_to(self, target: "ReservationStatus") -> bool:
        return target in STATUS_TRANSITIONS[self]


BLOCKING_STATUSES = (ReservationStatus.pending, ReservationStatus.active)

STATUS_TRANSITIONS = {
    ReservationStatus.pending: {
        ReservationStatus.active,
        ReservationStatus.rejected,
        ReservationStatus.cancelled,
    },
    ReservationStatus.active: {ReservationStatus.cancelled},
    ReservationStatus.rejected: set(),
    ReservationStatus.cancelled: set(),
}


class ReservationAdminAction(str, Enum):
    approve = "approve"
    reject = "reject"
    cancel = "cancel"
    update = "update"


class SpaceType(str, Enum):
    standard = "standard"
    disabled = "disabled"
    electric = "electric"


class UserBulkAction(str, Enum):
    activate = "activate"
    deactivate = "deactivate"
    delete = "delete"
    updateRole = "updateRole"
    updateDepartment = "updateDepartment"
    resetPassword = "resetPassword"
