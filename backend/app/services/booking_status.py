# backend/app/services/booking_status.py
"""
Booking status state machine.

  pending     → confirmed | cancelled_by_client | cancelled_by_partner
  confirmed   → in_progress | cancelled_by_client | cancelled_by_partner | no_show
  in_progress → completed | cancelled_by_partner

Terminal: completed, cancelled_by_client, cancelled_by_partner, no_show.
"""

from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED_BY_CLIENT = "cancelled_by_client"
    CANCELLED_BY_PARTNER = "cancelled_by_partner"
    NO_SHOW = "no_show"

    @classmethod
    def parse(cls, value: "str | BookingStatus") -> "BookingStatus":
        """Normalize a boundary value ("Confirmed", " pending ") into the enum."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unknown booking status: {value!r}")
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown booking status: {value!r}") from None


INITIAL_STATUS = BookingStatus.PENDING

TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLED_BY_CLIENT,
        BookingStatus.CANCELLED_BY_PARTNER,
    }),
    BookingStatus.CONFIRMED: frozenset({
        BookingStatus.IN_PROGRESS,
        BookingStatus.CANCELLED_BY_CLIENT,
        BookingStatus.CANCELLED_BY_PARTNER,
        BookingStatus.NO_SHOW,
    }),
    BookingStatus.IN_PROGRESS: frozenset({
        BookingStatus.COMPLETED,
        BookingStatus.CANCELLED_BY_PARTNER,
    }),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED_BY_CLIENT: frozenset(),
    BookingStatus.CANCELLED_BY_PARTNER: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)
CANCELLABLE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


class InvalidTransition(ValueError):
    """Requested status change is not allowed from the current status."""

    def __init__(self, current: BookingStatus, requested: BookingStatus):
        self.current = current
        self.requested = requested
        if current in TERMINAL_STATUSES:
            message = f"Booking is {current.value}; no further status changes allowed"
        else:
            message = f"Cannot change booking status from {current.value} to {requested.value}"
        super().__init__(message)


def allowed_transitions(status: BookingStatus) -> frozenset[BookingStatus]:
    return TRANSITIONS[status]


def is_terminal(status: BookingStatus) -> bool:
    return status in TERMINAL_STATUSES


def cancellable(status: BookingStatus) -> bool:
    """Whether cancel/reschedule actions may be offered for a booking."""
    return status in CANCELLABLE_STATUSES


def transition(current: BookingStatus, requested: BookingStatus) -> BookingStatus:
    """
    Validate a status change.

    Returns:
        The new status.

    Raises:
        InvalidTransition: `requested` is not reachable from `current`.
    """
    if requested not in TRANSITIONS[current]:
        raise InvalidTransition(current, requested)
    return requested
