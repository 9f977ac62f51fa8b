# backend/app/services/slots/conflicts.py
"""
Advisory conflict estimation for a proposed schedule/posts change.

A future booking conflicts when, under the proposed data:
- its post no longer operates that weekday (deactivated, removed,
  or custom schedule closed)                    → "post_status"
- its time falls outside its post's window      → "schedule_change"
- it has no post and no active post covers it   → "schedule_change"

Nothing is mutated or cancelled here.
"""

from dataclasses import dataclass
from datetime import date

from .config import time_str_to_minutes
from .models import PostModel, WeeklySchedule, weekday_key
from .resolver import resolve_window
from .seasonal import SeasonalSchedule, schedule_for_date

CONFLICT_SCHEDULE_CHANGE = "schedule_change"
CONFLICT_POST_STATUS = "post_status"


@dataclass(frozen=True)
class FutureBooking:
    id: int | None
    date: date
    time: str  # "HH:MM"
    post_id: int | None = None
    category_id: int | None = None


@dataclass(frozen=True)
class ConflictedBooking:
    booking: FutureBooking
    conflict_type: str
    reason: str


def estimate_conflicts(
    default_schedule: WeeklySchedule,
    posts: list[PostModel],
    bookings: list[FutureBooking],
    seasonal_schedules: list[SeasonalSchedule] | None = None,
) -> list[ConflictedBooking]:
    """
    Flag bookings that would fall outside the proposed effective windows.

    A seasonal schedule in effect on a booking's date replaces
    `default_schedule` for that booking.

    Returns:
        Conflicts in booking input order. Empty list = no conflicts.
    """
    posts_by_id = {post.id: post for post in posts if post.id is not None}
    conflicts: list[ConflictedBooking] = []

    for booking in bookings:
        schedule = schedule_for_date(default_schedule, seasonal_schedules, booking.date)
        conflict = _check_booking(booking, schedule, posts, posts_by_id)
        if conflict is not None:
            conflicts.append(conflict)

    return conflicts


def _check_booking(
    booking: FutureBooking,
    default_schedule: WeeklySchedule,
    posts: list[PostModel],
    posts_by_id: dict[int, PostModel],
) -> ConflictedBooking | None:
    weekday = weekday_key(booking.date)
    minutes = time_str_to_minutes(booking.time)

    if booking.post_id is not None:
        post = posts_by_id.get(booking.post_id)
        if post is None:
            return ConflictedBooking(
                booking, CONFLICT_POST_STATUS, f"Post {booking.post_id} no longer exists"
            )

        window = resolve_window(post, weekday, default_schedule)
        if window is None:
            reason = (
                f"Post '{post.name}' is inactive"
                if not post.is_active
                else f"Post '{post.name}' does not work on {weekday}"
            )
            return ConflictedBooking(booking, CONFLICT_POST_STATUS, reason)

        if not window.contains(minutes):
            return ConflictedBooking(
                booking,
                CONFLICT_SCHEDULE_CHANGE,
                f"{booking.time} is outside {window.start}-{window.end} of post '{post.name}'",
            )
        return None

    for post in posts:
        if booking.category_id is not None and post.category_id != booking.category_id:
            continue
        window = resolve_window(post, weekday, default_schedule)
        if window is not None and window.contains(minutes):
            return None

    return ConflictedBooking(
        booking,
        CONFLICT_SCHEDULE_CHANGE,
        f"No post works at {booking.time} on {booking.date.isoformat()}",
    )
