# backend/app/services/slots/resolver.py
"""
Effective operating window of a post on a weekday.

Precedence (fixed):
  1. inactive post     → no window
  2. custom schedule   → its hours on its working days, closed otherwise
                         (point schedule is NOT consulted)
  3. point schedule    → the day's hours when it is a working day
"""

from .models import PostModel, TimeWindow, WeeklySchedule


def resolve_window(
    post: PostModel,
    weekday: str,
    default_schedule: WeeklySchedule,
) -> TimeWindow | None:
    """
    Resolve the window a post operates in on `weekday` ("mon".."sun").

    Returns:
        TimeWindow, or None when the post does not operate that day.
    """
    if not post.is_active:
        return None

    if post.custom_schedule is not None:
        if post.custom_schedule.works_on(weekday):
            return post.custom_schedule.hours
        return None

    return default_schedule.day(weekday).window
