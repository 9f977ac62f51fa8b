# backend/app/services/slots/seasonal.py
"""
Seasonal schedules: date-ranged working hours that replace the
point's weekly schedule while they are in effect.

Selection for a date:
  active AND start_date <= date <= end_date
  → highest priority
  → on equal priority, the one that started last
  → then the newest (highest id)

Posts with their own custom schedule are not affected: the seasonal
schedule only replaces the default the posts inherit.
"""

from dataclasses import dataclass
from datetime import date

from .models import WeeklySchedule

STATUS_CURRENT = "current"
STATUS_UPCOMING = "upcoming"
STATUS_PAST = "past"
STATUS_INACTIVE = "inactive"


@dataclass(frozen=True)
class SeasonalSchedule:
    id: int | None
    name: str
    start_date: date
    end_date: date
    schedule: WeeklySchedule
    priority: int = 0
    is_active: bool = True

    def covers(self, target_date: date) -> bool:
        return self.is_active and self.start_date <= target_date <= self.end_date

    def status_on(self, today: date) -> str:
        if not self.is_active:
            return STATUS_INACTIVE
        if today < self.start_date:
            return STATUS_UPCOMING
        if today > self.end_date:
            return STATUS_PAST
        return STATUS_CURRENT


def active_seasonal_schedule(
    seasonal_schedules: list[SeasonalSchedule],
    target_date: date,
) -> SeasonalSchedule | None:
    """Seasonal schedule in effect on `target_date`, if any."""
    matching = [s for s in seasonal_schedules if s.covers(target_date)]
    if not matching:
        return None
    return max(matching, key=lambda s: (s.priority, s.start_date, s.id or 0))


def schedule_for_date(
    default_schedule: WeeklySchedule,
    seasonal_schedules: list[SeasonalSchedule] | None,
    target_date: date,
) -> WeeklySchedule:
    """Weekly schedule the posts inherit on `target_date`."""
    active = active_seasonal_schedule(seasonal_schedules or [], target_date)
    if active is None:
        return default_schedule
    return active.schedule
