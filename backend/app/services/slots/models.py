# backend/app/services/slots/models.py
"""
Immutable snapshots consumed by the slot engine.

Schedule JSON (stored on service points):
{
  "mon": {"start": "09:00", "end": "18:00", "is_working_day": true},
  "sat": {"start": "10:00", "end": "16:00", "is_working_day": false},
  "sun": null,  // day off
  ...
}
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date

from .config import time_str_to_minutes

logger = logging.getLogger(__name__)

# 0 = Monday, 6 = Sunday (date.weekday())
DAYS = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]
DAY_ALIASES = {
    "monday": "mon",
    "tuesday": "tue",
    "wednesday": "wed",
    "thursday": "thu",
    "friday": "fri",
    "saturday": "sat",
    "sunday": "sun",
}


def weekday_key(target_date: date) -> str:
    """Weekday key ("mon".."sun") of a date."""
    return DAYS[target_date.weekday()]


def normalize_day(day: str) -> str:
    """Map "monday"/"Mon"/"mon" to "mon"."""
    key = day.strip().lower()
    key = DAY_ALIASES.get(key, key)
    if key not in DAYS:
        raise ValueError(f"Unknown weekday: {day!r}")
    return key


@dataclass(frozen=True)
class TimeWindow:
    """Half-open operating window [start, end)."""
    start: str  # "HH:MM"
    end: str    # "HH:MM"

    @property
    def start_minutes(self) -> int:
        return time_str_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return time_str_to_minutes(self.end)

    def contains(self, minutes: int) -> bool:
        return self.start_minutes <= minutes < self.end_minutes


@dataclass(frozen=True)
class DaySchedule:
    start: str
    end: str
    is_working_day: bool

    @property
    def window(self) -> TimeWindow | None:
        if not self.is_working_day:
            return None
        return TimeWindow(self.start, self.end)


CLOSED_DAY = DaySchedule(start="09:00", end="18:00", is_working_day=False)


@dataclass(frozen=True)
class WeeklySchedule:
    """
    Weekly working hours of a service point.

    `days` always holds all seven keys. Treated as read-only.
    """
    days: dict[str, DaySchedule]

    def day(self, weekday: str) -> DaySchedule:
        return self.days.get(weekday, CLOSED_DAY)

    @classmethod
    def from_dict(cls, data: dict | None) -> "WeeklySchedule":
        """
        Build from stored/posted JSON.

        Missing days and `null` days are closed. A day dict without
        `is_working_day` counts as working when both bounds are set.
        """
        data = data or {}
        days: dict[str, DaySchedule] = {day: CLOSED_DAY for day in DAYS}

        for raw_key, value in data.items():
            day = normalize_day(raw_key)
            if value is None:
                continue
            if isinstance(value, DaySchedule):
                days[day] = value
                continue
            start = value.get("start") or CLOSED_DAY.start
            end = value.get("end") or CLOSED_DAY.end
            is_working = value.get("is_working_day")
            if is_working is None:
                is_working = bool(value.get("start") and value.get("end"))
            days[day] = DaySchedule(start=start, end=end, is_working_day=bool(is_working))

        return cls(days=days)

    def to_dict(self) -> dict:
        return {
            day: {
                "start": self.days[day].start,
                "end": self.days[day].end,
                "is_working_day": self.days[day].is_working_day,
            }
            for day in DAYS
        }


@dataclass(frozen=True)
class CustomSchedule:
    """Per-post override of the point's weekly schedule."""
    working_days: dict[str, bool]
    hours: TimeWindow

    def works_on(self, weekday: str) -> bool:
        return bool(self.working_days.get(weekday, False))

    @classmethod
    def from_dict(cls, working_days: dict | None, hours: dict | None) -> "CustomSchedule | None":
        """
        Build from post fields. Returns None when nothing is selected:
        a custom schedule without working days is no custom schedule.
        """
        if not hours:
            return None
        days = {
            normalize_day(day): bool(flag)
            for day, flag in (working_days or {}).items()
        }
        if not any(days.values()):
            return None
        return cls(
            working_days={day: days.get(day, False) for day in DAYS},
            hours=TimeWindow(hours["start"], hours["end"]),
        )


@dataclass(frozen=True)
class PostModel:
    """A work bay within a service point."""
    id: int | None
    name: str
    is_active: bool
    category_id: int | None
    slot_duration_minutes: int = 30
    custom_schedule: CustomSchedule | None = None

    @property
    def has_custom_schedule(self) -> bool:
        return self.custom_schedule is not None


@dataclass(frozen=True)
class CoveringPost:
    post_id: int | None
    name: str
    has_custom_schedule: bool


@dataclass(frozen=True)
class TimeSlot:
    time: str  # "HH:MM"
    available_posts: int
    total_posts: int
    covering_posts: tuple[CoveringPost, ...] = field(default_factory=tuple)

    @property
    def is_available(self) -> bool:
        return self.available_posts > 0

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "available_posts": self.available_posts,
            "total_posts": self.total_posts,
            "is_available": self.is_available,
            "covering_posts": [
                {
                    "post_id": post.post_id,
                    "name": post.name,
                    "has_custom_schedule": post.has_custom_schedule,
                }
                for post in self.covering_posts
            ],
        }


def parse_schedule_json(raw: str | None) -> WeeklySchedule:
    """Parse stored schedule JSON. Corrupt data means closed all week."""
    try:
        data = json.loads(raw) if raw else {}
        return WeeklySchedule.from_dict(data)
    except (json.JSONDecodeError, ValueError, AttributeError, TypeError, KeyError) as e:
        logger.warning(f"Invalid work_schedule JSON, treating as closed: {e}")
        return WeeklySchedule.from_dict({})
