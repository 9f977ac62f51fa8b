# backend/app/services/slots/__init__.py
"""
Slot availability engine.

Pure core: resolve_window → generate_slot_grid (+ day details, week overview,
           availability check); seasonal schedules pick the default per date
Advisory:  estimate_conflicts
Around it: Redis grid cache, invalidation, debounced preview client
"""

from .config import BookingConfig, get_booking_config
from .models import (
    CustomSchedule,
    DaySchedule,
    PostModel,
    TimeSlot,
    TimeWindow,
    WeeklySchedule,
)
from .resolver import resolve_window
from .seasonal import SeasonalSchedule, active_seasonal_schedule, schedule_for_date
from .calculator import (
    AvailabilityCheck,
    check_availability,
    generate_slot_grid,
    next_available_time,
    summarize_day,
    week_overview,
)
from .conflicts import ConflictedBooking, FutureBooking, estimate_conflicts
from .redis_store import SlotsRedisStore
from .invalidator import invalidate_service_point_cache

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "CustomSchedule",
    "DaySchedule",
    "PostModel",
    "TimeSlot",
    "TimeWindow",
    "WeeklySchedule",
    "resolve_window",
    "SeasonalSchedule",
    "active_seasonal_schedule",
    "schedule_for_date",
    "AvailabilityCheck",
    "check_availability",
    "generate_slot_grid",
    "next_available_time",
    "summarize_day",
    "week_overview",
    "ConflictedBooking",
    "FutureBooking",
    "estimate_conflicts",
    "SlotsRedisStore",
    "invalidate_service_point_cache",
]
