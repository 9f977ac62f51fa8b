# backend/app/services/slots/config.py
"""
Slot engine configuration and time helpers.
"""

from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for the slot availability engine.

    Attributes:
        tick_minutes: Preview grid step in minutes. Independent of
                      any post's own slot_duration.
        horizon_days: How many days ahead the grid may be requested
        week_days: Length of the week overview
    """
    tick_minutes: int = 15
    horizon_days: int = 60
    week_days: int = 7

    def __post_init__(self):
        """Validate configuration."""
        if self.tick_minutes <= 0 or (24 * 60) % self.tick_minutes:
            raise ValueError(f"tick_minutes must divide a day, got {self.tick_minutes}")


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get slot engine configuration (singleton)."""
    return BookingConfig()


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    hour, minute = value.strip().split(":")
    return int(hour) * 60 + int(minute)


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
