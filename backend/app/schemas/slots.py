"""
Pydantic schemas for slots API.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .service_points import DaySchedulePayload, PostPayload, validate_time_str, validate_working_hours


class CoveringPostRead(BaseModel):
    post_id: Optional[int] = None
    name: str
    has_custom_schedule: bool

    model_config = {"from_attributes": True}


class TimeSlotRead(BaseModel):
    """A single tick of the grid."""
    time: str  # "HH:MM"
    available_posts: int
    total_posts: int
    is_available: bool
    covering_posts: list[CoveringPostRead] = []

    model_config = {"from_attributes": True}


class SlotsDayResponse(BaseModel):
    """Grid for a stored service point."""
    service_point_id: int
    date: date
    category_id: Optional[int] = None
    tick_minutes: int = Field(description="Grid step in minutes")
    slots: list[TimeSlotRead]
    cached: bool = False

    model_config = {"from_attributes": True}


class WorkingHoursRead(BaseModel):
    start_time: str
    end_time: str


class DaySummaryRead(BaseModel):
    total_slots: int
    available_slots: int
    occupied_slots: int
    occupancy_percentage: float

    model_config = {"from_attributes": True}


class HourBreakdownRead(BaseModel):
    hour: int
    available_posts: int
    total_posts: int
    occupancy_percentage: float

    model_config = {"from_attributes": True}


class DayDetailsResponse(BaseModel):
    """Day summary. is_working=False means closed, not an error."""
    service_point_id: int
    service_point_name: str
    date: date
    category_id: Optional[int] = None
    is_working: bool
    total_posts: int
    working_hours: Optional[WorkingHoursRead] = None
    summary: Optional[DaySummaryRead] = None
    hourly_breakdown: list[HourBreakdownRead] = []


class WeekOverviewResponse(BaseModel):
    service_point_id: int
    start_date: date
    end_date: date
    category_id: Optional[int] = None
    days: list[DayDetailsResponse]


class NextAvailableResponse(BaseModel):
    service_point_id: int
    date: date
    after_time: Optional[str] = None
    next_available_time: Optional[str] = None
    found: bool


class SchedulePreviewRequest(BaseModel):
    """Unsaved editor state; evaluated with the same grid algorithm."""
    date: date
    category_id: Optional[int] = None
    working_hours: dict[str, Optional[DaySchedulePayload]] = Field(default_factory=dict)
    posts: list[PostPayload] = []
    request_seq: Optional[int] = Field(None, description="Echoed back so clients can drop stale responses")

    @field_validator("working_hours", mode="before")
    @classmethod
    def validate_hours(cls, v):
        return validate_working_hours(v)


class SchedulePreviewResponse(BaseModel):
    date: date
    category_id: Optional[int] = None
    tick_minutes: int
    slots: list[TimeSlotRead]
    request_seq: Optional[int] = None


class AvailabilityCheckRequest(BaseModel):
    service_point_id: int
    date: date
    start_time: str
    duration: int = Field(..., gt=0, description="Minutes")
    category_id: Optional[int] = None

    @field_validator("start_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return validate_time_str(v)


class AvailabilityCheckResponse(BaseModel):
    service_point_id: int
    date: date
    start_time: str
    duration: int
    category_id: Optional[int] = None
    available: bool
    reason: Optional[str] = None
    available_posts_count: int
    total_posts_count: int
    available_post_ids: list[Optional[int]] = []


class InvalidateResponse(BaseModel):
    service_point_id: int
    deleted_keys: int
    dates: list[date] | str


# ──────────────────────────────────────────────────────────────────────────────
# Conflicts
# ──────────────────────────────────────────────────────────────────────────────

class ConflictPreviewRequest(BaseModel):
    """Draft changes; a missing part means "keep what is stored"."""
    working_hours: Optional[dict[str, Optional[DaySchedulePayload]]] = None
    posts: Optional[list[PostPayload]] = None

    @field_validator("working_hours", mode="before")
    @classmethod
    def validate_hours(cls, v):
        if v is None:
            return v
        return validate_working_hours(v)


class ConflictedBookingRead(BaseModel):
    booking_id: Optional[int] = None
    date: date
    time: str
    service_post_id: Optional[int] = None
    conflict_type: str
    reason: str


class ConflictPreviewResponse(BaseModel):
    service_point_id: int
    conflicts: list[ConflictedBookingRead]
    count: int
