# backend/app/schemas/service_points.py
"""
Service point and post schemas.

This is the validation boundary for schedule data: everything that
reaches the slot engine has passed these validators.
"""

import json
import logging
import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..services.slots.config import time_str_to_minutes
from ..services.slots.models import (
    CustomSchedule,
    DaySchedule,
    PostModel,
    WeeklySchedule,
    normalize_day,
    parse_schedule_json,
)

logger = logging.getLogger(__name__)

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$|^24:00$")


def validate_time_str(v: str) -> str:
    """Validate "HH:MM" (24:00 allowed as an end of day)."""
    v = v.strip()
    if not TIME_RE.match(v):
        raise ValueError("Time must be in HH:MM format")
    return v


def _load_json(v):
    if isinstance(v, str):
        return json.loads(v) if v else None
    return v


# ──────────────────────────────────────────────────────────────────────────────
# Schedules
# ──────────────────────────────────────────────────────────────────────────────

class DaySchedulePayload(BaseModel):
    start: str = "09:00"
    end: str = "18:00"
    is_working_day: bool = True

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return validate_time_str(v)

    @model_validator(mode="after")
    def check_order(self):
        if self.is_working_day and time_str_to_minutes(self.start) >= time_str_to_minutes(self.end):
            raise ValueError(f"start ({self.start}) must be before end ({self.end}) on a working day")
        return self


class CustomHoursPayload(BaseModel):
    start: str = "09:00"
    end: str = "18:00"

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return validate_time_str(v)

    @model_validator(mode="after")
    def check_order(self):
        if time_str_to_minutes(self.start) >= time_str_to_minutes(self.end):
            raise ValueError(f"start ({self.start}) must be before end ({self.end})")
        return self


def validate_working_hours(v: dict | None) -> dict[str, Optional[DaySchedulePayload]]:
    """Normalize day keys ("monday" → "mon"); null = day off."""
    result: dict[str, Optional[DaySchedulePayload]] = {}
    for day, value in (v or {}).items():
        if value is not None and not isinstance(value, DaySchedulePayload):
            value = DaySchedulePayload.model_validate(value)
        result[normalize_day(day)] = value
    return result


def working_hours_to_domain(hours: dict[str, Optional[DaySchedulePayload]]) -> WeeklySchedule:
    return WeeklySchedule.from_dict({
        day: DaySchedule(p.start, p.end, p.is_working_day) if p is not None else None
        for day, p in hours.items()
    })


def working_hours_to_json(hours: dict[str, Optional[DaySchedulePayload]]) -> str:
    return json.dumps(working_hours_to_domain(hours).to_dict())


def default_post_working_days() -> dict[str, bool]:
    """Mon–Fri, offered when a post's custom schedule is first enabled."""
    return {"mon": True, "tue": True, "wed": True, "thu": True, "fri": True, "sat": False, "sun": False}


# ──────────────────────────────────────────────────────────────────────────────
# Posts
# ──────────────────────────────────────────────────────────────────────────────

class PostPayload(BaseModel):
    """Post as submitted by the editor (saved or draft)."""
    id: Optional[int] = None
    name: str
    post_number: Optional[int] = None
    is_active: bool = True
    category_id: Optional[int] = None
    slot_duration: int = Field(30, gt=0)
    has_custom_schedule: bool = False
    working_days: Optional[dict[str, bool]] = None
    custom_hours: Optional[CustomHoursPayload] = None

    @field_validator("working_days")
    @classmethod
    def validate_working_days(cls, v):
        if v is None:
            return v
        return {normalize_day(day): bool(flag) for day, flag in v.items()}

    @model_validator(mode="after")
    def normalize_custom_schedule(self):
        if not self.has_custom_schedule:
            self.working_days = None
            self.custom_hours = None
            return self

        if self.working_days is None:
            self.working_days = default_post_working_days()
        if self.custom_hours is None:
            self.custom_hours = CustomHoursPayload()

        if not any(self.working_days.values()):
            logger.warning(f"Post '{self.name}': custom schedule without working days disabled")
            self.has_custom_schedule = False
            self.working_days = None
            self.custom_hours = None
        return self

    def to_domain(self) -> PostModel:
        custom = None
        if self.has_custom_schedule:
            custom = CustomSchedule.from_dict(self.working_days, self.custom_hours.model_dump())
        return PostModel(
            id=self.id,
            name=self.name,
            is_active=self.is_active,
            category_id=self.category_id,
            slot_duration_minutes=self.slot_duration,
            custom_schedule=custom,
        )


class PostUpdate(BaseModel):
    name: Optional[str] = None
    post_number: Optional[int] = None
    is_active: Optional[bool] = None
    category_id: Optional[int] = None
    slot_duration: Optional[int] = Field(None, gt=0)
    has_custom_schedule: Optional[bool] = None
    working_days: Optional[dict[str, bool]] = None
    custom_hours: Optional[CustomHoursPayload] = None


class PostRead(BaseModel):
    id: int
    service_point_id: int
    name: str
    post_number: int
    is_active: bool
    category_id: Optional[int] = None
    slot_duration: int
    has_custom_schedule: bool
    working_days: Optional[dict[str, bool]] = None
    custom_hours: Optional[CustomHoursPayload] = None

    model_config = {"from_attributes": True}

    @field_validator("working_days", "custom_hours", mode="before")
    @classmethod
    def parse_json(cls, v):
        return _load_json(v)


# ──────────────────────────────────────────────────────────────────────────────
# Service points
# ──────────────────────────────────────────────────────────────────────────────

class ServicePointCreate(BaseModel):
    name: str
    city: str
    partner_id: Optional[int] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    working_hours: dict[str, Optional[DaySchedulePayload]] = Field(default_factory=dict)

    model_config = {"from_attributes": True}

    @field_validator("working_hours", mode="before")
    @classmethod
    def validate_hours(cls, v):
        return validate_working_hours(v)


class ServicePointUpdate(BaseModel):
    is_active: Optional[bool] = None
    name: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    working_hours: Optional[dict[str, Optional[DaySchedulePayload]]] = None

    model_config = {"from_attributes": True}

    @field_validator("working_hours", mode="before")
    @classmethod
    def validate_hours(cls, v):
        if v is None:
            return v
        return validate_working_hours(v)


class ServicePointRead(BaseModel):
    id: int
    partner_id: Optional[int] = None
    name: str
    city: str
    address: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    working_hours: dict = Field(validation_alias="work_schedule")

    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("working_hours", mode="before")
    @classmethod
    def parse_schedule(cls, v):
        if isinstance(v, dict):
            return WeeklySchedule.from_dict(v).to_dict()
        return parse_schedule_json(v).to_dict()


class CategoryRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    model_config = {"from_attributes": True}
