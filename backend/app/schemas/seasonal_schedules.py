# backend/app/schemas/seasonal_schedules.py

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..services.slots.models import parse_schedule_json
from ..services.slots.seasonal import SeasonalSchedule
from .service_points import DaySchedulePayload, validate_working_hours


class SeasonalScheduleCreate(BaseModel):
    name: str
    description: Optional[str] = None
    start_date: date
    end_date: date
    is_active: bool = True
    priority: int = 0
    working_hours: dict[str, Optional[DaySchedulePayload]] = Field(default_factory=dict)

    @field_validator("working_hours", mode="before")
    @classmethod
    def validate_hours(cls, v):
        return validate_working_hours(v)

    @model_validator(mode="after")
    def check_period(self):
        if self.start_date > self.end_date:
            raise ValueError(f"start_date ({self.start_date}) must not be after end_date ({self.end_date})")
        return self


class SeasonalScheduleUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: Optional[bool] = None
    priority: Optional[int] = None
    working_hours: Optional[dict[str, Optional[DaySchedulePayload]]] = None

    @field_validator("working_hours", mode="before")
    @classmethod
    def validate_hours(cls, v):
        if v is None:
            return v
        return validate_working_hours(v)


class SeasonalScheduleRead(BaseModel):
    id: int
    service_point_id: int
    name: str
    description: Optional[str] = None
    start_date: date
    end_date: date
    is_active: bool
    priority: int
    working_hours: dict
    # current / upcoming / past / inactive, relative to today
    status: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("working_hours", mode="before")
    @classmethod
    def parse_schedule(cls, v):
        if isinstance(v, dict):
            return v
        return parse_schedule_json(v).to_dict()

    @model_validator(mode="after")
    def fill_status(self):
        period = SeasonalSchedule(
            id=self.id,
            name=self.name,
            start_date=self.start_date,
            end_date=self.end_date,
            schedule=parse_schedule_json(None),
            is_active=self.is_active,
        )
        self.status = period.status_on(date.today())
        return self
