# backend/app/schemas/bookings.py

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, field_validator

from .service_points import validate_time_str


class BookingCreate(BaseModel):
    service_point_id: int
    client_id: int
    service_post_id: Optional[int] = None
    category_id: Optional[int] = None

    booking_date: date
    start_time: str
    end_time: Optional[str] = None

    notes: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return validate_time_str(v)


class BookingRead(BaseModel):
    id: int

    service_point_id: int
    client_id: int
    service_post_id: Optional[int] = None
    category_id: Optional[int] = None

    booking_date: date
    start_time: str
    end_time: Optional[str] = None

    status: str
    notes: Optional[str] = None
    cancel_reason: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BookingStatusChange(BaseModel):
    # Raw value; normalized by BookingStatus.parse in the router
    status: str
    cancel_reason: Optional[str] = None


class BookingActions(BaseModel):
    booking_id: int
    status: str
    is_terminal: bool
    can_cancel: bool
    can_reschedule: bool
    allowed_transitions: list[str]
