# backend/app/services/slots/snapshot.py
"""
Load stored service point data as slot engine snapshots.
"""

import json
import logging
from dataclasses import replace
from datetime import date, datetime

from sqlalchemy.orm import Session

from .conflicts import FutureBooking
from .models import CustomSchedule, PostModel, WeeklySchedule, parse_schedule_json
from .seasonal import SeasonalSchedule, schedule_for_date

logger = logging.getLogger(__name__)

# Bookings that still occupy a post
ACTIVE_BOOKING_STATUSES = ["pending", "confirmed", "in_progress"]


def post_from_row(row) -> PostModel:
    """ServicePosts row → PostModel."""
    custom = None
    if row.has_custom_schedule:
        try:
            custom = CustomSchedule.from_dict(
                json.loads(row.working_days) if row.working_days else None,
                json.loads(row.custom_hours) if row.custom_hours else None,
            )
        except (json.JSONDecodeError, ValueError, KeyError, AttributeError, TypeError) as e:
            logger.warning(f"Post {row.id}: invalid custom schedule ignored: {e}")

    return PostModel(
        id=row.id,
        name=row.name,
        is_active=bool(row.is_active),
        category_id=row.category_id,
        slot_duration_minutes=row.slot_duration,
        custom_schedule=custom,
    )


def seasonal_from_row(row) -> SeasonalSchedule:
    """SeasonalSchedules row → SeasonalSchedule."""
    return SeasonalSchedule(
        id=row.id,
        name=row.name,
        start_date=date.fromisoformat(row.start_date),
        end_date=date.fromisoformat(row.end_date),
        schedule=parse_schedule_json(row.working_hours),
        priority=row.priority,
        is_active=bool(row.is_active),
    )


def load_seasonal_schedules(db: Session, service_point_id: int) -> list[SeasonalSchedule]:
    from ...models.generated import SeasonalSchedules

    rows = (
        db.query(SeasonalSchedules)
        .filter(
            SeasonalSchedules.service_point_id == service_point_id,
            SeasonalSchedules.is_active == 1,
        )
        .order_by(SeasonalSchedules.start_date)
        .all()
    )
    return [seasonal_from_row(row) for row in rows]


def load_service_point_snapshot(
    db: Session,
    service_point_id: int,
    target_date: date | None = None,
):
    """
    Args:
        target_date: When given, a seasonal schedule in effect that day
                     replaces the point's work_schedule.

    Returns:
        (ServicePoints row, WeeklySchedule, list[PostModel]),
        or None when the service point does not exist.
        A deactivated point operates no posts.
    """
    from ...models.generated import ServicePoints

    point = db.get(ServicePoints, service_point_id)
    if point is None:
        return None

    schedule: WeeklySchedule = parse_schedule_json(point.work_schedule)
    if target_date is not None:
        schedule = schedule_for_date(
            schedule, load_seasonal_schedules(db, service_point_id), target_date
        )

    posts = [post_from_row(row) for row in point.service_posts]
    if not point.is_active:
        posts = [replace(post, is_active=False) for post in posts]
    return point, schedule, posts


def load_future_bookings(
    db: Session,
    service_point_id: int,
    now: datetime | None = None,
) -> list[FutureBooking]:
    """Active bookings of a service point starting after `now`."""
    from ...models.generated import Bookings

    now = now or datetime.now()
    today = now.date().isoformat()
    current_time = now.strftime("%H:%M")

    rows = (
        db.query(Bookings)
        .filter(
            Bookings.service_point_id == service_point_id,
            Bookings.booking_date >= today,
            Bookings.status.in_(ACTIVE_BOOKING_STATUSES),
        )
        .order_by(Bookings.booking_date, Bookings.start_time)
        .all()
    )

    return [
        FutureBooking(
            id=row.id,
            date=date.fromisoformat(row.booking_date),
            time=row.start_time,
            post_id=row.service_post_id,
            category_id=row.category_id,
        )
        for row in rows
        if row.booking_date > today or row.start_time > current_time
    ]
