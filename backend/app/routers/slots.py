# backend/app/routers/slots.py
"""
Slots API endpoints.

GET  /slots/day          - Slot grid of a stored service point (cached)
GET  /slots/day/details  - Day summary with hourly breakdown
GET  /slots/day/next     - Next available time of a day
GET  /slots/week         - Week overview
POST /slots/check        - Can a time + duration be served (category aware)
POST /slots/preview      - Slot grid of an unsaved draft (never cached)
POST /slots/invalidate   - Manual cache invalidation (admin)
"""

import logging
from dataclasses import asdict
from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query
from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..redis_client import get_redis
from ..schemas.service_points import working_hours_to_domain
from ..schemas.slots import (
    AvailabilityCheckRequest,
    AvailabilityCheckResponse,
    DayDetailsResponse,
    InvalidateResponse,
    NextAvailableResponse,
    SchedulePreviewRequest,
    SchedulePreviewResponse,
    SlotsDayResponse,
    WeekOverviewResponse,
)
from ..services.slots import (
    SlotsRedisStore,
    generate_slot_grid,
    get_booking_config,
    invalidate_service_point_cache,
    next_available_time,
    summarize_day,
    week_overview,
)
from ..services.slots.calculator import DayDetails, check_availability
from ..services.slots.invalidator import get_affected_dates
from ..services.slots.snapshot import load_seasonal_schedules, load_service_point_snapshot


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/slots", tags=["slots"])


def _load_snapshot_or_404(db: Session, service_point_id: int, target_date: date | None = None):
    snapshot = load_service_point_snapshot(db, service_point_id, target_date)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Service point not found")
    return snapshot


def _check_horizon(target_date: date) -> None:
    config = get_booking_config()
    max_date = date.today() + timedelta(days=config.horizon_days)
    if target_date > max_date:
        raise HTTPException(
            status_code=400,
            detail=f"Date cannot be more than {config.horizon_days} days ahead",
        )


def _day_details_response(point, details: DayDetails, category_id: int | None) -> DayDetailsResponse:
    working_hours = None
    if details.working_hours is not None:
        working_hours = {
            "start_time": details.working_hours.start,
            "end_time": details.working_hours.end,
        }
    return DayDetailsResponse(
        service_point_id=point.id,
        service_point_name=point.name,
        date=details.date,
        category_id=category_id,
        is_working=details.is_working,
        total_posts=details.total_posts,
        working_hours=working_hours,
        summary=asdict(details.summary) if details.summary else None,
        hourly_breakdown=[asdict(h) for h in details.hourly_breakdown],
    )


@router.get("/day", response_model=SlotsDayResponse)
def get_slots_day(
    service_point_id: int,
    target_date: date = Query(..., alias="date"),
    category_id: int | None = None,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    """Slot grid of a service point for a day."""
    _check_horizon(target_date)
    config = get_booking_config()

    store = SlotsRedisStore(redis, settings.slots_cache_ttl_seconds) if redis is not None else None

    if store is not None:
        try:
            cached = store.get_grid(service_point_id, target_date, category_id)
        except RedisError:
            logger.exception("Slots cache read failed, calculating without cache")
            cached, store = None, None
        if cached is not None:
            return SlotsDayResponse(
                service_point_id=service_point_id,
                date=target_date,
                category_id=category_id,
                tick_minutes=config.tick_minutes,
                slots=[slot.to_dict() for slot in cached],
                cached=True,
            )

    _, schedule, posts = _load_snapshot_or_404(db, service_point_id, target_date)
    grid = generate_slot_grid(target_date, schedule, posts, category_id, config.tick_minutes)

    if store is not None:
        try:
            store.store_grid(service_point_id, target_date, category_id, grid)
        except RedisError:
            logger.exception("Slots cache write failed")

    return SlotsDayResponse(
        service_point_id=service_point_id,
        date=target_date,
        category_id=category_id,
        tick_minutes=config.tick_minutes,
        slots=[slot.to_dict() for slot in grid],
    )


@router.get("/day/details", response_model=DayDetailsResponse)
def get_day_details(
    service_point_id: int,
    target_date: date = Query(..., alias="date"),
    category_id: int | None = None,
    db: Session = Depends(get_db),
):
    """Day summary: working hours, occupancy, hourly breakdown."""
    point, schedule, posts = _load_snapshot_or_404(db, service_point_id, target_date)
    details = summarize_day(target_date, schedule, posts, category_id)
    return _day_details_response(point, details, category_id)


@router.get("/day/next", response_model=NextAvailableResponse)
def get_next_available(
    service_point_id: int,
    target_date: date = Query(..., alias="date"),
    after_time: str | None = None,
    category_id: int | None = None,
    db: Session = Depends(get_db),
):
    """First available slot of a day at or after `after_time`."""
    _, schedule, posts = _load_snapshot_or_404(db, service_point_id, target_date)
    grid = generate_slot_grid(target_date, schedule, posts, category_id)

    try:
        found = next_available_time(grid, after_time)
    except ValueError:
        raise HTTPException(status_code=400, detail="after_time must be in HH:MM format")

    return NextAvailableResponse(
        service_point_id=service_point_id,
        date=target_date,
        after_time=after_time,
        next_available_time=found,
        found=found is not None,
    )


@router.get("/week", response_model=WeekOverviewResponse)
def get_week_overview(
    service_point_id: int,
    start_date: date | None = None,
    category_id: int | None = None,
    db: Session = Depends(get_db),
):
    """Day summaries for a week starting at `start_date` (default today)."""
    point, schedule, posts = _load_snapshot_or_404(db, service_point_id)
    start_date = start_date or date.today()

    seasonal = load_seasonal_schedules(db, service_point_id)
    days = week_overview(start_date, schedule, posts, category_id, seasonal_schedules=seasonal)

    return WeekOverviewResponse(
        service_point_id=service_point_id,
        start_date=start_date,
        end_date=days[-1].date,
        category_id=category_id,
        days=[_day_details_response(point, d, category_id) for d in days],
    )


@router.post("/check", response_model=AvailabilityCheckResponse)
def check_slot_availability(
    data: AvailabilityCheckRequest,
    db: Session = Depends(get_db),
):
    """Whether a post is free for `duration` minutes from `start_time`."""
    _check_horizon(data.date)
    _, schedule, posts = _load_snapshot_or_404(db, data.service_point_id, data.date)

    result = check_availability(
        data.date, schedule, posts, data.start_time, data.duration, data.category_id
    )

    return AvailabilityCheckResponse(
        service_point_id=data.service_point_id,
        date=data.date,
        start_time=data.start_time,
        duration=data.duration,
        category_id=data.category_id,
        available=result.available,
        reason=result.reason,
        available_posts_count=result.available_posts_count,
        total_posts_count=result.total_posts_count,
        available_post_ids=list(result.available_post_ids),
    )


@router.post("/preview", response_model=SchedulePreviewResponse)
def preview_slots(data: SchedulePreviewRequest):
    """
    Slot grid for unsaved editor state.

    Same algorithm as /slots/day, run against the draft payload.
    Nothing is read from or written to the database or cache.
    """
    config = get_booking_config()
    schedule = working_hours_to_domain(data.working_hours)
    posts = [post.to_domain() for post in data.posts]

    grid = generate_slot_grid(data.date, schedule, posts, data.category_id, config.tick_minutes)

    return SchedulePreviewResponse(
        date=data.date,
        category_id=data.category_id,
        tick_minutes=config.tick_minutes,
        slots=[slot.to_dict() for slot in grid],
        request_seq=data.request_seq,
    )


@router.post("/invalidate", response_model=InvalidateResponse)
def invalidate_slots_cache(
    service_point_id: int,
    date_start: date | None = None,
    date_end: date | None = None,
    redis: Redis | None = Depends(get_redis),
):
    """Manually invalidate slots cache for a service point (admin endpoint)."""
    dates = None
    if date_start is not None:
        dates = get_affected_dates(date_start, date_end or date_start)

    deleted = invalidate_service_point_cache(redis, service_point_id, dates)

    return InvalidateResponse(
        service_point_id=service_point_id,
        deleted_keys=deleted,
        dates=dates if dates else "all",
    )
