# backend/app/routers/seasonal_schedules.py
# API.md:
# - Nested: service_points -> seasonal_schedules
# - PATCH = ALLOWED, DELETE = hard delete
# - Any change invalidates the point's cached grids

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import (
    SeasonalSchedules as DBSeasonalSchedules,
    ServicePoints as DBServicePoints,
)
from ..redis_client import get_redis
from ..schemas.seasonal_schedules import (
    SeasonalScheduleCreate,
    SeasonalScheduleRead,
    SeasonalScheduleUpdate,
)
from ..schemas.service_points import working_hours_to_json
from ..services.slots.invalidator import invalidate_service_point_cache
from ..services.slots.seasonal import active_seasonal_schedule
from ..services.slots.snapshot import load_seasonal_schedules

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/service_points", tags=["seasonal_schedules"])


def _get_point_or_404(db: Session, id: int) -> DBServicePoints:
    obj = db.get(DBServicePoints, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


def _get_schedule_or_404(db: Session, id: int, schedule_id: int) -> DBSeasonalSchedules:
    obj = db.get(DBSeasonalSchedules, schedule_id)
    if not obj or obj.service_point_id != id:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


def _schedule_columns(data: SeasonalScheduleCreate) -> dict:
    """SeasonalScheduleCreate → SeasonalSchedules column values."""
    return {
        "name": data.name,
        "description": data.description,
        "start_date": data.start_date.isoformat(),
        "end_date": data.end_date.isoformat(),
        "is_active": int(data.is_active),
        "priority": data.priority,
        "working_hours": working_hours_to_json(data.working_hours),
    }


@router.get("/{id}/seasonal_schedules", response_model=list[SeasonalScheduleRead])
def list_seasonal_schedules(id: int, db: Session = Depends(get_db)):
    _get_point_or_404(db, id)
    return (
        db.query(DBSeasonalSchedules)
        .filter(DBSeasonalSchedules.service_point_id == id)
        .order_by(DBSeasonalSchedules.start_date, DBSeasonalSchedules.id)
        .all()
    )


@router.get("/{id}/seasonal_schedules/active_for_date", response_model=Optional[SeasonalScheduleRead])
def get_active_seasonal_schedule(
    id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Seasonal schedule in effect on a date; null when the default applies."""
    _get_point_or_404(db, id)
    active = active_seasonal_schedule(load_seasonal_schedules(db, id), target_date)
    if active is None:
        return None
    return db.get(DBSeasonalSchedules, active.id)


@router.get("/{id}/seasonal_schedules/{schedule_id}", response_model=SeasonalScheduleRead)
def get_seasonal_schedule(id: int, schedule_id: int, db: Session = Depends(get_db)):
    return _get_schedule_or_404(db, id, schedule_id)


@router.post(
    "/{id}/seasonal_schedules",
    response_model=SeasonalScheduleRead,
    status_code=status.HTTP_201_CREATED,
)
def create_seasonal_schedule(
    id: int,
    data: SeasonalScheduleCreate,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    _get_point_or_404(db, id)

    obj = DBSeasonalSchedules(service_point_id=id, **_schedule_columns(data))
    db.add(obj)
    db.commit()
    db.refresh(obj)

    logger.info(f"Service point {id}: seasonal schedule {obj.id} {obj.start_date}..{obj.end_date} created")
    invalidate_service_point_cache(redis, id)
    return obj


@router.patch("/{id}/seasonal_schedules/{schedule_id}", response_model=SeasonalScheduleRead)
def update_seasonal_schedule(
    id: int,
    schedule_id: int,
    data: SeasonalScheduleUpdate,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    obj = _get_schedule_or_404(db, id, schedule_id)

    # Merge and re-validate so the period check applies to the result
    current = SeasonalScheduleRead.model_validate(obj).model_dump(
        include={"name", "description", "start_date", "end_date", "is_active", "priority", "working_hours"}
    )
    current.update(data.model_dump(exclude_unset=True))
    try:
        merged = SeasonalScheduleCreate.model_validate(current)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    for field, value in _schedule_columns(merged).items():
        setattr(obj, field, value)
    obj.updated_at = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    db.commit()
    db.refresh(obj)

    invalidate_service_point_cache(redis, id)
    return obj


@router.delete("/{id}/seasonal_schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_seasonal_schedule(
    id: int,
    schedule_id: int,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    obj = _get_schedule_or_404(db, id, schedule_id)

    db.delete(obj)
    db.commit()

    invalidate_service_point_cache(redis, id)
