# backend/app/routers/service_points.py
# API.md:
# - PATCH = ALLOWED
# - DELETE = soft-delete (is_active)
# - Nested: service_points -> posts

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import get_redis
from ..models.generated import (
    ServicePoints as DBServicePoints,
    ServicePosts as DBServicePosts,
)
from ..schemas.service_points import (
    PostPayload,
    PostRead,
    PostUpdate,
    ServicePointCreate,
    ServicePointRead,
    ServicePointUpdate,
    working_hours_to_json,
)
from ..services.slots.invalidator import invalidate_service_point_cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/service_points", tags=["service_points"])


def _get_point_or_404(db: Session, id: int) -> DBServicePoints:
    obj = db.get(DBServicePoints, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


def _post_columns(post: PostPayload) -> dict:
    """PostPayload → ServicePosts column values."""
    return {
        "name": post.name,
        "is_active": int(post.is_active),
        "category_id": post.category_id,
        "slot_duration": post.slot_duration,
        "has_custom_schedule": int(post.has_custom_schedule),
        "working_days": json.dumps(post.working_days) if post.working_days else None,
        "custom_hours": json.dumps(post.custom_hours.model_dump()) if post.custom_hours else None,
    }


# ---------------------------------------------------------------------
# Service points
# ---------------------------------------------------------------------

@router.get("/", response_model=list[ServicePointRead])
def list_service_points(db: Session = Depends(get_db)):
    return (
        db.query(DBServicePoints)
        .filter(DBServicePoints.is_active == 1)
        .all()
    )


@router.get("/{id}", response_model=ServicePointRead)
def get_service_point(id: int, db: Session = Depends(get_db)):
    return _get_point_or_404(db, id)


@router.post("/", response_model=ServicePointRead, status_code=status.HTTP_201_CREATED)
def create_service_point(
    data: ServicePointCreate,
    db: Session = Depends(get_db),
):
    values = data.model_dump(exclude={"working_hours"})
    obj = DBServicePoints(**values, work_schedule=working_hours_to_json(data.working_hours))
    db.add(obj)
    db.commit()
    db.refresh(obj)
    logger.info(f"Service point {obj.id} created")
    return obj


@router.patch("/{id}", response_model=ServicePointRead)
def update_service_point(
    id: int,
    data: ServicePointUpdate,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    obj = _get_point_or_404(db, id)

    changes = data.model_dump(exclude_unset=True, exclude={"working_hours"})
    for field, value in changes.items():
        setattr(obj, field, value)

    schedule_changed = data.working_hours is not None
    if schedule_changed:
        obj.work_schedule = working_hours_to_json(data.working_hours)

    db.commit()
    db.refresh(obj)

    # Grid depends on schedule and activity
    if schedule_changed or "is_active" in changes:
        invalidate_service_point_cache(redis, id)

    return obj


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service_point(
    id: int,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    obj = _get_point_or_404(db, id)

    obj.is_active = 0
    db.commit()

    invalidate_service_point_cache(redis, id)


# ---------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------

@router.get("/{id}/posts", response_model=list[PostRead])
def list_posts(id: int, db: Session = Depends(get_db)):
    point = _get_point_or_404(db, id)
    return point.service_posts


@router.post("/{id}/posts", response_model=PostRead, status_code=status.HTTP_201_CREATED)
def create_post(
    id: int,
    data: PostPayload,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    point = _get_point_or_404(db, id)

    post_number = data.post_number or len(point.service_posts) + 1
    obj = DBServicePosts(
        service_point_id=id,
        post_number=post_number,
        **_post_columns(data),
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)

    invalidate_service_point_cache(redis, id)
    return obj


@router.patch("/{id}/posts/{post_id}", response_model=PostRead)
def update_post(
    id: int,
    post_id: int,
    data: PostUpdate,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    obj = db.get(DBServicePosts, post_id)
    if not obj or obj.service_point_id != id:
        raise HTTPException(status_code=404, detail="Not found")

    # Merge and re-validate so custom schedule rules apply to the result
    current = PostRead.model_validate(obj).model_dump(exclude={"service_point_id"})
    current.update(data.model_dump(exclude_unset=True))
    try:
        merged = PostPayload.model_validate(current)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    for field, value in _post_columns(merged).items():
        setattr(obj, field, value)
    if merged.post_number is not None:
        obj.post_number = merged.post_number

    db.commit()
    db.refresh(obj)

    invalidate_service_point_cache(redis, id)
    return obj
