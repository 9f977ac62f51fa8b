# backend/app/routers/conflicts.py
# Advisory only: nothing is saved, no booking is touched.

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.service_points import working_hours_to_domain
from ..schemas.slots import ConflictPreviewRequest, ConflictPreviewResponse, ConflictedBookingRead
from ..services.slots import estimate_conflicts
from ..services.slots.snapshot import (
    load_future_bookings,
    load_seasonal_schedules,
    load_service_point_snapshot,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/service_points", tags=["booking_conflicts"])


@router.post("/{id}/conflicts/preview", response_model=ConflictPreviewResponse)
def preview_conflicts(
    id: int,
    data: ConflictPreviewRequest,
    db: Session = Depends(get_db),
):
    """Future bookings that a draft schedule/posts change would break."""
    snapshot = load_service_point_snapshot(db, id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Not found")
    _, schedule, posts = snapshot

    if data.working_hours is not None:
        schedule = working_hours_to_domain(data.working_hours)
    if data.posts is not None:
        posts = [post.to_domain() for post in data.posts]

    bookings = load_future_bookings(db, id)
    seasonal = load_seasonal_schedules(db, id)
    conflicts = estimate_conflicts(schedule, posts, bookings, seasonal)

    if conflicts:
        logger.info(f"Service point {id}: draft conflicts with {len(conflicts)} booking(s)")

    return ConflictPreviewResponse(
        service_point_id=id,
        conflicts=[
            ConflictedBookingRead(
                booking_id=c.booking.id,
                date=c.booking.date,
                time=c.booking.time,
                service_post_id=c.booking.post_id,
                conflict_type=c.conflict_type,
                reason=c.reason,
            )
            for c in conflicts
        ],
        count=len(conflicts),
    )
