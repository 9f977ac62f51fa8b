# backend/app/routers/bookings.py
# API.md: PATCH = 405, DELETE = 405
# Status changes only via POST /bookings/{id}/status (state machine)

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import (
    Bookings as DBBookings,
    ServicePoints as DBServicePoints,
    ServicePosts as DBServicePosts,
)
from ..schemas.bookings import (
    BookingActions,
    BookingCreate,
    BookingRead,
    BookingStatusChange,
)
from ..services.booking_status import (
    INITIAL_STATUS,
    BookingStatus,
    InvalidTransition,
    allowed_transitions,
    cancellable,
    is_terminal,
    transition,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _get_booking_or_404(db: Session, id: int) -> DBBookings:
    obj = db.get(DBBookings, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


def _current_status(obj: DBBookings) -> BookingStatus:
    try:
        return BookingStatus.parse(obj.status)
    except ValueError:
        logger.error(f"Booking {obj.id} has unknown stored status {obj.status!r}")
        raise HTTPException(status_code=500, detail="Booking has an unknown status")


@router.get("/", response_model=list[BookingRead])
def list_bookings(
    service_point_id: int | None = None,
    db: Session = Depends(get_db),
):
    query = db.query(DBBookings)
    if service_point_id is not None:
        query = query.filter(DBBookings.service_point_id == service_point_id)
    return query.order_by(DBBookings.booking_date, DBBookings.start_time).all()


@router.get("/{id}", response_model=BookingRead)
def get_booking(id: int, db: Session = Depends(get_db)):
    return _get_booking_or_404(db, id)


@router.post("/", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
):
    if not db.get(DBServicePoints, data.service_point_id):
        raise HTTPException(status_code=404, detail="Service point not found")

    if data.service_post_id is not None:
        post = db.get(DBServicePosts, data.service_post_id)
        if not post or post.service_point_id != data.service_point_id:
            raise HTTPException(status_code=400, detail="Post does not belong to service point")

    values = data.model_dump()
    values["booking_date"] = data.booking_date.isoformat()
    obj = DBBookings(**values, status=INITIAL_STATUS.value)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@router.get("/{id}/actions", response_model=BookingActions)
def get_booking_actions(id: int, db: Session = Depends(get_db)):
    """Which actions the UI may offer for a booking."""
    obj = _get_booking_or_404(db, id)
    current = _current_status(obj)

    return BookingActions(
        booking_id=obj.id,
        status=current.value,
        is_terminal=is_terminal(current),
        can_cancel=cancellable(current),
        can_reschedule=cancellable(current),
        allowed_transitions=sorted(s.value for s in allowed_transitions(current)),
    )


@router.post("/{id}/status", response_model=BookingRead)
def change_booking_status(
    id: int,
    data: BookingStatusChange,
    db: Session = Depends(get_db),
):
    obj = _get_booking_or_404(db, id)
    current = _current_status(obj)

    try:
        requested = BookingStatus.parse(data.status)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        new_status = transition(current, requested)
    except InvalidTransition as e:
        logger.info(f"Booking {id}: rejected {current.value} → {requested.value}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    obj.status = new_status.value
    if data.cancel_reason and new_status in (
        BookingStatus.CANCELLED_BY_CLIENT,
        BookingStatus.CANCELLED_BY_PARTNER,
    ):
        obj.cancel_reason = data.cancel_reason
    obj.updated_at = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    db.commit()
    db.refresh(obj)
    logger.info(f"Booking {id}: {current.value} → {new_status.value}")
    return obj


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
