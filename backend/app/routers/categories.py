# backend/app/routers/categories.py
# Display lookup keyed by category id; the slot engine only sees ids.

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import ServiceCategories as DBServiceCategories
from ..schemas.service_points import CategoryRead

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("/", response_model=list[CategoryRead])
def list_categories(db: Session = Depends(get_db)):
    return (
        db.query(DBServiceCategories)
        .filter(DBServiceCategories.is_active == 1)
        .order_by(DBServiceCategories.id)
        .all()
    )


@router.get("/{id}", response_model=CategoryRead)
def get_category(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBServiceCategories, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj
