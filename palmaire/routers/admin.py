"""
Admin booking views.

Staff-facing list, calendar window and status change. These routes carry
no authentication of their own; deploy them behind the operator's gateway.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
from datetime import date

from ..database import get_db
from ..models.booking import Booking, BookingStatus
from ..schemas.booking import BookingResponse, BookingStatusUpdate
from ..schemas.pagination import PaginatedResponse, paginate_query
from ..services.availability_service import overlap_condition
from ..services.booking_service import BookingService
from ..services.exceptions import InvalidRequestError

router = APIRouter(prefix="/api/admin", tags=["Admin"])


def bookings_query(db: Session):
    return db.query(Booking).options(
        joinedload(Booking.unit),
        joinedload(Booking.customer),
        joinedload(Booking.payment),
    )


@router.get("/bookings", response_model=PaginatedResponse[BookingResponse])
async def list_bookings(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[BookingStatus] = None,
    unit_id: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Bookings ordered by check-in, with unit and customer"""
    query = bookings_query(db)
    if status:
        query = query.filter(Booking.status == status.value)
    if unit_id:
        query = query.filter(Booking.unit_id == unit_id)

    items, total = paginate_query(query.order_by(Booking.check_in, Booking.id), page, page_size)
    return PaginatedResponse.create(
        items=[BookingResponse.model_validate(b) for b in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/bookings/calendar", response_model=List[BookingResponse])
async def calendar_bookings(
    start: date = Query(...),
    end: date = Query(...),
    db: Session = Depends(get_db)
):
    """Bookings of any status whose stay overlaps [start, end)"""
    if end <= start:
        raise InvalidRequestError("end must be after start")

    return (
        bookings_query(db)
        .filter(overlap_condition(Booking, start, end))
        .order_by(Booking.check_in)
        .all()
    )


@router.patch("/bookings/{booking_id}/status", response_model=BookingResponse)
async def admin_update_booking_status(
    booking_id: str,
    status_data: BookingStatusUpdate,
    db: Session = Depends(get_db)
):
    return BookingService(db).update_status(booking_id, status_data.status.value)
