from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional, Dict
from datetime import date, timedelta

from ..database import get_db
from ..models.booking import Booking, BookingStatus
from ..models.unit import Unit
from ..schemas.unit import UnitResponse, RatePlanResponse, AvailabilityCalendarResponse, DateRangeResponse
from ..services.availability_service import AvailabilityService
from ..services.exceptions import InvalidRequestError, NotFoundError
from ..services.rate_plan_resolver import resolve_rate_plans

router = APIRouter(prefix="/api/units", tags=["Units"])


def serialize_unit(db: Session, unit: Unit, confirmed_bookings: int = 0) -> UnitResponse:
    """Unit with its effective rate plans (own plans, else category plans)"""
    return UnitResponse(
        id=unit.id,
        slug=unit.slug,
        name=unit.name,
        type=unit.type,
        capacity=unit.capacity,
        beds=unit.beds,
        baths=unit.baths,
        amenities=unit.amenities or [],
        features=unit.features or [],
        photos=unit.photos or [],
        active=unit.active,
        rate_plans=[RatePlanResponse.model_validate(plan) for plan in resolve_rate_plans(db, unit)],
        confirmed_bookings=confirmed_bookings,
        created_at=unit.created_at,
        updated_at=unit.updated_at,
    )


def confirmed_booking_counts(db: Session) -> Dict[str, int]:
    rows = (
        db.query(Booking.unit_id, func.count(Booking.id))
        .filter(Booking.status == BookingStatus.CONFIRMED.value)
        .group_by(Booking.unit_id)
        .all()
    )
    return {unit_id: count for unit_id, count in rows}


@router.get("", response_model=List[UnitResponse])
@router.get("/", response_model=List[UnitResponse])
async def list_units(db: Session = Depends(get_db)):
    """All units ordered by name, with rate plans and confirmed booking counts"""
    units = db.query(Unit).order_by(Unit.name).all()
    counts = confirmed_booking_counts(db)
    return [serialize_unit(db, unit, counts.get(unit.id, 0)) for unit in units]


@router.get("/{slug}", response_model=UnitResponse)
async def get_unit(slug: str, db: Session = Depends(get_db)):
    unit = db.query(Unit).filter(Unit.slug == slug).first()
    if not unit:
        raise NotFoundError("Unit not found")

    count = (
        db.query(func.count(Booking.id))
        .filter(Booking.unit_id == unit.id, Booking.status == BookingStatus.CONFIRMED.value)
        .scalar()
    )
    return serialize_unit(db, unit, count or 0)


@router.get("/{unit_id}/availability-calendar", response_model=AvailabilityCalendarResponse)
async def get_availability_calendar(
    unit_id: str,
    start_date: Optional[date] = Query(None, description="Defaults to today"),
    end_date: Optional[date] = Query(None, description="Defaults to a year from start"),
    db: Session = Depends(get_db)
):
    """Free date ranges for a unit between start_date and end_date"""
    start = start_date or date.today()
    end = end_date or start + timedelta(days=365)
    if end <= start:
        raise InvalidRequestError("end_date must be after start_date")

    if not db.query(Unit.id).filter(Unit.id == unit_id).first():
        raise NotFoundError("Unit not found")

    ranges = AvailabilityService(db).get_available_date_ranges(unit_id, start, end)
    return AvailabilityCalendarResponse(
        unit_id=unit_id,
        start_date=start,
        end_date=end,
        available_ranges=[DateRangeResponse(start=r.start, end=r.end) for r in ranges],
    )
