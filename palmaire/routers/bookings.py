from dataclasses import asdict

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.booking import BookingCreate, BookingStatusUpdate, BookingResponse, BookingCreatedResponse
from ..schemas.pricing import PricingResponse
from ..services.booking_service import BookingService, BookingRequest
from ..utils.rate_limiter import limiter, get_rate_limit

router = APIRouter(prefix="/api/bookings", tags=["Bookings"])


@router.post("", response_model=BookingCreatedResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=BookingCreatedResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit("booking_create"))
def create_booking(
    request: Request,
    booking_data: BookingCreate,
    db: Session = Depends(get_db)
):
    """
    Create a confirmed booking.

    With a hold_id the hold must be active and match the unit and dates;
    it is converted to the booking. With only unit_type the first free unit
    of that type is booked. CRM sync failures are reported in
    crm_sync_error without failing the request.
    """
    service = BookingService(db)
    result = service.create_booking(BookingRequest(
        check_in=booking_data.check_in,
        check_out=booking_data.check_out,
        guest_name=booking_data.guest_name,
        guest_email=booking_data.guest_email,
        guest_phone=booking_data.guest_phone,
        guests=booking_data.guests,
        unit_id=booking_data.unit_id,
        unit_type=booking_data.unit_type.value if booking_data.unit_type else None,
        hold_id=booking_data.hold_id,
        special_requests=booking_data.special_requests,
        payment_intent_id=booking_data.payment_intent_id,
    ))

    booking = service.get_booking(result.booking.id)
    response = BookingResponse.model_validate(booking)
    return BookingCreatedResponse(
        **response.model_dump(),
        pricing=PricingResponse(**asdict(result.pricing)),
        crm_contact_id=result.crm_contact_id,
        crm_sync_error=result.crm_sync_error,
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(booking_id: str, db: Session = Depends(get_db)):
    """Booking with its unit, customer and payment"""
    return BookingService(db).get_booking(booking_id)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    status_data: BookingStatusUpdate,
    db: Session = Depends(get_db)
):
    return BookingService(db).update_status(booking_id, status_data.status.value)
