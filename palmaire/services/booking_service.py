"""
Booking Service

Turns a checkout (optionally backed by a hold) into a CONFIRMED booking:

1. Resolve the unit (by id, by the hold, or first free unit of a type)
2. Lock the unit row, validate the hold and re-check availability
3. Price the stay
4. Upsert the customer by email
5. Insert the booking, convert the hold, record a pending payment
6. Commit, then sync the CRM (best effort)
"""

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ..models.booking import Booking, BookingStatus
from ..models.hold import Hold
from ..models.payment import PaymentStatus
from ..models.unit import Unit
from ..utils.db_helpers import acquire_row_lock
from ..utils.logging_config import get_logger
from .availability_service import AvailabilityService
from .crm_client import BookingSyncData, CRMClient
from .customer_service import upsert_customer_by_email
from .exceptions import CRMError, InvalidRequestError, NotFoundError, UnavailableError
from .hold_manager import HoldManager
from .payment_gateway import record_payment
from .pricing_engine import PricingEngine, PricingResult
from .stay_rules import validate_reservation_window

logger = get_logger(__name__)

CRM_SYNC_ERROR_MESSAGE = "Failed to sync with CRM - contact admin"


@dataclass
class BookingRequest:
    check_in: date
    check_out: date
    guest_name: str
    guest_email: str
    guest_phone: str
    guests: int = 1
    unit_id: Optional[str] = None
    unit_type: Optional[str] = None
    hold_id: Optional[str] = None
    special_requests: Optional[str] = None
    payment_intent_id: Optional[str] = None


@dataclass
class BookingResult:
    booking: Booking
    pricing: PricingResult
    customer_created: bool
    crm_contact_id: Optional[str] = None
    crm_sync_error: Optional[str] = None


class BookingService:
    def __init__(self, db: Session, crm_client: Optional[CRMClient] = None):
        self.db = db
        self.crm_client = crm_client if crm_client is not None else CRMClient()
        self.availability = AvailabilityService(db)
        self.holds = HoldManager(db)

    def _resolve_unit_id(self, request: BookingRequest) -> str:
        if request.unit_id:
            return request.unit_id

        if request.hold_id:
            hold = self.db.query(Hold).filter(Hold.id == request.hold_id).first()
            if hold:
                return hold.unit_id
            if not request.unit_type:
                raise NotFoundError("Hold not found")

        if not request.unit_type:
            raise InvalidRequestError("One of unit_id, unit_type or hold_id must be provided")

        unit = self.availability.find_available_unit(request.unit_type, request.check_in, request.check_out)
        if not unit:
            raise InvalidRequestError(f"No {request.unit_type} units available for the selected dates")
        return unit.id

    def create_booking(self, request: BookingRequest) -> BookingResult:
        """
        Create a CONFIRMED booking.

        Raises:
            NotFoundError: unknown unit or no rate plan
            InvalidRequestError: bad dates, bad hold, inactive unit, too many guests
            UnavailableError: dates taken since the quote
        """
        start_time = time.time()
        validate_reservation_window(request.check_in, request.check_out)

        unit_id = self._resolve_unit_id(request)

        # Serialize concurrent checkouts for this unit until commit
        unit = acquire_row_lock(self.db, Unit, Unit.id == unit_id)
        if not unit:
            raise NotFoundError("Unit not found")
        if not unit.active:
            raise InvalidRequestError("Unit is not available for booking")

        hold = None
        if request.hold_id:
            hold = self.holds.validate_for_booking(
                request.hold_id, unit.id, request.check_in, request.check_out
            )

        availability = self.availability.check_availability(
            unit.id,
            request.check_in,
            request.check_out,
            exclude_hold_id=hold.id if hold else None,
        )
        if not availability.available:
            self.db.rollback()
            raise UnavailableError(
                "Dates are no longer available",
                conflicts=availability.conflicting_bookings + availability.conflicting_holds,
            )

        pricing = PricingEngine(self.db).calculate_pricing(
            unit.id, request.check_in, request.check_out, request.guests
        )

        customer, customer_created = upsert_customer_by_email(
            self.db, request.guest_name, request.guest_email, request.guest_phone
        )

        booking = Booking(
            unit_id=unit.id,
            customer_id=customer.id,
            check_in=request.check_in,
            check_out=request.check_out,
            guests=request.guests,
            status=BookingStatus.CONFIRMED.value,
            total_cents=pricing.total,
            currency=pricing.currency,
            notes=request.special_requests,
        )
        self.db.add(booking)
        self.db.flush()

        if hold:
            self.holds.convert(hold, booking)

        if request.payment_intent_id:
            record_payment(
                self.db,
                booking_id=booking.id,
                provider_intent_id=request.payment_intent_id,
                amount_cents=pricing.total,
                status=PaymentStatus.PENDING.value,
                currency=pricing.currency,
            )

        self.db.commit()
        self.db.refresh(booking)

        logger.booking_created(booking.id, unit.id, booking.total_cents, pricing.total_nights)
        logger.log_with_context(
            logging.DEBUG,
            "Booking persisted",
            entity_type="booking",
            entity_id=booking.id,
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )

        result = BookingResult(booking=booking, pricing=pricing, customer_created=customer_created)
        self._sync_crm(result, request, unit)
        return result

    def _sync_crm(self, result: BookingResult, request: BookingRequest, unit: Unit):
        """Push the booking to the CRM; never fails the booking"""
        if not self.crm_client.is_configured:
            logger.debug("CRM not configured, skipping sync for booking %s", result.booking.id)
            return

        try:
            sync = self.crm_client.sync_booking(BookingSyncData(
                booking_id=result.booking.id,
                guest_name=request.guest_name,
                guest_email=request.guest_email,
                guest_phone=request.guest_phone,
                check_in=request.check_in,
                check_out=request.check_out,
                unit_name=unit.name,
                total_cents=result.booking.total_cents,
                special_requests=request.special_requests,
            ))
            result.crm_contact_id = sync.contact_id
        except CRMError as e:
            logger.warning("CRM sync failed for booking %s: %s", result.booking.id, e)
            result.crm_sync_error = CRM_SYNC_ERROR_MESSAGE

    def get_booking(self, booking_id: str) -> Booking:
        booking = (
            self.db.query(Booking)
            .options(
                joinedload(Booking.unit),
                joinedload(Booking.customer),
                joinedload(Booking.payment),
            )
            .filter(Booking.id == booking_id)
            .first()
        )
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def update_status(self, booking_id: str, status: str) -> Booking:
        """
        Move a booking between CONFIRMED and CANCELLED.

        Re-confirming a cancelled booking requires its dates to still be free.
        """
        valid = [s.value for s in BookingStatus]
        if status not in valid:
            raise InvalidRequestError(f"Invalid status. Must be one of: {', '.join(valid)}")

        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError("Booking not found")

        old_status = booking.status
        if old_status == status:
            return self.get_booking(booking_id)

        if status == BookingStatus.CONFIRMED.value:
            acquire_row_lock(self.db, Unit, Unit.id == booking.unit_id)
            availability = self.availability.check_availability(
                booking.unit_id, booking.check_in, booking.check_out, exclude_booking_id=booking.id
            )
            if not availability.available:
                self.db.rollback()
                raise UnavailableError(
                    "Dates are no longer available",
                    conflicts=availability.conflicting_bookings + availability.conflicting_holds,
                )

        booking.status = status
        self.db.commit()

        logger.booking_status_changed(booking.id, old_status, status)
        return self.get_booking(booking_id)
