"""
Hold Manager

Holds reserve a unit's dates for a few minutes while the guest pays.

Lifecycle:
    ACTIVE -> CONVERTED   (booking created from the hold)
    ACTIVE -> CANCELLED   (released by the guest)
    ACTIVE -> EXPIRED     (expires_at passed; read lazily, persisted by the sweeper)
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..models.booking import Booking
from ..models.hold import Hold, HoldStatus
from ..models.unit import Unit
from ..utils.db_helpers import acquire_row_lock
from ..utils.logging_config import get_logger
from ..utils.timeutils import utcnow
from .availability_service import AvailabilityService
from .exceptions import InvalidRequestError, NotFoundError, UnavailableError
from .stay_rules import validate_reservation_window

logger = get_logger(__name__)


class HoldManager:
    def __init__(self, db: Session):
        self.db = db

    def create_hold(
        self,
        unit_id: str,
        check_in: date,
        check_out: date,
        expiration_minutes: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Hold:
        """
        Place an ACTIVE hold on a unit.

        The unit row is locked before the availability check so two
        concurrent requests cannot both insert a hold (PostgreSQL only).

        Raises:
            NotFoundError: unknown unit
            InvalidRequestError: bad dates, inactive unit, out-of-range duration
            UnavailableError: dates collide with a booking or another hold
        """
        if expiration_minutes is None:
            expiration_minutes = settings.hold_default_minutes
        if not settings.hold_min_minutes <= expiration_minutes <= settings.hold_max_minutes:
            raise InvalidRequestError(
                f"Hold duration must be between {settings.hold_min_minutes} "
                f"and {settings.hold_max_minutes} minutes"
            )

        validate_reservation_window(check_in, check_out)

        unit = acquire_row_lock(self.db, Unit, Unit.id == unit_id)
        if not unit:
            raise NotFoundError("Unit not found")
        if not unit.active:
            raise InvalidRequestError("Unit is not available for booking")

        now = now or utcnow()
        availability = AvailabilityService(self.db).check_availability(
            unit_id, check_in, check_out, now=now
        )
        if not availability.available:
            self.db.rollback()
            raise UnavailableError(
                "Dates are not available for booking",
                conflicts=availability.conflicting_bookings + availability.conflicting_holds,
            )

        hold = Hold(
            unit_id=unit_id,
            check_in=check_in,
            check_out=check_out,
            expires_at=now + timedelta(minutes=expiration_minutes),
            status=HoldStatus.ACTIVE.value,
        )
        self.db.add(hold)
        self.db.commit()
        self.db.refresh(hold)

        logger.hold_created(hold.id, unit_id, hold.expires_at)
        return hold

    def get_hold(self, hold_id: str) -> Hold:
        hold = self.db.query(Hold).filter(Hold.id == hold_id).first()
        if not hold:
            raise NotFoundError("Hold not found")
        return hold

    def release_hold(self, hold_id: str, now: Optional[datetime] = None) -> Hold:
        """
        Cancel an ACTIVE hold. Releasing a hold that is already cancelled or
        expired changes nothing; a converted hold belongs to a booking and
        cannot be released.
        """
        hold = self.get_hold(hold_id)
        effective = hold.effective_status(now)

        if effective == HoldStatus.CONVERTED.value:
            raise InvalidRequestError("Hold has already been converted to a booking")

        if effective != HoldStatus.ACTIVE.value:
            return hold

        hold.status = HoldStatus.CANCELLED.value
        self.db.commit()
        self.db.refresh(hold)

        logger.hold_released(hold.id, hold.status)
        return hold

    def validate_for_booking(
        self,
        hold_id: str,
        unit_id: str,
        check_in: date,
        check_out: date,
        now: Optional[datetime] = None,
    ) -> Hold:
        """Hold the guest is checking out with; must be live and match the booking"""
        hold = self.db.query(Hold).filter(Hold.id == hold_id).first()
        if not hold:
            raise InvalidRequestError("Invalid hold ID")

        effective = hold.effective_status(now)
        if effective == HoldStatus.EXPIRED.value:
            raise InvalidRequestError("Hold has expired")
        if effective != HoldStatus.ACTIVE.value:
            raise InvalidRequestError("Hold is no longer active")

        if hold.unit_id != unit_id or hold.check_in != check_in or hold.check_out != check_out:
            raise InvalidRequestError("Hold does not match booking data")

        return hold

    def convert(self, hold: Hold, booking: Booking) -> Hold:
        """Mark the hold as consumed by `booking`. Caller commits."""
        hold.status = HoldStatus.CONVERTED.value
        hold.booking_id = booking.id
        return hold

    def expire_stale_holds(self, now: Optional[datetime] = None) -> int:
        """Persist EXPIRED on overdue ACTIVE holds. Returns the number updated."""
        now = now or utcnow()
        count = (
            self.db.query(Hold)
            .filter(Hold.status == HoldStatus.ACTIVE.value, Hold.expires_at <= now)
            .update({Hold.status: HoldStatus.EXPIRED.value}, synchronize_session=False)
        )
        self.db.commit()
        if count:
            logger.info("Expired %d stale holds", count)
        return count
