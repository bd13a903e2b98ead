"""
Availability Service

A unit is available for [check_in, check_out) when no CONFIRMED booking
and no ACTIVE, unexpired hold overlaps the range. Stays are half-open, so a
check-out on the same day as another stay's check-in is not a conflict.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Tuple

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from ..models.booking import Booking, BookingStatus
from ..models.hold import Hold, HoldStatus
from ..models.unit import Unit
from ..utils.timeutils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class AvailabilityResult:
    available: bool
    conflicting_bookings: List[str] = field(default_factory=list)
    conflicting_holds: List[str] = field(default_factory=list)


@dataclass
class DateRange:
    start: date
    end: date


def format_period(check_in: date, check_out: date) -> str:
    """'Mar 5 - Mar 9' style label for a stay"""
    return f"{check_in:%b} {check_in.day} - {check_out:%b} {check_out.day}"


def overlap_condition(model, check_in: date, check_out: date):
    """
    SQL filter matching rows of `model` whose stay overlaps [check_in, check_out).

    The row starts inside the range, ends inside it, or sits inside it.
    """
    return or_(
        and_(model.check_in <= check_in, model.check_out > check_in),
        and_(model.check_in < check_out, model.check_out >= check_out),
        and_(model.check_in >= check_in, model.check_out <= check_out),
    )


class AvailabilityService:
    def __init__(self, db: Session):
        self.db = db

    def _conflicting_bookings(
        self,
        unit_id: str,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        query = self.db.query(Booking).filter(
            Booking.unit_id == unit_id,
            Booking.status == BookingStatus.CONFIRMED.value,
            overlap_condition(Booking, check_in, check_out),
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return query.order_by(Booking.check_in).all()

    def _conflicting_holds(
        self,
        unit_id: str,
        check_in: date,
        check_out: date,
        exclude_hold_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[Hold]:
        query = self.db.query(Hold).filter(
            Hold.unit_id == unit_id,
            Hold.status == HoldStatus.ACTIVE.value,
            Hold.expires_at > (now or utcnow()),
            overlap_condition(Hold, check_in, check_out),
        )
        if exclude_hold_id:
            query = query.filter(Hold.id != exclude_hold_id)
        return query.order_by(Hold.check_in).all()

    def check_availability(
        self,
        unit_id: str,
        check_in: date,
        check_out: date,
        exclude_hold_id: Optional[str] = None,
        exclude_booking_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AvailabilityResult:
        """
        Check whether a unit is free for the given stay.

        Args:
            unit_id: Unit to check
            check_in: First night
            check_out: Departure day (not a night)
            exclude_hold_id: Ignore this hold (the caller's own hold)
            exclude_booking_id: Ignore this booking (when re-confirming it)
            now: Reference time for hold expiry

        Returns:
            AvailabilityResult with conflict labels for display
        """
        bookings = self._conflicting_bookings(unit_id, check_in, check_out, exclude_booking_id)
        holds = self._conflicting_holds(unit_id, check_in, check_out, exclude_hold_id, now)

        result = AvailabilityResult(
            available=not bookings and not holds,
            conflicting_bookings=[format_period(b.check_in, b.check_out) for b in bookings],
            conflicting_holds=[format_period(h.check_in, h.check_out) for h in holds],
        )
        if not result.available:
            logger.debug(
                "Unit %s unavailable %s..%s: %d bookings, %d holds",
                unit_id, check_in, check_out, len(bookings), len(holds)
            )
        return result

    def get_available_date_ranges(
        self,
        unit_id: str,
        start: date,
        end: date,
        now: Optional[datetime] = None,
    ) -> List[DateRange]:
        """Free gaps between occupied periods inside [start, end)"""
        bookings = self._conflicting_bookings(unit_id, start, end)
        holds = self._conflicting_holds(unit_id, start, end, now=now)

        occupied: List[Tuple[date, date]] = sorted(
            [(b.check_in, b.check_out) for b in bookings]
            + [(h.check_in, h.check_out) for h in holds]
        )

        ranges: List[DateRange] = []
        cursor = start
        for occupied_start, occupied_end in occupied:
            if cursor < occupied_start:
                ranges.append(DateRange(start=cursor, end=min(occupied_start, end)))
            cursor = max(cursor, occupied_end)

        if cursor < end:
            ranges.append(DateRange(start=cursor, end=end))

        return ranges

    def find_available_unit(
        self,
        unit_type: str,
        check_in: date,
        check_out: date,
    ) -> Optional[Unit]:
        """First active unit of a type, by name, that is free for the stay"""
        units = (
            self.db.query(Unit)
            .filter(Unit.type == unit_type, Unit.active.is_(True))
            .order_by(Unit.name)
            .all()
        )
        for unit in units:
            if self.check_availability(unit.id, check_in, check_out).available:
                return unit
        return None
