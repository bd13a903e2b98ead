"""
Date rules shared by quotes, holds and bookings.
"""

from datetime import date, timedelta
from typing import Optional

from ..config import settings
from .exceptions import InvalidRequestError


def count_nights(check_in: date, check_out: date) -> int:
    """Nights in [check_in, check_out); raises when check-out is not after check-in"""
    nights = (check_out - check_in).days
    if nights <= 0:
        raise InvalidRequestError("Check-out date must be after check-in date")
    return nights


def validate_reservation_window(
    check_in: date,
    check_out: date,
    today: Optional[date] = None,
) -> int:
    """
    Rules for placing holds and bookings (quotes skip these):
    - check-in not in the past
    - check-in at most MAX_ADVANCE_DAYS ahead
    - stay at most MAX_STAY_NIGHTS long

    Returns the number of nights.
    """
    nights = count_nights(check_in, check_out)
    today = today or date.today()

    if check_in < today:
        raise InvalidRequestError("Check-in date cannot be in the past")

    if check_in > today + timedelta(days=settings.max_advance_days):
        raise InvalidRequestError(
            f"Check-in date cannot be more than {settings.max_advance_days} days in advance"
        )

    if nights > settings.max_stay_nights:
        raise InvalidRequestError(f"Stays are limited to {settings.max_stay_nights} nights")

    return nights
