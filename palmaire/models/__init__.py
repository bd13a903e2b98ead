# Models package
from .unit import Unit, UnitType
from .rate_plan import RatePlan
from .season import Season
from .fee import Fee
from .customer import Customer
from .booking import Booking, BookingStatus
from .hold import Hold, HoldStatus
from .payment import Payment, PaymentStatus

__all__ = [
    "Unit", "UnitType",
    "RatePlan", "Season", "Fee",
    "Customer",
    "Booking", "BookingStatus",
    "Hold", "HoldStatus",
    "Payment", "PaymentStatus",
]
