# Services package
from .exceptions import (
    BookingEngineError, InvalidRequestError, UnavailableError,
    NotFoundError, PaymentGatewayError, CRMError
)
from .rate_plan_resolver import resolve_rate_plan, resolve_rate_plans
from .availability_service import AvailabilityService, AvailabilityResult, DateRange
from .pricing_engine import PricingEngine, PricingResult, FeeLine
from .hold_manager import HoldManager
from .customer_service import normalize_email, sanitize_name, split_guest_name, upsert_customer_by_email
from .payment_gateway import StripeGateway, PaymentIntentInfo, record_payment
from .crm_client import CRMClient, CRMContact, BookingSyncData, ContactFormData
from .booking_service import BookingService, BookingRequest, BookingResult

__all__ = [
    "BookingEngineError", "InvalidRequestError", "UnavailableError",
    "NotFoundError", "PaymentGatewayError", "CRMError",
    "resolve_rate_plan", "resolve_rate_plans",
    "AvailabilityService", "AvailabilityResult", "DateRange",
    "PricingEngine", "PricingResult", "FeeLine",
    "HoldManager",
    "normalize_email", "sanitize_name", "split_guest_name", "upsert_customer_by_email",
    "StripeGateway", "PaymentIntentInfo", "record_payment",
    "CRMClient", "CRMContact", "BookingSyncData", "ContactFormData",
    "BookingService", "BookingRequest", "BookingResult",
]
