"""
Service-layer exceptions.

Routers let these propagate; handlers registered in main.py map each class
to its HTTP status.
"""

from typing import List, Optional


class BookingEngineError(Exception):
    """Base class for booking engine errors"""
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidRequestError(BookingEngineError):
    """Request is well-formed but violates a business rule"""
    status_code = 400


class UnavailableError(InvalidRequestError):
    """Requested dates collide with bookings or active holds"""

    def __init__(self, message: str = "Dates are no longer available", conflicts: Optional[List[str]] = None):
        super().__init__(message)
        self.conflicts = conflicts or []


class NotFoundError(BookingEngineError):
    status_code = 404


class PaymentGatewayError(BookingEngineError):
    """Payment provider call failed or is not configured"""
    status_code = 500


class CRMError(BookingEngineError):
    """CRM call failed or is not configured"""
    status_code = 500
