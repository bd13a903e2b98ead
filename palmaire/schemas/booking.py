from pydantic import BaseModel, Field, EmailStr, field_validator, model_validator
from typing import Optional
from datetime import datetime, date
import re

from ..models.booking import BookingStatus
from ..models.unit import UnitType
from .customer import CustomerResponse
from .payment import PaymentResponse
from .pricing import PricingResponse


def strip_markup(v):
    """Remove script tags and inline event handlers from free text"""
    if isinstance(v, str):
        v = re.sub(r'<script[^>]*>.*?</script>', '', v, flags=re.IGNORECASE | re.DOTALL)
        v = re.sub(r'on\w+\s*=', '', v, flags=re.IGNORECASE)
        v = v.strip()
    return v


class BookingCreate(BaseModel):
    unit_id: Optional[str] = Field(None, max_length=36)
    unit_type: Optional[UnitType] = None
    hold_id: Optional[str] = Field(None, max_length=36)
    check_in: date
    check_out: date
    guests: int = Field(1, ge=1, le=50)
    guest_name: str = Field(..., min_length=1, max_length=200)
    guest_email: EmailStr
    guest_phone: str = Field(..., min_length=10, max_length=30)
    special_requests: Optional[str] = Field(None, max_length=2000)
    payment_intent_id: Optional[str] = Field(None, max_length=255)

    @field_validator('guest_name', 'special_requests', mode='before')
    @classmethod
    def sanitize_text_fields(cls, v):
        return strip_markup(v)

    @model_validator(mode='after')
    def validate_booking(self):
        if self.check_out <= self.check_in:
            raise ValueError('Check-out date must be after check-in date')
        if not self.unit_id and not self.unit_type and not self.hold_id:
            raise ValueError('One of unit_id, unit_type or hold_id must be provided')
        return self


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class BookingUnitSummary(BaseModel):
    id: str
    slug: str
    name: str
    type: str

    class Config:
        from_attributes = True


class BookingResponse(BaseModel):
    id: str
    unit_id: str
    customer_id: str
    check_in: date
    check_out: date
    guests: int
    status: BookingStatus
    total_cents: int
    currency: str
    notes: Optional[str] = None
    unit: Optional[BookingUnitSummary] = None
    customer: Optional[CustomerResponse] = None
    payment: Optional[PaymentResponse] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BookingCreatedResponse(BookingResponse):
    pricing: PricingResponse
    crm_contact_id: Optional[str] = None
    crm_sync_error: Optional[str] = None
