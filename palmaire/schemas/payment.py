from pydantic import BaseModel, Field, EmailStr
from typing import Optional, Dict
from datetime import datetime


class PaymentResponse(BaseModel):
    id: str
    provider: str
    provider_intent_id: str
    amount_cents: int
    currency: str
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PaymentIntentCreate(BaseModel):
    amount: int = Field(..., gt=0, description="Amount in cents")
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    booking_id: Optional[str] = None
    customer_email: Optional[EmailStr] = None
    metadata: Optional[Dict[str, str]] = None


class PaymentIntentUpdate(BaseModel):
    amount: Optional[int] = Field(None, gt=0)
    metadata: Optional[Dict[str, str]] = None


class PaymentIntentResponse(BaseModel):
    payment_intent_id: str
    amount: int
    status: str
    client_secret: Optional[str] = None
    metadata: Optional[Dict[str, str]] = None


class StripeConfigResponse(BaseModel):
    publishable_key: str


class WebhookResponse(BaseModel):
    received: bool = True
    handled: bool
    message: str
