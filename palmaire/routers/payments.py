from fastapi import APIRouter, Depends, Request, Header
from sqlalchemy.orm import Session
from typing import Optional

from ..database import get_db
from ..schemas.payment import (
    PaymentIntentCreate,
    PaymentIntentUpdate,
    PaymentIntentResponse,
    StripeConfigResponse,
    WebhookResponse,
)
from ..services.payment_gateway import StripeGateway, PaymentIntentInfo
from ..utils.rate_limiter import limiter, get_rate_limit

router = APIRouter(prefix="/api", tags=["Payments"])


def intent_to_response(intent: PaymentIntentInfo, include_secret: bool = False) -> PaymentIntentResponse:
    return PaymentIntentResponse(
        payment_intent_id=intent.id,
        amount=intent.amount,
        status=intent.status,
        client_secret=intent.client_secret if include_secret else None,
        metadata=intent.metadata,
    )


@router.post("/payment-intents", response_model=PaymentIntentResponse)
@limiter.limit(get_rate_limit("payment_intent"))
def create_payment_intent(request: Request, intent_data: PaymentIntentCreate):
    intent = StripeGateway().create_payment_intent(
        amount=intent_data.amount,
        currency=intent_data.currency,
        booking_id=intent_data.booking_id,
        customer_email=intent_data.customer_email,
        metadata=intent_data.metadata,
    )
    return intent_to_response(intent, include_secret=True)


@router.put("/payment-intents/{intent_id}", response_model=PaymentIntentResponse)
def update_payment_intent(intent_id: str, intent_data: PaymentIntentUpdate):
    intent = StripeGateway().update_payment_intent(intent_id, intent_data.amount, intent_data.metadata)
    return intent_to_response(intent)


@router.get("/payment-intents/{intent_id}", response_model=PaymentIntentResponse)
def get_payment_intent(intent_id: str):
    return intent_to_response(StripeGateway().retrieve_payment_intent(intent_id))


@router.post("/payment-intents/{intent_id}/cancel", response_model=PaymentIntentResponse)
def cancel_payment_intent(intent_id: str):
    return intent_to_response(StripeGateway().cancel_payment_intent(intent_id))


@router.get("/stripe-config", response_model=StripeConfigResponse)
async def get_stripe_config():
    """Publishable key for the storefront's payment form"""
    return StripeConfigResponse(publishable_key=StripeGateway().get_publishable_key())


@router.post("/webhooks/stripe", response_model=WebhookResponse)
@limiter.limit(get_rate_limit("webhook"))
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
    db: Session = Depends(get_db)
):
    """Payment intent lifecycle events from Stripe (signature verified)"""
    payload = await request.body()
    gateway = StripeGateway(db)
    event = gateway.parse_webhook(payload, stripe_signature)
    result = gateway.handle_event(event)
    return WebhookResponse(handled=result.handled, message=result.message)
