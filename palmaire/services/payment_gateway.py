"""
Payment Gateway (Stripe)

Thin wrapper over the stripe SDK:
- Payment intent create / update / retrieve / cancel
- Publishable key for the storefront
- Webhook signature verification and event handling
- Local Payment records keyed by the provider's intent id

Stripe errors are re-raised as PaymentGatewayError.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import stripe
from sqlalchemy.orm import Session

from ..config import settings
from ..models.booking import Booking, BookingStatus
from ..models.payment import Payment, PaymentStatus
from .availability_service import AvailabilityService
from .exceptions import InvalidRequestError, PaymentGatewayError

logger = logging.getLogger(__name__)

# Webhook event type -> local payment status
WEBHOOK_PAYMENT_STATUS = {
    "payment_intent.succeeded": PaymentStatus.SUCCEEDED.value,
    "payment_intent.payment_failed": PaymentStatus.FAILED.value,
    "payment_intent.canceled": PaymentStatus.CANCELED.value,
}


@dataclass
class PaymentIntentInfo:
    """The parts of a provider payment intent the API exposes"""
    id: str
    amount: int
    status: str
    currency: Optional[str] = None
    client_secret: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_intent(cls, intent) -> "PaymentIntentInfo":
        return cls(
            id=intent.id,
            amount=intent.amount,
            status=intent.status,
            currency=getattr(intent, "currency", None),
            client_secret=getattr(intent, "client_secret", None),
            metadata=dict(intent.metadata or {}),
        )


@dataclass
class WebhookResult:
    event_type: str
    handled: bool
    message: str
    booking_id: Optional[str] = None


def record_payment(
    db: Session,
    booking_id: str,
    provider_intent_id: str,
    amount_cents: int,
    status: str,
    currency: Optional[str] = None,
) -> Payment:
    """
    Create or update the Payment for an intent. Flushes but does not commit.

    A booking has at most one payment; a new intent id for a booking
    replaces the old one.
    """
    payment = db.query(Payment).filter(Payment.provider_intent_id == provider_intent_id).first()
    if payment is None:
        payment = db.query(Payment).filter(Payment.booking_id == booking_id).first()

    if payment is None:
        payment = Payment(
            booking_id=booking_id,
            provider="stripe",
            provider_intent_id=provider_intent_id,
            amount_cents=amount_cents,
            currency=(currency or settings.default_currency).upper(),
            status=status,
        )
        db.add(payment)
    else:
        payment.provider_intent_id = provider_intent_id
        payment.amount_cents = amount_cents
        payment.status = status
        if currency:
            payment.currency = currency.upper()

    db.flush()
    return payment


class StripeGateway:
    def __init__(
        self,
        db: Optional[Session] = None,
        secret_key: Optional[str] = None,
        publishable_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
    ):
        self.db = db
        self.secret_key = secret_key if secret_key is not None else settings.stripe_secret_key
        self.publishable_key = publishable_key if publishable_key is not None else settings.stripe_publishable_key
        self.webhook_secret = webhook_secret if webhook_secret is not None else settings.stripe_webhook_secret

    def _require_key(self) -> str:
        if not self.secret_key:
            raise PaymentGatewayError("Payment provider not configured")
        return self.secret_key

    def get_publishable_key(self) -> str:
        return self.publishable_key

    def create_payment_intent(
        self,
        amount: int,
        currency: Optional[str] = None,
        booking_id: Optional[str] = None,
        customer_email: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> PaymentIntentInfo:
        if not amount or amount <= 0:
            raise InvalidRequestError("Invalid amount")

        params: Dict[str, Any] = {
            "amount": amount,
            "currency": (currency or settings.default_currency).lower(),
            "automatic_payment_methods": {"enabled": True},
            "metadata": {
                **(metadata or {}),
                "bookingId": booking_id or "",
                "customerEmail": customer_email or "",
            },
        }
        if customer_email:
            params["receipt_email"] = customer_email

        try:
            intent = stripe.PaymentIntent.create(api_key=self._require_key(), **params)
        except stripe.StripeError as e:
            logger.error("Failed to create payment intent: %s", e)
            raise PaymentGatewayError("Failed to create payment intent") from e

        logger.info("Created payment intent %s for %s cents", intent.id, amount)
        return PaymentIntentInfo.from_intent(intent)

    def update_payment_intent(
        self,
        intent_id: str,
        amount: Optional[int] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> PaymentIntentInfo:
        updates: Dict[str, Any] = {}
        if amount is not None:
            if amount <= 0:
                raise InvalidRequestError("Invalid amount")
            updates["amount"] = amount
        if metadata:
            updates["metadata"] = metadata

        try:
            intent = stripe.PaymentIntent.modify(intent_id, api_key=self._require_key(), **updates)
        except stripe.StripeError as e:
            logger.error("Failed to update payment intent %s: %s", intent_id, e)
            raise PaymentGatewayError("Failed to update payment intent") from e
        return PaymentIntentInfo.from_intent(intent)

    def retrieve_payment_intent(self, intent_id: str) -> PaymentIntentInfo:
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id, api_key=self._require_key())
        except stripe.StripeError as e:
            logger.error("Failed to retrieve payment intent %s: %s", intent_id, e)
            raise PaymentGatewayError("Failed to retrieve payment intent") from e
        return PaymentIntentInfo.from_intent(intent)

    def cancel_payment_intent(self, intent_id: str) -> PaymentIntentInfo:
        try:
            intent = stripe.PaymentIntent.cancel(intent_id, api_key=self._require_key())
        except stripe.StripeError as e:
            logger.error("Failed to cancel payment intent %s: %s", intent_id, e)
            raise PaymentGatewayError("Failed to cancel payment intent") from e
        return PaymentIntentInfo.from_intent(intent)

    # ========== Webhooks ==========

    def parse_webhook(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """Verify the Stripe-Signature header and decode the event"""
        if not self.webhook_secret:
            raise PaymentGatewayError("Webhook secret not configured")
        if not signature:
            raise InvalidRequestError("Missing Stripe-Signature header")

        body = payload.decode("utf-8")
        try:
            stripe.WebhookSignature.verify_header(body, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            logger.warning("Rejected webhook with bad signature: %s", e)
            raise InvalidRequestError("Invalid webhook signature") from e

        try:
            return json.loads(body)
        except ValueError as e:
            raise InvalidRequestError("Invalid webhook payload") from e

    def handle_event(self, event: Dict[str, Any]) -> WebhookResult:
        """
        Apply a verified webhook event.

        payment_intent.succeeded / payment_failed / canceled update the
        Payment; success also confirms the booking. The booking comes from
        the intent's bookingId metadata, else from the Payment already
        recorded for the intent. Other events are acknowledged and ignored.
        """
        event_type = event.get("type", "")
        status = WEBHOOK_PAYMENT_STATUS.get(event_type)
        if status is None:
            logger.info("Unhandled webhook event type: %s", event_type)
            return WebhookResult(event_type, False, f"Ignored {event_type}")

        intent = (event.get("data") or {}).get("object") or {}
        intent_id = intent.get("id")
        if not intent_id:
            logger.error("Webhook %s has no payment intent id", event_type)
            return WebhookResult(event_type, False, "No payment intent ID in event")

        booking_id = (intent.get("metadata") or {}).get("bookingId")
        if not booking_id:
            # Intents created before checkout carry no booking id; the
            # booking recorded the intent on its pending payment
            payment = self.db.query(Payment).filter(Payment.provider_intent_id == intent_id).first()
            booking_id = payment.booking_id if payment else None
        if not booking_id:
            logger.error("No booking for payment intent %s", intent_id)
            return WebhookResult(event_type, False, "No booking ID in payment intent metadata")

        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            logger.error("Webhook %s references unknown booking %s", event_type, booking_id)
            return WebhookResult(event_type, False, "Booking not found", booking_id)

        record_payment(
            self.db,
            booking_id=booking.id,
            provider_intent_id=intent_id,
            amount_cents=intent.get("amount") or 0,
            status=status,
            currency=intent.get("currency"),
        )

        if status == PaymentStatus.SUCCEEDED.value:
            self._confirm_booking(booking)

        self.db.commit()
        logger.info("Payment %s for booking %s", status, booking.id)
        return WebhookResult(event_type, True, f"Handled {event_type}", booking.id)

    def _confirm_booking(self, booking: Booking):
        if booking.status == BookingStatus.CONFIRMED.value:
            return

        availability = AvailabilityService(self.db).check_availability(
            booking.unit_id, booking.check_in, booking.check_out, exclude_booking_id=booking.id
        )
        if not availability.available:
            logger.warning(
                "Payment succeeded for booking %s but its dates are taken; leaving it %s",
                booking.id, booking.status
            )
            return

        booking.status = BookingStatus.CONFIRMED.value
