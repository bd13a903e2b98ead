import uuid
import enum
from sqlalchemy import Column, String, Integer, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from ..database import Base
from ..utils.timeutils import utcnow


class PaymentStatus(str, enum.Enum):
    """Mirrors the provider's payment intent lifecycle"""
    PENDING = "pending"
    REQUIRES_PAYMENT_METHOD = "requires_payment_method"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    booking_id = Column(String(36), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, unique=True)
    provider = Column(String(20), nullable=False, default="stripe")
    provider_intent_id = Column(String(255), nullable=False, unique=True, index=True)
    amount_cents = Column(Integer, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    status = Column(String(40), nullable=False, default=PaymentStatus.PENDING.value)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    booking = relationship("Booking", back_populates="payment")

    def __repr__(self):
        return f"<Payment {self.provider_intent_id} {self.status}>"
