import uuid
import enum
from sqlalchemy import Column, String, Date, Integer, Text, ForeignKey, DateTime, Index, CheckConstraint
from sqlalchemy.orm import relationship
from ..database import Base
from ..utils.timeutils import utcnow


class BookingStatus(str, enum.Enum):
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    unit_id = Column(String(36), ForeignKey("units.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False)
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    guests = Column(Integer, nullable=False, default=1)
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value)
    total_cents = Column(Integer, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    notes = Column(Text, nullable=True)  # guest special requests

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    unit = relationship("Unit", back_populates="bookings")
    customer = relationship("Customer", back_populates="bookings")
    payment = relationship("Payment", back_populates="booking", uselist=False, cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_booking_unit_status_dates", "unit_id", "status", "check_in", "check_out"),
        CheckConstraint("check_out > check_in", name="ck_booking_dates"),
    )

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def __repr__(self):
        return f"<Booking {self.id} {self.unit_id} {self.check_in}..{self.check_out} {self.status}>"
