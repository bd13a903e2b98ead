import uuid
import enum
from datetime import datetime
from typing import Optional
from sqlalchemy import Column, String, Date, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship
from ..database import Base
from ..utils.timeutils import utcnow


class HoldStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    CONVERTED = "CONVERTED"
    CANCELLED = "CANCELLED"


class Hold(Base):
    """
    Temporary soft lock on a unit's date range while the guest pays.

    An ACTIVE hold stops blocking once `expires_at` has passed, whether or
    not the sweeper has persisted EXPIRED yet.
    """
    __tablename__ = "holds"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    unit_id = Column(String(36), ForeignKey("units.id", ondelete="CASCADE"), nullable=False)
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default=HoldStatus.ACTIVE.value)
    booking_id = Column(String(36), ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    unit = relationship("Unit", back_populates="holds")
    booking = relationship("Booking", foreign_keys=[booking_id])

    __table_args__ = (
        Index("ix_hold_unit_status_expires", "unit_id", "status", "expires_at"),
        CheckConstraint("check_out > check_in", name="ck_hold_dates"),
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at <= (now or utcnow())

    def effective_status(self, now: Optional[datetime] = None) -> str:
        """Status as seen by readers: an overdue ACTIVE hold reads as EXPIRED"""
        if self.status == HoldStatus.ACTIVE.value and self.is_expired(now):
            return HoldStatus.EXPIRED.value
        return self.status

    def __repr__(self):
        return f"<Hold {self.id} {self.unit_id} {self.check_in}..{self.check_out} {self.status}>"
