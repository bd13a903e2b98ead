"""
Rate Plan Model

Tiered prices for a unit, or for every unit of a category:
- nightly: price per night
- weekly: price per 7 nights
- monthly: price per 30 nights
- four_month: price per 120 nights

All amounts are integer cents. A plan belongs to a unit OR a category,
never both.
"""

import uuid
from sqlalchemy import Column, String, Integer, ForeignKey, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from ..database import Base
from ..utils.timeutils import utcnow


class RatePlan(Base):
    __tablename__ = "rate_plans"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    unit_id = Column(String(36), ForeignKey("units.id", ondelete="CASCADE"), nullable=True, index=True)
    category = Column(String(30), nullable=True, index=True)  # UnitType value

    nightly = Column(Integer, nullable=True)
    weekly = Column(Integer, nullable=True)
    monthly = Column(Integer, nullable=True)
    four_month = Column(Integer, nullable=True)
    currency = Column(String(3), default="USD")

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    unit = relationship("Unit", back_populates="rate_plans")

    __table_args__ = (
        CheckConstraint(
            "(unit_id IS NULL) <> (category IS NULL)",
            name="ck_rate_plan_unit_xor_category",
        ),
    )

    def __repr__(self):
        owner = self.unit_id or self.category
        return f"<RatePlan {owner} nightly={self.nightly}>"
