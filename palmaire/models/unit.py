import uuid
import enum
from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON
from sqlalchemy.orm import relationship
from ..database import Base
from ..utils.timeutils import utcnow


class UnitType(str, enum.Enum):
    TRAILER = "TRAILER"
    COTTAGE_1BR = "COTTAGE_1BR"
    COTTAGE_2BR = "COTTAGE_2BR"
    RV_SITE = "RV_SITE"


class Unit(Base):
    """A rentable unit (cottage, trailer or RV site)"""
    __tablename__ = "units"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    slug = Column(String(100), nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=False)
    type = Column(String(30), nullable=False, index=True)
    capacity = Column(Integer, nullable=False, default=2)
    beds = Column(Integer, nullable=True)
    baths = Column(Integer, nullable=True)

    # Lists of strings
    amenities = Column(JSON, default=list)
    features = Column(JSON, default=list)
    photos = Column(JSON, default=list)

    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    rate_plans = relationship("RatePlan", back_populates="unit", cascade="all, delete-orphan")
    bookings = relationship("Booking", back_populates="unit")
    holds = relationship("Hold", back_populates="unit", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Unit {self.slug} ({self.type})>"
