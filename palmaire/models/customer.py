import uuid
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from ..database import Base
from ..utils.timeutils import utcnow


class Customer(Base):
    """Guest record, one per email address"""
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), nullable=False, unique=True, index=True)  # stored lower case
    phone = Column(String(30), nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    bookings = relationship("Booking", back_populates="customer")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<Customer {self.full_name} - {self.email}>"
