import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime
from ..database import Base
from ..utils.timeutils import utcnow


class Fee(Base):
    __tablename__ = "fees"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    amount = Column(Integer, nullable=False, default=0)  # cents
    per_stay = Column(Boolean, nullable=False, default=True)  # False = charged per night

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def amount_for(self, nights: int) -> int:
        """Fee amount in cents for a stay of `nights` nights"""
        return self.amount if self.per_stay else self.amount * nights

    def __repr__(self):
        return f"<Fee {self.name} {self.amount}{'' if self.per_stay else '/night'}>"
