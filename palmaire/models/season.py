import uuid
from sqlalchemy import Column, String, Integer, Date, DateTime, CheckConstraint
from ..database import Base
from ..utils.timeutils import utcnow


class Season(Base):
    """Named date range (inclusive) with a discount percentage"""
    __tablename__ = "seasons"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    discount_pct = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_season_dates"),
        CheckConstraint("discount_pct >= 0 AND discount_pct <= 100", name="ck_season_discount_range"),
    )

    def __repr__(self):
        return f"<Season {self.name} {self.start_date}..{self.end_date} -{self.discount_pct}%>"
