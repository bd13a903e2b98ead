from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime, date

from ..models.unit import UnitType


class RatePlanBase(BaseModel):
    unit_id: Optional[str] = None
    category: Optional[UnitType] = None
    nightly: Optional[int] = Field(None, ge=0, description="Cents per night")
    weekly: Optional[int] = Field(None, ge=0, description="Cents per 7 nights")
    monthly: Optional[int] = Field(None, ge=0, description="Cents per 30 nights")
    four_month: Optional[int] = Field(None, ge=0, description="Cents per 120 nights")
    currency: str = "USD"

    @model_validator(mode='after')
    def validate_owner(self):
        """A plan belongs to exactly one of a unit or a category"""
        if (self.unit_id is None) == (self.category is None):
            raise ValueError('Rate plan must belong to either a unit or a category')
        return self


class RatePlanResponse(RatePlanBase):
    id: str

    class Config:
        from_attributes = True


class UnitResponse(BaseModel):
    id: str
    slug: str
    name: str
    type: UnitType
    capacity: int
    beds: Optional[int] = None
    baths: Optional[int] = None
    amenities: List[str] = []
    features: List[str] = []
    photos: List[str] = []
    active: bool = True
    rate_plans: List[RatePlanResponse] = []
    confirmed_bookings: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DateRangeResponse(BaseModel):
    start: date
    end: date


class AvailabilityCalendarResponse(BaseModel):
    unit_id: str
    start_date: date
    end_date: date
    available_ranges: List[DateRangeResponse]
