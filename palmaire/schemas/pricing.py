from pydantic import BaseModel
from typing import Optional, List
from datetime import date


class FeeLineResponse(BaseModel):
    name: str
    amount: int


class PricingResponse(BaseModel):
    """Price breakdown in integer cents"""
    unit_id: str
    subtotal: int
    seasonal_discount: int
    discount_percentage: int
    season_name: Optional[str] = None
    fees: List[FeeLineResponse] = []
    total_fees: int
    total: int
    price_per_night: int
    total_nights: int
    rate_tier: str
    currency: str

    class Config:
        from_attributes = True


class SeasonResponse(BaseModel):
    id: str
    name: str
    start_date: date
    end_date: date
    discount_pct: int

    class Config:
        from_attributes = True


class FeeResponse(BaseModel):
    id: str
    name: str
    amount: int
    per_stay: bool

    class Config:
        from_attributes = True
