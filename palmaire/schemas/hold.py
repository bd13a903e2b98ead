from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import datetime, date


class HoldCreate(BaseModel):
    unit_id: str = Field(..., min_length=1, max_length=36)
    check_in: date
    check_out: date
    expiration_minutes: Optional[int] = Field(None, description="Defaults to 15, allowed 5-60")

    @model_validator(mode='after')
    def validate_dates(self):
        if self.check_out <= self.check_in:
            raise ValueError('Check-out date must be after check-in date')
        return self


class HoldCreatedResponse(BaseModel):
    hold_id: str
    expires_in: int = Field(description="Minutes until the hold lapses")
    expires_at: datetime


class HoldResponse(BaseModel):
    id: str
    unit_id: str
    check_in: date
    check_out: date
    expires_at: datetime
    status: str
    booking_id: Optional[str] = None
    created_at: datetime
