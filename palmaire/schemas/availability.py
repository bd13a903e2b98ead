from pydantic import BaseModel
from typing import List


class AvailabilityResponse(BaseModel):
    available: bool
    conflicting_bookings: List[str] = []
    conflicting_holds: List[str] = []

    class Config:
        from_attributes = True
