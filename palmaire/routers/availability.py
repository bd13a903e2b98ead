from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.unit import Unit
from ..schemas.availability import AvailabilityResponse
from ..services.availability_service import AvailabilityService
from ..services.exceptions import NotFoundError
from ..services.stay_rules import count_nights

router = APIRouter(prefix="/api/availability", tags=["Availability"])


@router.get("", response_model=AvailabilityResponse)
@router.get("/", response_model=AvailabilityResponse)
async def check_availability(
    unit_id: str = Query(..., min_length=1),
    check_in: date = Query(...),
    check_out: date = Query(...),
    db: Session = Depends(get_db)
):
    """Whether a unit is free, with labels for any conflicting stays"""
    count_nights(check_in, check_out)

    if not db.query(Unit.id).filter(Unit.id == unit_id).first():
        raise NotFoundError("Unit not found")

    result = AvailabilityService(db).check_availability(unit_id, check_in, check_out)
    return AvailabilityResponse(**asdict(result))
