from dataclasses import asdict
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.fee import Fee
from ..models.season import Season
from ..models.unit import UnitType
from ..schemas.pricing import PricingResponse, SeasonResponse, FeeResponse
from ..services.pricing_engine import PricingEngine

router = APIRouter(prefix="/api", tags=["Pricing"])


@router.get("/pricing", response_model=PricingResponse)
async def get_pricing(
    unit_id: str = Query(..., min_length=1),
    check_in: date = Query(...),
    check_out: date = Query(...),
    guests: int = Query(1, ge=1, le=50),
    db: Session = Depends(get_db)
):
    """Price breakdown for a stay on a specific unit"""
    result = PricingEngine(db).calculate_pricing(unit_id, check_in, check_out, guests)
    return PricingResponse(**asdict(result))


@router.get("/pricing/type", response_model=PricingResponse)
async def get_pricing_for_type(
    unit_type: UnitType = Query(...),
    check_in: date = Query(...),
    check_out: date = Query(...),
    guests: int = Query(1, ge=1, le=50),
    db: Session = Depends(get_db)
):
    """Price breakdown for the first available unit of a type"""
    result = PricingEngine(db).calculate_pricing_for_type(unit_type.value, check_in, check_out, guests)
    return PricingResponse(**asdict(result))


@router.get("/seasons", response_model=List[SeasonResponse])
async def list_seasons(db: Session = Depends(get_db)):
    return db.query(Season).order_by(Season.start_date).all()


@router.get("/fees", response_model=List[FeeResponse])
async def list_fees(db: Session = Depends(get_db)):
    return db.query(Fee).order_by(Fee.name).all()
