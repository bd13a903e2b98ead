from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..models.hold import Hold
from ..schemas.hold import HoldCreate, HoldCreatedResponse, HoldResponse
from ..services.hold_manager import HoldManager
from ..utils.rate_limiter import limiter, get_rate_limit

router = APIRouter(prefix="/api/holds", tags=["Holds"])


def hold_to_response(hold: Hold) -> HoldResponse:
    return HoldResponse(
        id=hold.id,
        unit_id=hold.unit_id,
        check_in=hold.check_in,
        check_out=hold.check_out,
        expires_at=hold.expires_at,
        status=hold.effective_status(),
        booking_id=hold.booking_id,
        created_at=hold.created_at,
    )


@router.post("", response_model=HoldCreatedResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=HoldCreatedResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit("hold_create"))
async def create_hold(
    request: Request,
    hold_data: HoldCreate,
    db: Session = Depends(get_db)
):
    """Reserve a unit's dates for a few minutes while the guest pays"""
    hold = HoldManager(db).create_hold(
        hold_data.unit_id,
        hold_data.check_in,
        hold_data.check_out,
        hold_data.expiration_minutes,
    )
    expires_in = hold_data.expiration_minutes or settings.hold_default_minutes
    return HoldCreatedResponse(hold_id=hold.id, expires_in=expires_in, expires_at=hold.expires_at)


@router.get("/{hold_id}", response_model=HoldResponse)
async def get_hold(hold_id: str, db: Session = Depends(get_db)):
    """Hold with its current status; overdue active holds read as EXPIRED"""
    return hold_to_response(HoldManager(db).get_hold(hold_id))


@router.delete("/{hold_id}", status_code=status.HTTP_204_NO_CONTENT)
async def release_hold(hold_id: str, db: Session = Depends(get_db)):
    HoldManager(db).release_hold(hold_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
