"""
Pricing Engine Service

Quotes a stay from the unit's rate plan:
- Rate tier by length of stay (nightly, weekly, monthly, four-month)
  with pro-rated remainder nights
- Best overlapping seasonal discount
- Per-stay and per-night fees

All amounts are integer cents. Intermediate values use Decimal and the
subtotal is rounded half-up once.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from ..config import settings
from ..models.fee import Fee
from ..models.rate_plan import RatePlan
from ..models.season import Season
from ..models.unit import Unit
from .availability_service import AvailabilityService
from .exceptions import InvalidRequestError, NotFoundError
from .rate_plan_resolver import resolve_rate_plan
from .stay_rules import count_nights

logger = logging.getLogger(__name__)

FOUR_MONTH_NIGHTS = 120
MONTH_NIGHTS = 30
WEEK_NIGHTS = 7


@dataclass
class FeeLine:
    name: str
    amount: int


@dataclass
class PricingResult:
    """Price breakdown for one stay on one unit"""
    unit_id: str
    subtotal: int
    seasonal_discount: int
    discount_percentage: int
    season_name: Optional[str]
    fees: List[FeeLine] = field(default_factory=list)
    total_fees: int = 0
    total: int = 0
    price_per_night: int = 0
    total_nights: int = 0
    rate_tier: str = "nightly"
    currency: str = "USD"


def round_cents(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_subtotal(plan: RatePlan, nights: int) -> Tuple[Decimal, str]:
    """
    Base price for `nights` nights and the tier used.

    Higher tiers are only used when the plan defines them. Remainder nights
    are charged at the next tier down, pro-rated per night.
    """
    nightly = Decimal(plan.nightly)

    if nights >= FOUR_MONTH_NIGHTS and plan.four_month:
        periods, remainder = divmod(nights, FOUR_MONTH_NIGHTS)
        per_night = Decimal(plan.monthly) / MONTH_NIGHTS if plan.monthly else nightly
        return periods * Decimal(plan.four_month) + remainder * per_night, "four_month"

    if nights >= MONTH_NIGHTS and plan.monthly:
        periods, remainder = divmod(nights, MONTH_NIGHTS)
        per_night = Decimal(plan.weekly) / WEEK_NIGHTS if plan.weekly else nightly
        return periods * Decimal(plan.monthly) + remainder * per_night, "monthly"

    if nights >= WEEK_NIGHTS and plan.weekly:
        periods, remainder = divmod(nights, WEEK_NIGHTS)
        return periods * Decimal(plan.weekly) + remainder * nightly, "weekly"

    return nights * nightly, "nightly"


class PricingEngine:
    """
    Pricing Formula:
    1. subtotal = tiered base price (see compute_subtotal), rounded to cents
    2. discount = round(subtotal * best_season_pct / 100)
    3. fees = sum(per_stay ? amount : amount * nights)
    4. total = subtotal - discount + fees
    """

    def __init__(self, db: Session):
        self.db = db

    def get_best_season(self, check_in: date, check_out: date) -> Optional[Season]:
        """Highest-discount season overlapping the stay (season dates inclusive)"""
        return (
            self.db.query(Season)
            .filter(or_(
                and_(Season.start_date <= check_in, Season.end_date >= check_in),
                and_(Season.start_date <= check_out, Season.end_date >= check_out),
                and_(Season.start_date >= check_in, Season.end_date <= check_out),
            ))
            .order_by(Season.discount_pct.desc(), Season.start_date)
            .first()
        )

    def get_fee_lines(self, nights: int) -> List[FeeLine]:
        fees = self.db.query(Fee).order_by(Fee.name).all()
        return [FeeLine(name=fee.name, amount=fee.amount_for(nights)) for fee in fees]

    def calculate_pricing(
        self,
        unit_id: str,
        check_in: date,
        check_out: date,
        guests: int = 1,
    ) -> PricingResult:
        unit = self.db.query(Unit).filter(Unit.id == unit_id).first()
        if not unit:
            raise NotFoundError("Unit not found")

        if guests < 1:
            raise InvalidRequestError("At least one guest is required")
        if guests > unit.capacity:
            raise InvalidRequestError(f"This unit accommodates at most {unit.capacity} guests")

        plan = resolve_rate_plan(self.db, unit)
        if not plan or not plan.nightly:
            raise NotFoundError("No rate plan found for this unit")

        nights = count_nights(check_in, check_out)

        raw_subtotal, tier = compute_subtotal(plan, nights)
        subtotal = round_cents(raw_subtotal)

        season = self.get_best_season(check_in, check_out)
        discount_pct = season.discount_pct if season else 0
        seasonal_discount = round_cents(Decimal(subtotal) * discount_pct / 100)

        fee_lines = self.get_fee_lines(nights)
        total_fees = sum(line.amount for line in fee_lines)

        result = PricingResult(
            unit_id=unit.id,
            subtotal=subtotal,
            seasonal_discount=seasonal_discount,
            discount_percentage=discount_pct,
            season_name=season.name if season else None,
            fees=fee_lines,
            total_fees=total_fees,
            total=subtotal - seasonal_discount + total_fees,
            price_per_night=round_cents(Decimal(subtotal) / nights),
            total_nights=nights,
            rate_tier=tier,
            currency=plan.currency or settings.default_currency,
        )

        logger.debug(
            "Quoted unit %s %s..%s: %s nights %s tier, total %s",
            unit.id, check_in, check_out, nights, tier, result.total
        )
        return result

    def calculate_pricing_for_type(
        self,
        unit_type: str,
        check_in: date,
        check_out: date,
        guests: int = 1,
    ) -> PricingResult:
        """Quote the first available active unit of a type"""
        count_nights(check_in, check_out)

        has_units = (
            self.db.query(Unit.id)
            .filter(Unit.type == unit_type, Unit.active.is_(True))
            .first()
        )
        if not has_units:
            raise NotFoundError(f"No units found for type {unit_type}")

        unit = AvailabilityService(self.db).find_available_unit(unit_type, check_in, check_out)
        if not unit:
            raise InvalidRequestError(f"No {unit_type} units available for the selected dates")

        return self.calculate_pricing(unit.id, check_in, check_out, guests)
