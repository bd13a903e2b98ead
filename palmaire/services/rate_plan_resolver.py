"""
Rate plan lookup: a unit's own plan wins over its category plan.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.rate_plan import RatePlan
from ..models.unit import Unit


def resolve_rate_plans(db: Session, unit: Unit) -> List[RatePlan]:
    """Unit-specific plans if any exist, otherwise the plans for the unit's category"""
    plans = (
        db.query(RatePlan)
        .filter(RatePlan.unit_id == unit.id)
        .order_by(RatePlan.created_at)
        .all()
    )
    if plans:
        return plans

    return (
        db.query(RatePlan)
        .filter(RatePlan.category == unit.type, RatePlan.unit_id.is_(None))
        .order_by(RatePlan.created_at)
        .all()
    )


def resolve_rate_plan(db: Session, unit: Unit) -> Optional[RatePlan]:
    plans = resolve_rate_plans(db, unit)
    return plans[0] if plans else None
