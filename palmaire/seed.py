"""
Seed the unit catalog, category rate plans and seasons.

    python -m palmaire.seed

Existing units (by slug), category plans and seasons (by name and start
date) are left untouched, so the script can be re-run.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from .config import settings
from .database import SessionLocal, create_tables
from .models import Unit, UnitType, RatePlan, Season
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

HOUSE_RULES = ["No pets allowed", "No smoking", "Quiet hours 10 PM - 7 AM"]
COTTAGE_AMENITIES = ["wifi", "cable-tv", "ac-heat", "parking", "full-kitchen", "ro-water", "laundry-nearby", "patio"]
TRAILER_AMENITIES = ["wifi", "cable-tv", "ac-heat", "parking", "kitchenette", "ro-water", "laundry-nearby"]

COTTAGES = [
    # slug, name, type, capacity, beds, baths, active
    ("cottage-9606", "Cottage 9606", UnitType.COTTAGE_2BR, 4, 2, 2, True),
    ("cottage-9608", "Cottage 9608 (Studio)", UnitType.COTTAGE_1BR, 2, 0, 1, True),
    ("cottage-9612", "Cottage 9612", UnitType.COTTAGE_1BR, 2, 1, 1, True),
    ("cottage-9614", "Cottage 9614 (Coming Soon)", UnitType.COTTAGE_1BR, 2, 1, 1, False),
    ("cottage-9618", "Cottage 9618", UnitType.COTTAGE_2BR, 4, 2, 1, True),
]

TRAILER_NUMBERS = [3, 5, 7, 8, 9, 10, 12, 14, 18, 20, 21, 22, 23, 24, 25, 26, 27]

# Cents: nightly, weekly, monthly, four_month
CATEGORY_RATES = {
    UnitType.COTTAGE_1BR: (6500, 39000, 150000, 560000),
    UnitType.COTTAGE_2BR: (8500, 51000, 195000, 728000),
    UnitType.TRAILER: (4500, 27000, 100000, 360000),
}


def season_calendar(year: int):
    """(name, start, end, discount_pct) for the off-peak discounts of a year"""
    return [
        ("Spring shoulder", date(year, 4, 1), date(year, 4, 30), 10),
        ("Summer", date(year, 5, 1), date(year, 10, 31), 20),
        ("Fall shoulder", date(year, 11, 1), date(year, 11, 30), 10),
    ]


def unit_catalog():
    for slug, name, unit_type, capacity, beds, baths, active in COTTAGES:
        yield dict(
            slug=slug, name=name, type=unit_type.value, capacity=capacity,
            beds=beds, baths=baths, active=active,
            amenities=list(COTTAGE_AMENITIES) + (["two-bathrooms"] if baths > 1 else []),
            features=(
                HOUSE_RULES + [f"Maximum occupancy: {capacity} guests"] if active
                else ["Unit currently under renovation", "Availability coming soon"]
            ),
            photos=[],
        )
    for number in TRAILER_NUMBERS:
        yield dict(
            slug=f"trailer-{number:02d}", name=f"5th Wheel Trailer #{number}",
            type=UnitType.TRAILER.value, capacity=2, beds=1, baths=1, active=True,
            amenities=list(TRAILER_AMENITIES),
            features=HOUSE_RULES + ["Maximum occupancy: 2 guests"],
            photos=[],
        )


def seed_database(db: Session, year: Optional[int] = None) -> dict:
    """Insert missing catalog rows. Returns counts of rows created."""
    year = year or date.today().year
    created = {"units": 0, "rate_plans": 0, "seasons": 0}

    existing_slugs = {slug for (slug,) in db.query(Unit.slug).all()}
    for data in unit_catalog():
        if data["slug"] not in existing_slugs:
            db.add(Unit(**data))
            created["units"] += 1

    for unit_type, (nightly, weekly, monthly, four_month) in CATEGORY_RATES.items():
        exists = (
            db.query(RatePlan.id)
            .filter(RatePlan.category == unit_type.value, RatePlan.unit_id.is_(None))
            .first()
        )
        if not exists:
            db.add(RatePlan(
                category=unit_type.value,
                nightly=nightly,
                weekly=weekly,
                monthly=monthly,
                four_month=four_month,
                currency=settings.default_currency,
            ))
            created["rate_plans"] += 1

    for season_year in (year, year + 1):
        for name, start, end, pct in season_calendar(season_year):
            exists = db.query(Season.id).filter(Season.name == name, Season.start_date == start).first()
            if not exists:
                db.add(Season(name=name, start_date=start, end_date=end, discount_pct=pct))
                created["seasons"] += 1

    db.commit()
    return created


def main():
    setup_logging(settings.log_level, json_format=settings.log_json)
    create_tables()
    db = SessionLocal()
    try:
        created = seed_database(db)
        logger.info("Seed complete: %s", created)
    finally:
        db.close()


if __name__ == "__main__":
    main()
