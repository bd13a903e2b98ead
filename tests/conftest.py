"""
Shared fixtures: in-memory SQLite database, API client and row factories.
"""

import itertools
import os
import sys
from datetime import timedelta

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CRM_API_KEY"] = ""
os.environ["STRIPE_SECRET_KEY"] = ""
os.environ["STRIPE_WEBHOOK_SECRET"] = ""
os.environ["LOG_JSON"] = "false"

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from palmaire.database import Base, get_db
from palmaire.main import app
from palmaire.models import (
    Unit, UnitType, RatePlan, Season, Fee, Customer,
    Booking, BookingStatus, Hold, HoldStatus,
)
from palmaire.utils.timeutils import utcnow

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """API client bound to the test session (lifespan is not run)"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_unit(db_session):
    counter = itertools.count(1)

    def _make(**overrides) -> Unit:
        n = next(counter)
        data = dict(
            slug=f"unit-{n}",
            name=f"Unit {n:02d}",
            type=UnitType.COTTAGE_1BR.value,
            capacity=4,
            beds=1,
            baths=1,
            active=True,
        )
        data.update(overrides)
        unit = Unit(**data)
        db_session.add(unit)
        db_session.commit()
        db_session.refresh(unit)
        return unit

    return _make


@pytest.fixture
def make_rate_plan(db_session):
    def _make(unit=None, category=None, **prices) -> RatePlan:
        data = dict(nightly=10000, weekly=60000, monthly=200000, four_month=700000, currency="USD")
        data.update(prices)
        plan = RatePlan(unit_id=unit.id if unit else None, category=category, **data)
        db_session.add(plan)
        db_session.commit()
        db_session.refresh(plan)
        return plan

    return _make


@pytest.fixture
def make_customer(db_session):
    counter = itertools.count(1)

    def _make(**overrides) -> Customer:
        n = next(counter)
        data = dict(first_name="Guest", last_name=str(n), email=f"guest{n}@example.com", phone="5551234567")
        data.update(overrides)
        customer = Customer(**data)
        db_session.add(customer)
        db_session.commit()
        db_session.refresh(customer)
        return customer

    return _make


@pytest.fixture
def make_booking(db_session, make_customer):
    def _make(unit, check_in, check_out, status=BookingStatus.CONFIRMED.value, customer=None, total_cents=0) -> Booking:
        customer = customer or make_customer()
        booking = Booking(
            unit_id=unit.id,
            customer_id=customer.id,
            check_in=check_in,
            check_out=check_out,
            guests=1,
            status=status,
            total_cents=total_cents,
            currency="USD",
        )
        db_session.add(booking)
        db_session.commit()
        db_session.refresh(booking)
        return booking

    return _make


@pytest.fixture
def make_hold(db_session):
    def _make(unit, check_in, check_out, status=HoldStatus.ACTIVE.value, expires_at=None) -> Hold:
        hold = Hold(
            unit_id=unit.id,
            check_in=check_in,
            check_out=check_out,
            status=status,
            expires_at=expires_at or utcnow() + timedelta(minutes=15),
        )
        db_session.add(hold)
        db_session.commit()
        db_session.refresh(hold)
        return hold

    return _make


@pytest.fixture
def make_season(db_session):
    def _make(name, start_date, end_date, discount_pct) -> Season:
        season = Season(name=name, start_date=start_date, end_date=end_date, discount_pct=discount_pct)
        db_session.add(season)
        db_session.commit()
        db_session.refresh(season)
        return season

    return _make


@pytest.fixture
def make_fee(db_session):
    def _make(name, amount, per_stay=True) -> Fee:
        fee = Fee(name=name, amount=amount, per_stay=per_stay)
        db_session.add(fee)
        db_session.commit()
        db_session.refresh(fee)
        return fee

    return _make


@pytest.fixture
def anyio_backend():
    return "asyncio"
