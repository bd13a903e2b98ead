"""
API endpoint tests

Test Coverage:
1. Health and root
2. Unit catalog with resolved rate plans
3. Pricing, seasons, fees
4. Availability and the availability calendar
5. Hold create / get / release
6. Booking create / get / status, validation error format
7. Admin views
8. Payment and contact endpoints when providers are not configured
9. Slow provider calls do not block other requests
"""

import asyncio
import time
import httpx
import pytest
from datetime import date, timedelta

from palmaire.database import get_db
from palmaire.main import app
from palmaire.models import BookingStatus, UnitType
from palmaire.services.booking_service import CRM_SYNC_ERROR_MESSAGE
from palmaire.services.crm_client import CRMClient


def days_from_today(days: int) -> date:
    return date.today() + timedelta(days=days)


CHECK_IN = days_from_today(10)
CHECK_OUT = days_from_today(13)


@pytest.fixture
def cottage(make_unit, make_rate_plan):
    unit = make_unit(slug="cottage-9612", name="Cottage 9612", capacity=2)
    make_rate_plan(category=UnitType.COTTAGE_1BR.value, nightly=6500, weekly=39000)
    return unit


def booking_payload(unit_id, **overrides) -> dict:
    data = {
        "unit_id": unit_id,
        "check_in": CHECK_IN.isoformat(),
        "check_out": CHECK_OUT.isoformat(),
        "guests": 2,
        "guest_name": "Ana Lopez",
        "guest_email": "Ana@Example.com",
        "guest_phone": "555-123-4567",
    }
    data.update(overrides)
    return data


class TestHealth:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_liveness(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_readiness(self, client):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["checks"]["database"]["status"] == "up"

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"
        assert response.headers["X-Content-Type-Options"] == "nosniff"


class TestUnits:
    def test_list_units_with_category_plans(self, client, cottage, make_unit, make_booking):
        make_booking(cottage, CHECK_IN, CHECK_OUT)
        make_booking(cottage, days_from_today(20), days_from_today(22), status=BookingStatus.CANCELLED.value)
        make_unit(slug="a-trailer", name="A Trailer", type=UnitType.TRAILER.value)

        response = client.get("/api/units")

        assert response.status_code == 200
        units = response.json()
        assert [u["name"] for u in units] == ["A Trailer", "Cottage 9612"]
        cottage_data = units[1]
        assert cottage_data["confirmed_bookings"] == 1
        assert cottage_data["rate_plans"][0]["nightly"] == 6500
        assert cottage_data["rate_plans"][0]["category"] == "COTTAGE_1BR"
        assert units[0]["rate_plans"] == []

    def test_get_unit_by_slug(self, client, cottage):
        response = client.get("/api/units/cottage-9612")
        assert response.status_code == 200
        assert response.json()["id"] == cottage.id

    def test_unknown_slug(self, client):
        response = client.get("/api/units/nope")
        assert response.status_code == 404
        assert response.json() == {"detail": "Unit not found"}

    def test_availability_calendar(self, client, cottage, make_booking):
        make_booking(cottage, date(2031, 6, 5), date(2031, 6, 10))

        response = client.get(
            f"/api/units/{cottage.id}/availability-calendar",
            params={"start_date": "2031-06-01", "end_date": "2031-06-15"},
        )

        assert response.status_code == 200
        assert response.json()["available_ranges"] == [
            {"start": "2031-06-01", "end": "2031-06-05"},
            {"start": "2031-06-10", "end": "2031-06-15"},
        ]

    def test_availability_calendar_bad_window(self, client, cottage):
        response = client.get(
            f"/api/units/{cottage.id}/availability-calendar",
            params={"start_date": "2031-06-15", "end_date": "2031-06-01"},
        )
        assert response.status_code == 400


class TestPricingEndpoints:
    def test_pricing(self, client, cottage, make_fee):
        make_fee("Cleaning fee", 2500)

        response = client.get("/api/pricing", params={
            "unit_id": cottage.id,
            "check_in": "2031-03-02",
            "check_out": "2031-03-09",
            "guests": 2,
        })

        assert response.status_code == 200
        body = response.json()
        assert body["rate_tier"] == "weekly"
        assert body["subtotal"] == 39000
        assert body["fees"] == [{"name": "Cleaning fee", "amount": 2500}]
        assert body["total"] == 41500

    def test_pricing_rejects_reversed_dates(self, client, cottage):
        response = client.get("/api/pricing", params={
            "unit_id": cottage.id, "check_in": "2031-03-09", "check_out": "2031-03-02",
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "Check-out date must be after check-in date"

    def test_pricing_too_many_guests(self, client, cottage):
        response = client.get("/api/pricing", params={
            "unit_id": cottage.id, "check_in": "2031-03-02", "check_out": "2031-03-04", "guests": 3,
        })
        assert response.status_code == 400

    def test_pricing_missing_params(self, client):
        response = client.get("/api/pricing")
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid request data"

    def test_pricing_by_type(self, client, cottage):
        response = client.get("/api/pricing/type", params={
            "unit_type": "COTTAGE_1BR", "check_in": "2031-03-02", "check_out": "2031-03-04",
        })
        assert response.status_code == 200
        assert response.json()["unit_id"] == cottage.id

    def test_seasons_and_fees(self, client, make_season, make_fee):
        make_season("Summer", date(2031, 5, 1), date(2031, 10, 31), 20)
        make_fee("Resort fee", 300, per_stay=False)

        seasons = client.get("/api/seasons").json()
        fees = client.get("/api/fees").json()

        assert seasons[0]["name"] == "Summer"
        assert seasons[0]["discount_pct"] == 20
        assert fees[0]["per_stay"] is False


class TestAvailabilityEndpoint:
    def test_available(self, client, cottage):
        response = client.get("/api/availability", params={
            "unit_id": cottage.id, "check_in": "2031-03-02", "check_out": "2031-03-04",
        })
        assert response.status_code == 200
        assert response.json() == {"available": True, "conflicting_bookings": [], "conflicting_holds": []}

    def test_conflict_labels(self, client, cottage, make_booking):
        make_booking(cottage, date(2031, 3, 1), date(2031, 3, 5))

        response = client.get("/api/availability", params={
            "unit_id": cottage.id, "check_in": "2031-03-02", "check_out": "2031-03-04",
        })

        assert response.json()["available"] is False
        assert response.json()["conflicting_bookings"] == ["Mar 1 - Mar 5"]

    def test_unknown_unit(self, client):
        response = client.get("/api/availability", params={
            "unit_id": "missing", "check_in": "2031-03-02", "check_out": "2031-03-04",
        })
        assert response.status_code == 404


class TestHoldEndpoints:
    def test_hold_lifecycle(self, client, cottage):
        created = client.post("/api/holds", json={
            "unit_id": cottage.id,
            "check_in": CHECK_IN.isoformat(),
            "check_out": CHECK_OUT.isoformat(),
        })
        assert created.status_code == 201
        body = created.json()
        assert body["expires_in"] == 15
        hold_id = body["hold_id"]

        fetched = client.get(f"/api/holds/{hold_id}")
        assert fetched.json()["status"] == "ACTIVE"

        released = client.delete(f"/api/holds/{hold_id}")
        assert released.status_code == 204

        assert client.get(f"/api/holds/{hold_id}").json()["status"] == "CANCELLED"

    def test_conflicting_hold(self, client, cottage):
        payload = {
            "unit_id": cottage.id,
            "check_in": CHECK_IN.isoformat(),
            "check_out": CHECK_OUT.isoformat(),
            "expiration_minutes": 10,
        }
        assert client.post("/api/holds", json=payload).status_code == 201

        response = client.post("/api/holds", json=payload)

        assert response.status_code == 400
        assert response.json()["detail"] == "Dates are not available for booking"
        assert len(response.json()["conflicts"]) == 1

    def test_hold_duration_out_of_range(self, client, cottage):
        response = client.post("/api/holds", json={
            "unit_id": cottage.id,
            "check_in": CHECK_IN.isoformat(),
            "check_out": CHECK_OUT.isoformat(),
            "expiration_minutes": 120,
        })
        assert response.status_code == 400

    def test_hold_reversed_dates(self, client, cottage):
        response = client.post("/api/holds", json={
            "unit_id": cottage.id,
            "check_in": CHECK_OUT.isoformat(),
            "check_out": CHECK_IN.isoformat(),
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid request data"

    def test_unknown_hold(self, client):
        assert client.get("/api/holds/missing").status_code == 404
        assert client.delete("/api/holds/missing").status_code == 404


class TestBookingEndpoints:
    def test_create_booking_with_hold(self, client, cottage):
        hold = client.post("/api/holds", json={
            "unit_id": cottage.id,
            "check_in": CHECK_IN.isoformat(),
            "check_out": CHECK_OUT.isoformat(),
        }).json()

        response = client.post("/api/bookings", json=booking_payload(cottage.id, hold_id=hold["hold_id"]))

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "CONFIRMED"
        assert body["total_cents"] == body["pricing"]["total"] == 19500
        assert body["customer"]["email"] == "ana@example.com"
        assert body["unit"]["slug"] == "cottage-9612"
        assert body["crm_sync_error"] is None
        assert client.get(f"/api/holds/{hold['hold_id']}").json()["status"] == "CONVERTED"

    def test_create_booking_from_hold_alone(self, client, cottage):
        hold = client.post("/api/holds", json={
            "unit_id": cottage.id,
            "check_in": CHECK_IN.isoformat(),
            "check_out": CHECK_OUT.isoformat(),
        }).json()

        response = client.post("/api/bookings", json=booking_payload(None, hold_id=hold["hold_id"]))

        assert response.status_code == 201
        assert response.json()["unit_id"] == cottage.id
        assert client.get(f"/api/holds/{hold['hold_id']}").json()["status"] == "CONVERTED"

    def test_create_booking_unknown_hold_alone(self, client, cottage):
        response = client.post("/api/bookings", json=booking_payload(None, hold_id="missing"))
        assert response.status_code == 404

    def test_create_booking_dates_taken(self, client, cottage, make_booking):
        make_booking(cottage, CHECK_IN, CHECK_OUT)

        response = client.post("/api/bookings", json=booking_payload(cottage.id))

        assert response.status_code == 400
        assert response.json()["detail"] == "Dates are no longer available"

    def test_validation_error_format(self, client):
        response = client.post("/api/bookings", json=booking_payload(None, guest_email="not-an-email"))

        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Invalid request data"
        assert isinstance(body["errors"], list) and body["errors"]

    def test_unit_type_or_hold_required(self, client):
        response = client.post("/api/bookings", json=booking_payload(None))
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid request data"

    def test_script_tags_stripped(self, client, cottage):
        response = client.post("/api/bookings", json=booking_payload(
            cottage.id, special_requests="<script>alert(1)</script>Quiet unit please"
        ))
        assert response.status_code == 201
        assert response.json()["notes"] == "Quiet unit please"

    def test_get_and_cancel_booking(self, client, cottage):
        booking_id = client.post("/api/bookings", json=booking_payload(cottage.id)).json()["id"]

        assert client.get(f"/api/bookings/{booking_id}").json()["id"] == booking_id

        response = client.patch(f"/api/bookings/{booking_id}/status", json={"status": "CANCELLED"})
        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"

    def test_invalid_status_value(self, client, cottage):
        booking_id = client.post("/api/bookings", json=booking_payload(cottage.id)).json()["id"]
        response = client.patch(f"/api/bookings/{booking_id}/status", json={"status": "PENDING"})
        assert response.status_code == 400

    def test_unknown_booking(self, client):
        assert client.get("/api/bookings/missing").status_code == 404


class TestAdminEndpoints:
    def test_paginated_bookings(self, client, cottage, make_booking):
        for offset in (0, 5, 10):
            make_booking(cottage, days_from_today(30 + offset), days_from_today(32 + offset))
        make_booking(cottage, days_from_today(60), days_from_today(62), status=BookingStatus.CANCELLED.value)

        response = client.get("/api/admin/bookings", params={"page": 1, "page_size": 2, "status": "CONFIRMED"})

        body = response.json()
        assert response.status_code == 200
        assert body["total"] == 3
        assert body["total_pages"] == 2
        assert body["has_next"] is True
        assert len(body["items"]) == 2
        assert body["items"][0]["unit"]["id"] == cottage.id

    def test_calendar_window(self, client, cottage, make_booking):
        make_booking(cottage, date(2031, 6, 5), date(2031, 6, 10))
        make_booking(cottage, date(2031, 7, 5), date(2031, 7, 10))

        response = client.get("/api/admin/bookings/calendar", params={"start": "2031-06-01", "end": "2031-06-30"})

        assert response.status_code == 200
        assert [b["check_in"] for b in response.json()] == ["2031-06-05"]

    def test_calendar_bad_window(self, client):
        response = client.get("/api/admin/bookings/calendar", params={"start": "2031-06-30", "end": "2031-06-01"})
        assert response.status_code == 400


class TestProviderEndpoints:
    def test_contact_without_crm(self, client):
        response = client.post("/api/contacts", json={
            "name": "Ana Lopez",
            "email": "ana@example.com",
            "phone": "5551234567",
            "message": "Do you allow long stays?",
        })
        assert response.status_code == 500
        assert response.json()["detail"] == "CRM API key not configured"

    def test_contact_validation(self, client):
        response = client.post("/api/contacts", json={"name": "A", "email": "x", "phone": "1", "message": "hi"})
        assert response.status_code == 400

    def test_payment_intent_without_provider(self, client):
        response = client.post("/api/payment-intents", json={"amount": 19500})
        assert response.status_code == 500
        assert response.json()["detail"] == "Payment provider not configured"

    def test_stripe_webhook_without_secret(self, client):
        response = client.post("/api/webhooks/stripe", content=b"{}", headers={"Stripe-Signature": "t=1,v1=x"})
        assert response.status_code == 500


class TestBlockingProviderCalls:
    """Slow CRM calls run off the event loop"""

    @pytest.mark.anyio
    async def test_slow_crm_does_not_delay_other_requests(self, db_session, cottage, monkeypatch):
        def slow_crm(request):
            time.sleep(1)
            return httpx.Response(503, text="unavailable")

        monkeypatch.setattr(
            "palmaire.services.booking_service.CRMClient",
            lambda: CRMClient(
                api_key="test-key",
                base_urls=["https://crm.example.com"],
                transport=httpx.MockTransport(slow_crm),
            ),
        )
        app.dependency_overrides[get_db] = lambda: db_session

        async def timed_liveness(api):
            await asyncio.sleep(0.2)
            start = time.monotonic()
            response = await api.get("/health")
            return response, time.monotonic() - start

        try:
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as api:
                booking, (health, latency) = await asyncio.gather(
                    api.post("/api/bookings", json=booking_payload(cottage.id)),
                    timed_liveness(api),
                )
        finally:
            app.dependency_overrides.clear()

        assert booking.status_code == 201
        assert booking.json()["crm_sync_error"] == CRM_SYNC_ERROR_MESSAGE
        assert health.status_code == 200
        assert latency < 0.5


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
