"""
Tests for the Availability Service

Test Coverage:
1. Back-to-back stays do not conflict (half-open ranges)
2. Overlap in each direction, containment, enclosure
3. Only CONFIRMED bookings and live ACTIVE holds block
4. Excluding the caller's own hold or booking
5. Free date ranges between occupied periods
6. First free unit of a type
"""

import pytest
from datetime import date, timedelta

from palmaire.models import BookingStatus, HoldStatus, UnitType
from palmaire.services.availability_service import AvailabilityService, DateRange, format_period
from palmaire.utils.timeutils import utcnow


class TestFormatPeriod:
    def test_label(self):
        assert format_period(date(2031, 3, 5), date(2031, 3, 9)) == "Mar 5 - Mar 9"

    def test_label_across_months(self):
        assert format_period(date(2031, 1, 30), date(2031, 2, 2)) == "Jan 30 - Feb 2"


class TestCheckAvailability:
    """Conflicts against an existing stay of Jun 10 - Jun 15"""

    @pytest.fixture
    def unit(self, make_unit):
        return make_unit()

    @pytest.fixture
    def booked(self, unit, make_booking):
        return make_booking(unit, date(2031, 6, 10), date(2031, 6, 15))

    @pytest.mark.parametrize("check_in,check_out", [
        (date(2031, 6, 5), date(2031, 6, 10)),   # departs the day the stay arrives
        (date(2031, 6, 15), date(2031, 6, 20)),  # arrives the day the stay departs
        (date(2031, 5, 1), date(2031, 5, 5)),
    ])
    def test_no_conflict(self, db_session, unit, booked, check_in, check_out):
        result = AvailabilityService(db_session).check_availability(unit.id, check_in, check_out)
        assert result.available is True
        assert result.conflicting_bookings == []

    @pytest.mark.parametrize("check_in,check_out", [
        (date(2031, 6, 8), date(2031, 6, 11)),   # overlaps the start
        (date(2031, 6, 14), date(2031, 6, 18)),  # overlaps the end
        (date(2031, 6, 11), date(2031, 6, 13)),  # inside
        (date(2031, 6, 1), date(2031, 6, 30)),   # encloses
        (date(2031, 6, 10), date(2031, 6, 15)),  # identical
    ])
    def test_conflict(self, db_session, unit, booked, check_in, check_out):
        result = AvailabilityService(db_session).check_availability(unit.id, check_in, check_out)
        assert result.available is False
        assert result.conflicting_bookings == ["Jun 10 - Jun 15"]

    def test_other_unit_not_affected(self, db_session, booked, make_unit):
        other = make_unit()
        result = AvailabilityService(db_session).check_availability(
            other.id, date(2031, 6, 10), date(2031, 6, 15)
        )
        assert result.available is True

    def test_cancelled_booking_does_not_block(self, db_session, unit, make_booking):
        make_booking(unit, date(2031, 6, 10), date(2031, 6, 15), status=BookingStatus.CANCELLED.value)
        result = AvailabilityService(db_session).check_availability(unit.id, date(2031, 6, 10), date(2031, 6, 15))
        assert result.available is True

    def test_excluded_booking_does_not_block(self, db_session, unit, booked):
        result = AvailabilityService(db_session).check_availability(
            unit.id, date(2031, 6, 10), date(2031, 6, 15), exclude_booking_id=booked.id
        )
        assert result.available is True


class TestHoldsInAvailability:
    """Holds block only while ACTIVE and unexpired"""

    def test_active_hold_blocks(self, db_session, make_unit, make_hold):
        unit = make_unit()
        make_hold(unit, date(2031, 6, 10), date(2031, 6, 12))

        result = AvailabilityService(db_session).check_availability(unit.id, date(2031, 6, 11), date(2031, 6, 14))

        assert result.available is False
        assert result.conflicting_holds == ["Jun 10 - Jun 12"]
        assert result.conflicting_bookings == []

    def test_expired_active_hold_does_not_block(self, db_session, make_unit, make_hold):
        unit = make_unit()
        make_hold(unit, date(2031, 6, 10), date(2031, 6, 12), expires_at=utcnow() - timedelta(seconds=1))

        result = AvailabilityService(db_session).check_availability(unit.id, date(2031, 6, 10), date(2031, 6, 12))

        assert result.available is True

    def test_hold_expiry_evaluated_against_reference_time(self, db_session, make_unit, make_hold):
        unit = make_unit()
        hold = make_hold(unit, date(2031, 6, 10), date(2031, 6, 12))
        service = AvailabilityService(db_session)

        later = hold.expires_at + timedelta(seconds=1)
        assert service.check_availability(unit.id, date(2031, 6, 10), date(2031, 6, 12)).available is False
        assert service.check_availability(unit.id, date(2031, 6, 10), date(2031, 6, 12), now=later).available is True

    @pytest.mark.parametrize("status", [
        HoldStatus.CANCELLED.value,
        HoldStatus.CONVERTED.value,
        HoldStatus.EXPIRED.value,
    ])
    def test_inactive_hold_does_not_block(self, db_session, make_unit, make_hold, status):
        unit = make_unit()
        make_hold(unit, date(2031, 6, 10), date(2031, 6, 12), status=status)

        result = AvailabilityService(db_session).check_availability(unit.id, date(2031, 6, 10), date(2031, 6, 12))

        assert result.available is True

    def test_excluded_hold_does_not_block(self, db_session, make_unit, make_hold):
        unit = make_unit()
        hold = make_hold(unit, date(2031, 6, 10), date(2031, 6, 12))

        result = AvailabilityService(db_session).check_availability(
            unit.id, date(2031, 6, 10), date(2031, 6, 12), exclude_hold_id=hold.id
        )

        assert result.available is True


class TestAvailableDateRanges:
    def test_empty_window_is_one_range(self, db_session, make_unit):
        unit = make_unit()
        ranges = AvailabilityService(db_session).get_available_date_ranges(
            unit.id, date(2031, 6, 1), date(2031, 7, 1)
        )
        assert ranges == [DateRange(date(2031, 6, 1), date(2031, 7, 1))]

    def test_gaps_between_bookings_and_holds(self, db_session, make_unit, make_booking, make_hold):
        unit = make_unit()
        make_booking(unit, date(2031, 6, 5), date(2031, 6, 10))
        make_hold(unit, date(2031, 6, 20), date(2031, 6, 22))
        make_booking(unit, date(2031, 6, 28), date(2031, 7, 5))

        ranges = AvailabilityService(db_session).get_available_date_ranges(
            unit.id, date(2031, 6, 1), date(2031, 7, 1)
        )

        assert ranges == [
            DateRange(date(2031, 6, 1), date(2031, 6, 5)),
            DateRange(date(2031, 6, 10), date(2031, 6, 20)),
            DateRange(date(2031, 6, 22), date(2031, 6, 28)),
        ]

    def test_back_to_back_stays_leave_no_gap(self, db_session, make_unit, make_booking):
        unit = make_unit()
        make_booking(unit, date(2031, 6, 1), date(2031, 6, 5))
        make_booking(unit, date(2031, 6, 5), date(2031, 6, 9))

        ranges = AvailabilityService(db_session).get_available_date_ranges(
            unit.id, date(2031, 6, 1), date(2031, 6, 12)
        )

        assert ranges == [DateRange(date(2031, 6, 9), date(2031, 6, 12))]

    def test_stay_overlapping_window_start(self, db_session, make_unit, make_booking):
        unit = make_unit()
        make_booking(unit, date(2031, 5, 25), date(2031, 6, 3))

        ranges = AvailabilityService(db_session).get_available_date_ranges(
            unit.id, date(2031, 6, 1), date(2031, 6, 10)
        )

        assert ranges == [DateRange(date(2031, 6, 3), date(2031, 6, 10))]


class TestFindAvailableUnit:
    def test_first_by_name(self, db_session, make_unit):
        make_unit(name="Trailer B", type=UnitType.TRAILER.value)
        first = make_unit(name="Trailer A", type=UnitType.TRAILER.value)

        unit = AvailabilityService(db_session).find_available_unit(
            UnitType.TRAILER.value, date(2031, 6, 1), date(2031, 6, 3)
        )

        assert unit.id == first.id

    def test_none_when_all_taken(self, db_session, make_unit, make_hold):
        unit = make_unit(type=UnitType.TRAILER.value)
        make_hold(unit, date(2031, 6, 1), date(2031, 6, 3))

        assert AvailabilityService(db_session).find_available_unit(
            UnitType.TRAILER.value, date(2031, 6, 1), date(2031, 6, 3)
        ) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
