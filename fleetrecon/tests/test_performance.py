# fleetrecon/tests/test_performance.py

from datetime import date, datetime

import pytest

from fleetrecon.performance.exceptions import InvalidDateRangeError
from fleetrecon.performance.services import (
    PerformanceService, resolve_date_range, revenue_ratios, roll_up_months,
)
from fleetrecon.records.models import Transaction

SESSION = "perf"


def add_ride(db_session, when, driver, plate, amount, distance, trip_uuid, duration=None):
    db_session.add(Transaction(
        session_id=SESSION, license_plate=plate, driver_name=driver, transaction_time=when,
        amount=amount, distance=distance, duration_seconds=duration, trip_uuid=trip_uuid,
        platform="uber", category="payment",
        dedup_key=f"{plate}-{when.isoformat()}-{amount}", raw_data={},
    ))


@pytest.fixture
def service(db_session):
    """Two drivers, three shifts and one payout that must be ignored"""
    add_ride(db_session, datetime(2024, 6, 3, 8, 0), "Max Mustermann", "B-MU1234", 1000, 500, "u1", 600)
    add_ride(db_session, datetime(2024, 6, 3, 9, 0), "Max Mustermann", "B-MU1234", 2000, 700, "u2", 900)
    add_ride(db_session, datetime(2024, 6, 4, 20, 0), "Max Mustermann", "B-MU1234", 1500, 300, "u3")
    add_ride(db_session, datetime(2024, 6, 3, 22, 0), "Anna Schmidt", "B-XY99", 3000, 1000, "u4")
    add_ride(db_session, datetime(2024, 6, 5, 12, 0), "Max Mustermann", "B-MU1234", 99999, 0, None)
    db_session.commit()
    return PerformanceService(db_session)


class TestHelpers:

    def test_resolve_date_range(self):
        start, end = resolve_date_range(date(2024, 6, 3), date(2024, 6, 3))

        assert start == datetime(2024, 6, 3, 0, 0)
        assert end.date() == date(2024, 6, 3)
        assert end.hour == 23 and end.minute == 59
        assert resolve_date_range(None, None) == (None, None)

    def test_resolve_date_range_rejects_inverted_range(self):
        with pytest.raises(InvalidDateRangeError):
            resolve_date_range(date(2024, 6, 4), date(2024, 6, 3))

    def test_revenue_ratios_are_zero_safe(self):
        assert revenue_ratios(0, 0, 0, 0, 0) == {
            "revenue_per_hour": 0, "revenue_per_km": 0, "revenue_per_day": 0, "revenue_per_trip": 0,
        }
        assert revenue_ratios(1000, 500, 2.0, 2, 4) == {
            "revenue_per_hour": 500, "revenue_per_km": 200, "revenue_per_day": 500, "revenue_per_trip": 250,
        }

    def test_roll_up_months(self):
        daily = [
            {"day": date(2024, 6, 30), "revenue": 1, "distance": 2, "duration_seconds": 3, "trip_count": 1},
            {"day": date(2024, 7, 1), "revenue": 5, "distance": 0, "duration_seconds": 0, "trip_count": 2},
            {"day": date(2024, 6, 1), "revenue": 4, "distance": 1, "duration_seconds": 0, "trip_count": 1},
        ]

        months = roll_up_months(daily)

        assert [month["month"] for month in months] == ["2024-06", "2024-07"]
        assert months[0]["revenue"] == 5
        assert months[0]["active_days"] == 2
        assert months[1]["trip_count"] == 2


class TestPerformanceService:
    """Dashboard numbers over per-ride transactions"""

    def test_kpis(self, service):
        kpis = service.get_kpis(SESSION)
        totals = kpis["totals"]

        assert totals["revenue"] == 7500
        assert totals["distance"] == 2500
        assert totals["duration_seconds"] == 1500
        assert totals["trip_count"] == 4
        assert totals["driver_count"] == 2
        assert totals["vehicle_count"] == 2
        assert totals["active_days"] == 2
        assert totals["hours_worked"] == 1.0
        assert totals["revenue_per_hour"] == 7500
        assert totals["revenue_per_km"] == 300
        assert totals["revenue_per_day"] == 3750
        assert totals["revenue_per_trip"] == 1875

        assert [row["day"] for row in kpis["daily"]] == [date(2024, 6, 3), date(2024, 6, 4)]
        assert kpis["daily"][0]["revenue"] == 6000
        assert kpis["daily"][0]["trip_count"] == 3
        assert kpis["monthly"] == [{
            "month": "2024-06", "revenue": 7500, "distance": 2500, "duration_seconds": 1500,
            "trip_count": 4, "active_days": 2, "hours": 0.42,
        }]

        assert kpis["shift_summary"]["total_shifts"] == 3
        assert kpis["shift_summary"]["day_shifts"] == 1
        assert kpis["shift_summary"]["night_shifts"] == 2

    def test_kpis_date_filter(self, service):
        kpis = service.get_kpis(SESSION, date(2024, 6, 4), date(2024, 6, 4))

        assert kpis["totals"]["revenue"] == 1500
        assert kpis["totals"]["trip_count"] == 1
        assert kpis["shift_summary"]["total_shifts"] == 1

    def test_empty_session(self, service):
        kpis = service.get_kpis("nobody")

        assert kpis["totals"]["revenue"] == 0
        assert kpis["totals"]["revenue_per_hour"] == 0
        assert kpis["daily"] == []
        assert kpis["shift_summary"]["total_shifts"] == 0

    def test_date_range(self, service):
        date_range = service.get_date_range(SESSION)

        assert date_range["min_date"] == datetime(2024, 6, 3, 8, 0)
        assert date_range["max_date"] == datetime(2024, 6, 4, 20, 0)
        assert date_range["available_months"] == ["2024-06"]

    def test_shifts(self, service):
        result = service.get_shifts(SESSION)

        assert [shift["driver_name"] for shift in result["shifts"]] == [
            "Anna Schmidt", "Max Mustermann", "Max Mustermann",
        ]
        assert result["summary"]["total_shifts"] == 3

    def test_driver_report(self, service):
        report = {row["driver_name"]: row for row in service.get_driver_report(SESSION)}

        max_row = report["Max Mustermann"]
        assert max_row["revenue"] == 4500
        assert max_row["trip_count"] == 3
        assert max_row["active_days"] == 2
        assert max_row["shift_count"] == 2
        assert max_row["day_shift_count"] == 1
        assert max_row["night_shift_count"] == 1
        assert max_row["revenue_day_shift"] == 3000
        assert max_row["revenue_night_shift"] == 1500
        assert max_row["hours_worked"] == 1.0
        assert max_row["revenue_per_hour"] == 4500

        assert report["Anna Schmidt"]["night_shift_count"] == 1
        assert report["Anna Schmidt"]["revenue_per_hour"] == 0

    def test_vehicle_report(self, service):
        report = service.get_vehicle_report(SESSION)

        assert [row["license_plate"] for row in report] == ["B-MU1234", "B-XY99"]
        assert report[0]["distance"] == 1500
        assert report[1]["revenue"] == 3000

    def test_invalid_range(self, service):
        with pytest.raises(InvalidDateRangeError):
            service.get_kpis(SESSION, date(2024, 6, 5), date(2024, 6, 1))
