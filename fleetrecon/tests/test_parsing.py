# fleetrecon/tests/test_parsing.py

from datetime import datetime
from decimal import Decimal

import pytest

from fleetrecon.ingest.parsing import (
    epoch_millis, parse_amount_cents, parse_distance, parse_timestamp,
    raw_duration_seconds, raw_trip_window,
)


class TestParseAmountCents:
    """Money strings to integer cents"""

    @pytest.mark.parametrize("value, expected", [
        ("12,50", 1250),
        ("12.50", 1250),
        ("1.234,56", 123456),
        ("1.234.567", 123456700),
        ("€ 7,00", 700),
        ("7,00 EUR", 700),
        ("-3,50", -350),
        ("(5,00)", -500),
        ("0", 0),
        (12.5, 1250),
        (3, 300),
        (Decimal("0.125"), 13),
    ])
    def test_formats(self, value, expected):
        """Test European and plain notation"""
        assert parse_amount_cents(value) == expected

    def test_rounds_half_away_from_zero(self):
        """Test sub-cent values round half away from zero"""
        assert parse_amount_cents("3,005") == 301
        assert parse_amount_cents("-3,005") == -301
        assert parse_amount_cents("3,004") == 300

    @pytest.mark.parametrize("value", [None, "", "   ", "abc", "12,5x", True])
    def test_unparseable_returns_none(self, value):
        """Test garbage never becomes zero"""
        assert parse_amount_cents(value) is None

    def test_large_sums_stay_exact(self):
        """Test summing many cent values has no floating point drift"""
        total = sum(parse_amount_cents("0,10") for _ in range(100_000))

        assert total == 1_000_000


class TestParseTimestamp:
    """Vendor timestamps to naive local datetimes"""

    @pytest.mark.parametrize("value, expected", [
        ("2024-06-03 10:15:00", datetime(2024, 6, 3, 10, 15)),
        ("2024-06-03 10:15:00.250", datetime(2024, 6, 3, 10, 15, 0, 250000)),
        ("2024-06-03T10:15:00", datetime(2024, 6, 3, 10, 15)),
        ("03.06.2024 10:15:00", datetime(2024, 6, 3, 10, 15)),
        ("03.06.2024 10:15", datetime(2024, 6, 3, 10, 15)),
        ("03.06.2024", datetime(2024, 6, 3)),
        ("2024-06-03 10:15", datetime(2024, 6, 3, 10, 15)),
        ("2024-06-03 10:15:00 +0200 CEST", datetime(2024, 6, 3, 10, 15)),
    ])
    def test_vendor_formats(self, value, expected):
        """Test all known export formats"""
        assert parse_timestamp(value) == expected

    def test_utc_is_converted_to_local_time(self):
        """Test aware timestamps land in Europe/Berlin wall-clock time"""
        assert parse_timestamp("2024-06-03T08:15:00Z") == datetime(2024, 6, 3, 10, 15)
        assert parse_timestamp("2024-01-15T08:15:00+00:00") == datetime(2024, 1, 15, 9, 15)

    def test_result_is_naive(self):
        """Test stored timestamps never carry an offset"""
        assert parse_timestamp("2024-06-03T08:15:00Z").tzinfo is None

    @pytest.mark.parametrize("value", [None, "", "   ", "not a date"])
    def test_unparseable_returns_none(self, value):
        """Test garbage timestamps are rejected"""
        assert parse_timestamp(value) is None

    def test_epoch_millis(self):
        assert epoch_millis(datetime(1970, 1, 1, 0, 0, 1)) == 1000


class TestRawFields:
    """Typed values read from the raw CSV payload"""

    @pytest.mark.parametrize("value, expected", [
        ("5,2", 520),
        ("5.25", 525),
        ("12 km", 1200),
        ("", 0),
        (None, 0),
        ("n/a", 0),
    ])
    def test_parse_distance(self, value, expected):
        """Test distances are centi-km and 0 when not numeric"""
        assert parse_distance(value) == expected

    def test_trip_window_and_duration(self):
        """Test ride start and end give the measured duration"""
        raw = {
            "Startzeit der Fahrt": "2024-06-03 10:00:00",
            "Ankunftszeit der Fahrt": "2024-06-03 10:25:30",
        }

        assert raw_trip_window(raw) == (datetime(2024, 6, 3, 10, 0), datetime(2024, 6, 3, 10, 25, 30))
        assert raw_duration_seconds(raw) == 1530

    def test_trip_window_requires_ordered_bounds(self):
        """Test a missing or reversed window is ignored"""
        assert raw_trip_window({"Startzeit der Fahrt": "2024-06-03 10:00:00"}) is None
        assert raw_duration_seconds({
            "Startzeit der Fahrt": "2024-06-03 11:00:00",
            "Ankunftszeit der Fahrt": "2024-06-03 10:00:00",
        }) is None
