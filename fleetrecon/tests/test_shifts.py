# fleetrecon/tests/test_shifts.py

from datetime import datetime, timedelta
from types import SimpleNamespace

from fleetrecon.performance.shifts import ShiftType, segment_shifts, summarize_shifts

T = datetime(2024, 6, 3, 8, 0)


def ride(when, driver="Max Mustermann", plate="B-MU1234", amount=1000, raw=None, trip_uuid=None):
    return SimpleNamespace(
        driver_name=driver,
        license_plate=plate,
        transaction_time=when,
        amount=amount,
        trip_uuid=trip_uuid or f"uuid-{when.isoformat()}",
        raw_data=raw or {},
    )


class TestSegmentShifts:
    """Shift reconstruction from per-ride transactions"""

    def test_idle_gap_splits_shifts(self):
        """Test a gap longer than five hours starts a new shift"""
        rides = [ride(T), ride(T + timedelta(hours=1)), ride(T + timedelta(hours=7)),
                 ride(T + timedelta(hours=7, minutes=30))]

        shifts = segment_shifts(rides)

        assert len(shifts) == 2
        assert shifts[0].shift_start == T
        assert shifts[0].shift_end == T + timedelta(hours=1)
        assert shifts[0].trip_count == 2
        assert shifts[0].hours_worked == 1.0
        assert shifts[1].shift_start == T + timedelta(hours=7)
        assert shifts[1].hours_worked == 0.5

    def test_gap_of_exactly_five_hours_continues(self):
        shifts = segment_shifts([ride(T), ride(T + timedelta(hours=5))])

        assert len(shifts) == 1
        assert shifts[0].hours_worked == 5.0

    def test_driver_or_plate_change_splits(self):
        rides = [
            ride(T),
            ride(T + timedelta(minutes=10), plate="B-XY99"),
            ride(T + timedelta(minutes=20), driver="Anna Schmidt"),
        ]

        shifts = segment_shifts(rides)

        assert [(shift.driver_name, shift.license_plate) for shift in shifts] == [
            ("Anna Schmidt", "B-MU1234"),
            ("Max Mustermann", "B-MU1234"),
            ("Max Mustermann", "B-XY99"),
        ]

    def test_input_order_does_not_matter(self):
        rides = [ride(T + timedelta(minutes=15 * i), amount=100 + i) for i in range(12)]

        forward = [shift.to_dict() for shift in segment_shifts(rides)]
        backward = [shift.to_dict() for shift in segment_shifts(list(reversed(rides)))]

        assert forward == backward

    def test_unattributable_rows_are_skipped(self):
        shifts = segment_shifts([ride(T, driver=None), ride(T, plate="")])

        assert shifts == []

    def test_measured_ride_time_is_preferred(self):
        """Test hours come from ride start/end when the export has them"""
        raw_first = {
            "Startzeit der Fahrt": "2024-06-03 08:00:00",
            "Ankunftszeit der Fahrt": "2024-06-03 08:30:00",
            "Fahrtdistanz": "10,5",
        }
        raw_second = {
            "Startzeit der Fahrt": "2024-06-03 11:00:00",
            "Ankunftszeit der Fahrt": "2024-06-03 11:30:00",
            "Fahrtdistanz": "4",
        }

        shifts = segment_shifts([
            ride(T + timedelta(minutes=30), raw=raw_first, amount=1500),
            ride(T + timedelta(hours=3, minutes=30), raw=raw_second, amount=900),
        ])

        assert len(shifts) == 1
        assert shifts[0].hours_worked == 1.0
        assert shifts[0].distance == 1450
        assert shifts[0].revenue == 2400


class TestShiftType:
    """Day / night classification by ride minutes"""

    def test_day_and_night(self):
        day = segment_shifts([ride(T), ride(T + timedelta(hours=1))])
        night = segment_shifts([ride(datetime(2024, 6, 3, 22, 0)), ride(datetime(2024, 6, 3, 23, 0))])

        assert day[0].shift_type == ShiftType.DAY
        assert night[0].shift_type == ShiftType.NIGHT

    def test_day_window_end_is_exclusive(self):
        shifts = segment_shifts([ride(datetime(2024, 6, 3, 18, 0))])

        assert shifts[0].shift_type == ShiftType.NIGHT

    def test_tie_uses_tie_breaker(self):
        """Test equal day and night minutes resolve to the configured side"""
        rides = [ride(datetime(2024, 6, 3, 5, 0)), ride(datetime(2024, 6, 3, 7, 0))]

        assert segment_shifts(rides)[0].shift_type == ShiftType.DAY
        assert segment_shifts(rides, tie_breaker=ShiftType.NIGHT)[0].shift_type == ShiftType.NIGHT


class TestSummarizeShifts:

    def test_no_shifts(self):
        """Test the summary of nothing is all zeros"""
        summary = summarize_shifts([])

        assert summary.to_dict() == {
            "total_shifts": 0,
            "day_shifts": 0,
            "night_shifts": 0,
            "avg_shift_duration": 0.0,
            "avg_revenue_per_shift": 0,
        }

    def test_averages(self):
        rides = [
            ride(T, amount=1000), ride(T + timedelta(hours=2), amount=2000),
            ride(datetime(2024, 6, 3, 22, 0), amount=3000),
        ]

        summary = summarize_shifts(segment_shifts(rides))

        assert summary.total_shifts == 2
        assert summary.day_shifts == 1
        assert summary.night_shifts == 1
        assert summary.avg_shift_duration == 1.0
        assert summary.avg_revenue_per_shift == 3000
