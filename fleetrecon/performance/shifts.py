# fleetrecon/performance/shifts.py

"""
Shift Segmentation Engine

No platform exports shifts. They are reconstructed from per-ride
transactions: rows are sorted by (driver, plate, time) and a new shift starts
whenever the driver/vehicle pair changes or the driver was idle for longer
than the configured gap.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Protocol

from fleetrecon.core.config import settings
from fleetrecon.ingest.parsing import raw_distance, raw_trip_window


class ShiftType:
    DAY = "day"
    NIGHT = "night"


class TransactionLike(Protocol):
    driver_name: Optional[str]
    license_plate: str
    transaction_time: datetime
    amount: int
    trip_uuid: Optional[str]
    raw_data: dict


@dataclass
class Shift:
    driver_name: str
    license_plate: str
    shift_start: datetime
    shift_end: datetime
    shift_type: str
    revenue: int
    distance: int
    hours_worked: float
    trip_count: int

    def to_dict(self) -> dict:
        return {
            "driver_name": self.driver_name,
            "license_plate": self.license_plate,
            "shift_start": self.shift_start,
            "shift_end": self.shift_end,
            "shift_type": self.shift_type,
            "revenue": self.revenue,
            "distance": self.distance,
            "hours_worked": self.hours_worked,
            "trip_count": self.trip_count,
        }


@dataclass
class ShiftSummary:
    total_shifts: int = 0
    day_shifts: int = 0
    night_shifts: int = 0
    avg_shift_duration: float = 0.0
    avg_revenue_per_shift: int = 0

    def to_dict(self) -> dict:
        return {
            "total_shifts": self.total_shifts,
            "day_shifts": self.day_shifts,
            "night_shifts": self.night_shifts,
            "avg_shift_duration": self.avg_shift_duration,
            "avg_revenue_per_shift": self.avg_revenue_per_shift,
        }


def _sort_key(transaction: TransactionLike):
    return (
        transaction.driver_name,
        transaction.license_plate,
        transaction.transaction_time,
        transaction.amount,
        transaction.trip_uuid or "",
    )


def _is_day_hour(hour: int, day_start_hour: int, day_end_hour: int) -> bool:
    return day_start_hour <= hour < day_end_hour


def _build_shift(
    rows: List[TransactionLike],
    default_trip_minutes: int,
    day_start_hour: int,
    day_end_hour: int,
    tie_breaker: str,
) -> Shift:
    revenue = 0
    distance = 0
    measured = timedelta()
    has_measured_trip = False
    day_minutes = 0.0
    night_minutes = 0.0

    for row in rows:
        raw = row.raw_data or {}
        revenue += row.amount
        distance += raw_distance(raw)

        window = raw_trip_window(raw)
        if window is not None:
            start, end = window
            measured += end - start
            has_measured_trip = True
            minutes = (end - start).total_seconds() / 60
        else:
            start = row.transaction_time
            minutes = default_trip_minutes

        if _is_day_hour(start.hour, day_start_hour, day_end_hour):
            day_minutes += minutes
        else:
            night_minutes += minutes

    first_time = rows[0].transaction_time
    last_time = rows[-1].transaction_time
    worked = measured if has_measured_trip else last_time - first_time

    if day_minutes > night_minutes:
        shift_type = ShiftType.DAY
    elif night_minutes > day_minutes:
        shift_type = ShiftType.NIGHT
    else:
        shift_type = tie_breaker

    return Shift(
        driver_name=rows[0].driver_name,
        license_plate=rows[0].license_plate,
        shift_start=first_time,
        shift_end=last_time,
        shift_type=shift_type,
        revenue=revenue,
        distance=distance,
        hours_worked=round(worked.total_seconds() / 3600, 2),
        trip_count=len(rows),
    )


def segment_shifts(
    transactions: Iterable[TransactionLike],
    idle_gap: Optional[timedelta] = None,
    default_trip_minutes: Optional[int] = None,
    day_start_hour: Optional[int] = None,
    day_end_hour: Optional[int] = None,
    tie_breaker: Optional[str] = None,
) -> List[Shift]:
    """
    Cluster transactions into shifts.

    A gap strictly greater than `idle_gap` between consecutive rows of the
    same (driver, plate) starts a new shift. Rows without a driver name or
    plate cannot be attributed and are skipped. Output is ordered by driver,
    plate and start time, independent of input order.
    """
    idle_gap = idle_gap if idle_gap is not None else timedelta(hours=settings.shift_idle_gap_hours)
    default_trip_minutes = default_trip_minutes if default_trip_minutes is not None else settings.default_trip_minutes
    day_start_hour = day_start_hour if day_start_hour is not None else settings.day_shift_start_hour
    day_end_hour = day_end_hour if day_end_hour is not None else settings.day_shift_end_hour
    tie_breaker = tie_breaker or settings.shift_tie_breaker

    ordered = sorted(
        (tx for tx in transactions if tx.driver_name and tx.license_plate),
        key=_sort_key,
    )

    shifts: List[Shift] = []
    current: List[TransactionLike] = []
    for transaction in ordered:
        if current:
            previous = current[-1]
            same_key = (
                previous.driver_name == transaction.driver_name
                and previous.license_plate == transaction.license_plate
            )
            if not same_key or transaction.transaction_time - previous.transaction_time > idle_gap:
                shifts.append(_build_shift(current, default_trip_minutes, day_start_hour, day_end_hour, tie_breaker))
                current = []
        current.append(transaction)

    if current:
        shifts.append(_build_shift(current, default_trip_minutes, day_start_hour, day_end_hour, tie_breaker))
    return shifts


def summarize_shifts(shifts: List[Shift]) -> ShiftSummary:
    """Counts and averages; every field is 0 when there are no shifts"""
    if not shifts:
        return ShiftSummary()

    total = len(shifts)
    day_shifts = sum(1 for shift in shifts if shift.shift_type == ShiftType.DAY)
    return ShiftSummary(
        total_shifts=total,
        day_shifts=day_shifts,
        night_shifts=total - day_shifts,
        avg_shift_duration=round(sum(shift.hours_worked for shift in shifts) / total, 2),
        avg_revenue_per_shift=round(sum(shift.revenue for shift in shifts) / total),
    )
