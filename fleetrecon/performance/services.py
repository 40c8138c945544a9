# fleetrecon/performance/services.py

"""
Performance Service

Builds the dashboard from SQL aggregations and reconstructed shifts:
- KPIs: totals, per day, per month and derived revenue ratios
- shifts: the shift list and its summary
- driver and vehicle reports: aggregations merged with shift counts

Money is reported in cents and distance in centi-km, as stored.
"""

from datetime import date, datetime, time
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from fleetrecon.performance.exceptions import InvalidDateRangeError
from fleetrecon.performance.repository import PerformanceRepository
from fleetrecon.performance.shifts import Shift, ShiftType, segment_shifts, summarize_shifts
from fleetrecon.records.repository import RecordRepository
from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)


def resolve_date_range(
    start_date: Optional[date], end_date: Optional[date]
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Inclusive start of day to inclusive end of day"""
    if start_date and end_date and start_date > end_date:
        raise InvalidDateRangeError(f"start_date {start_date} is after end_date {end_date}")
    start = datetime.combine(start_date, time.min) if start_date else None
    end = datetime.combine(end_date, time.max) if end_date else None
    return start, end


def revenue_ratios(revenue: int, distance: int, hours: float, days: int, trips: int) -> dict:
    """Per hour / km / day / trip revenue in cents, 0 where the divisor is 0"""
    return {
        "revenue_per_hour": round(revenue / hours) if hours else 0,
        "revenue_per_km": round(revenue * 100 / distance) if distance else 0,
        "revenue_per_day": round(revenue / days) if days else 0,
        "revenue_per_trip": round(revenue / trips) if trips else 0,
    }


def roll_up_months(daily: List[dict]) -> List[dict]:
    """Sum daily rows into YYYY-MM rows, in month order"""
    months: Dict[str, dict] = {}
    for row in daily:
        key = row["day"].strftime("%Y-%m")
        month = months.setdefault(key, {
            "month": key, "revenue": 0, "distance": 0,
            "duration_seconds": 0, "trip_count": 0, "active_days": 0,
        })
        month["revenue"] += row["revenue"]
        month["distance"] += row["distance"]
        month["duration_seconds"] += row["duration_seconds"]
        month["trip_count"] += row["trip_count"]
        month["active_days"] += 1
    return [months[key] for key in sorted(months)]


def _shift_stats(shifts: List[Shift], key: Callable[[Shift], str]) -> Dict[str, dict]:
    stats: Dict[str, dict] = {}
    for shift in shifts:
        entry = stats.setdefault(key(shift), {
            "shift_count": 0, "day_shift_count": 0, "night_shift_count": 0,
            "revenue_day_shift": 0, "revenue_night_shift": 0, "hours_worked": 0.0,
        })
        entry["shift_count"] += 1
        entry["hours_worked"] += shift.hours_worked
        if shift.shift_type == ShiftType.DAY:
            entry["day_shift_count"] += 1
            entry["revenue_day_shift"] += shift.revenue
        else:
            entry["night_shift_count"] += 1
            entry["revenue_night_shift"] += shift.revenue
    return stats


class PerformanceService:
    """Service layer for the performance dashboard"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PerformanceRepository(db)
        self.record_repo = RecordRepository(db)

    def get_date_range(self, session_id: str) -> dict:
        min_date, max_date = self.repo.get_date_range(session_id)
        months = sorted({day.strftime("%Y-%m") for day in self.repo.get_active_days(session_id)})
        return {
            "min_date": min_date,
            "max_date": max_date,
            "available_months": months,
        }

    def _shifts(self, session_id: str, start: Optional[datetime], end: Optional[datetime]) -> List[Shift]:
        transactions = self.record_repo.get_trip_level_transactions(session_id, start, end)
        return segment_shifts(transactions)

    def get_shifts(self, session_id: str, start_date: Optional[date] = None, end_date: Optional[date] = None) -> dict:
        start, end = resolve_date_range(start_date, end_date)
        shifts = self._shifts(session_id, start, end)
        return {
            "shifts": [shift.to_dict() for shift in shifts],
            "summary": summarize_shifts(shifts).to_dict(),
        }

    def get_kpis(self, session_id: str, start_date: Optional[date] = None, end_date: Optional[date] = None) -> dict:
        start, end = resolve_date_range(start_date, end_date)
        totals = self.repo.get_totals(session_id, start, end)
        daily = self.repo.get_daily(session_id, start, end)
        shifts = self._shifts(session_id, start, end)

        hours = round(sum(shift.hours_worked for shift in shifts), 2)
        totals["hours_worked"] = hours
        totals.update(revenue_ratios(
            totals["revenue"], totals["distance"], hours, totals["active_days"], totals["trip_count"]
        ))

        logger.info(
            "Computed KPIs", session_id=session_id, trips=totals["trip_count"], days=len(daily),
        )
        return {
            "totals": totals,
            "daily": [
                {**row, "hours": round(row["duration_seconds"] / 3600, 2)} for row in daily
            ],
            "monthly": [
                {**row, "hours": round(row["duration_seconds"] / 3600, 2)} for row in roll_up_months(daily)
            ],
            "shift_summary": summarize_shifts(shifts).to_dict(),
        }

    def _report(
        self,
        rows: List[dict],
        shift_stats: Dict[str, dict],
        key_name: str,
    ) -> List[dict]:
        report = []
        for row in rows:
            if not row["key"]:
                continue
            stats = shift_stats.get(row["key"], {})
            hours = round(stats.get("hours_worked", 0.0), 2)
            entry = {
                key_name: row["key"],
                "revenue": row["revenue"],
                "distance": row["distance"],
                "trip_count": row["trip_count"],
                "active_days": row["active_days"],
                "hours_worked": hours,
                "shift_count": stats.get("shift_count", 0),
                "day_shift_count": stats.get("day_shift_count", 0),
                "night_shift_count": stats.get("night_shift_count", 0),
                "revenue_day_shift": stats.get("revenue_day_shift", 0),
                "revenue_night_shift": stats.get("revenue_night_shift", 0),
            }
            entry.update(revenue_ratios(
                row["revenue"], row["distance"], hours, row["active_days"], row["trip_count"]
            ))
            report.append(entry)
        return report

    def get_driver_report(self, session_id: str, start_date: Optional[date] = None, end_date: Optional[date] = None) -> List[dict]:
        start, end = resolve_date_range(start_date, end_date)
        shifts = self._shifts(session_id, start, end)
        return self._report(
            self.repo.get_by_driver(session_id, start, end),
            _shift_stats(shifts, lambda shift: shift.driver_name),
            "driver_name",
        )

    def get_vehicle_report(self, session_id: str, start_date: Optional[date] = None, end_date: Optional[date] = None) -> List[dict]:
        start, end = resolve_date_range(start_date, end_date)
        shifts = self._shifts(session_id, start, end)
        return self._report(
            self.repo.get_by_vehicle(session_id, start, end),
            _shift_stats(shifts, lambda shift: shift.license_plate),
            "license_plate",
        )
