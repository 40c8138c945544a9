# fleetrecon/performance/repository.py

"""
Performance Repository - Data Access Layer

Aggregations over per-ride transactions (rows carrying a trip UUID). All
grouping happens in SQL; amounts are cents, distances centi-km.
"""

from datetime import date, datetime
from typing import List, Optional, Tuple

from sqlalchemy import distinct, func
from sqlalchemy.orm import Session

from fleetrecon.records.models import Transaction
from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)


def _as_date(value) -> date:
    """DATE() comes back as a date on MySQL and as a string on SQLite"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


class PerformanceRepository:
    """Data Access Layer for dashboard aggregations"""

    def __init__(self, db: Session):
        self.db = db

    def _filters(self, session_id: str, start: Optional[datetime], end: Optional[datetime]) -> list:
        filters = [
            Transaction.session_id == session_id,
            Transaction.trip_uuid.isnot(None),
        ]
        if start is not None:
            filters.append(Transaction.transaction_time >= start)
        if end is not None:
            filters.append(Transaction.transaction_time <= end)
        return filters

    def _measures(self):
        return (
            func.coalesce(func.sum(Transaction.amount), 0).label("revenue"),
            func.coalesce(func.sum(Transaction.distance), 0).label("distance"),
            func.coalesce(func.sum(Transaction.duration_seconds), 0).label("duration_seconds"),
            func.count(Transaction.id).label("trip_count"),
        )

    def get_totals(self, session_id: str, start: Optional[datetime], end: Optional[datetime]) -> dict:
        row = self.db.query(
            *self._measures(),
            func.count(distinct(Transaction.driver_name)).label("driver_count"),
            func.count(distinct(Transaction.license_plate)).label("vehicle_count"),
            func.count(distinct(func.date(Transaction.transaction_time))).label("active_days"),
        ).filter(*self._filters(session_id, start, end)).one()
        return {
            "revenue": int(row.revenue),
            "distance": int(row.distance),
            "duration_seconds": int(row.duration_seconds),
            "trip_count": int(row.trip_count),
            "driver_count": int(row.driver_count),
            "vehicle_count": int(row.vehicle_count),
            "active_days": int(row.active_days),
        }

    def get_daily(self, session_id: str, start: Optional[datetime], end: Optional[datetime]) -> List[dict]:
        day = func.date(Transaction.transaction_time).label("day")
        rows = self.db.query(day, *self._measures()).filter(
            *self._filters(session_id, start, end)
        ).group_by(day).order_by(day).all()
        return [
            {
                "day": _as_date(row.day),
                "revenue": int(row.revenue),
                "distance": int(row.distance),
                "duration_seconds": int(row.duration_seconds),
                "trip_count": int(row.trip_count),
            }
            for row in rows
        ]

    def _grouped(self, column, session_id: str, start: Optional[datetime], end: Optional[datetime]) -> List[dict]:
        rows = self.db.query(
            column.label("key"),
            *self._measures(),
            func.count(distinct(func.date(Transaction.transaction_time))).label("active_days"),
        ).filter(*self._filters(session_id, start, end)).group_by(column).order_by(column).all()
        return [
            {
                "key": row.key,
                "revenue": int(row.revenue),
                "distance": int(row.distance),
                "duration_seconds": int(row.duration_seconds),
                "trip_count": int(row.trip_count),
                "active_days": int(row.active_days),
            }
            for row in rows
        ]

    def get_by_driver(self, session_id: str, start: Optional[datetime], end: Optional[datetime]) -> List[dict]:
        return self._grouped(Transaction.driver_name, session_id, start, end)

    def get_by_vehicle(self, session_id: str, start: Optional[datetime], end: Optional[datetime]) -> List[dict]:
        return self._grouped(Transaction.license_plate, session_id, start, end)

    def get_date_range(self, session_id: str) -> Tuple[Optional[datetime], Optional[datetime]]:
        row = self.db.query(
            func.min(Transaction.transaction_time),
            func.max(Transaction.transaction_time),
        ).filter(*self._filters(session_id, None, None)).one()
        return row[0], row[1]

    def get_active_days(self, session_id: str) -> List[date]:
        day = func.date(Transaction.transaction_time)
        rows = self.db.query(day).filter(
            *self._filters(session_id, None, None)
        ).distinct().all()
        return sorted(_as_date(row[0]) for row in rows)
