# fleetrecon/records/repository.py

"""
Record Repository - Data Access Layer

Handles all database operations for trips and transactions. Bulk inserts
are insert-ignore so that re-ingesting a file, or retrying a failed ingest,
never creates duplicates.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, insert, update
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from fleetrecon.records.models import COMPLETED_TRIP_STATUSES, Transaction, Trip
from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)


class RecordRepository:
    """Data Access Layer for trips and transactions"""

    def __init__(self, db: Session):
        self.db = db

    # --- BULK INSERT --- #

    def _insert_ignore_statement(self, table):
        dialect = self.db.get_bind().dialect.name
        if dialect == "mysql":
            return mysql_insert(table).prefix_with("IGNORE")
        if dialect == "postgresql":
            return pg_insert(table).on_conflict_do_nothing()
        if dialect == "sqlite":
            return sqlite_insert(table).on_conflict_do_nothing()
        logger.warning(f"No insert-ignore support for dialect '{dialect}', falling back to plain insert")
        return insert(table)

    def insert_trips(self, rows: List[dict]) -> None:
        """Insert trip rows, silently skipping (session, plate, order_time) duplicates"""
        if not rows:
            return
        self.db.execute(self._insert_ignore_statement(Trip.__table__), rows)

    def insert_transactions(self, rows: List[dict]) -> None:
        """Insert transaction rows, silently skipping (session, dedup_key) duplicates"""
        if not rows:
            return
        self.db.execute(self._insert_ignore_statement(Transaction.__table__), rows)

    # --- COUNTS --- #

    def count_trips(self, session_id: str) -> int:
        return self.db.query(func.count(Trip.id)).filter(
            Trip.session_id == session_id
        ).scalar() or 0

    def count_transactions(self, session_id: str) -> int:
        return self.db.query(func.count(Transaction.id)).filter(
            Transaction.session_id == session_id
        ).scalar() or 0

    # --- READS --- #

    def get_completed_trips(self, session_id: str) -> List[Trip]:
        return self.db.query(Trip).filter(
            Trip.session_id == session_id,
            func.lower(func.trim(Trip.trip_status)).in_(sorted(COMPLETED_TRIP_STATUSES)),
        ).all()

    def get_payout_transactions(self, session_id: str) -> List[Transaction]:
        """Transactions that are not tied to a single ride (bonuses, campaigns, adjustments)"""
        return self.db.query(Transaction).filter(
            Transaction.session_id == session_id,
            Transaction.trip_uuid.is_(None),
        ).all()

    def get_trip_level_transactions(
        self,
        session_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Transaction]:
        """Per-ride transactions, optionally limited to [start, end]"""
        query = self.db.query(Transaction).filter(
            Transaction.session_id == session_id,
            Transaction.trip_uuid.isnot(None),
        )
        if start is not None:
            query = query.filter(Transaction.transaction_time >= start)
        if end is not None:
            query = query.filter(Transaction.transaction_time <= end)
        return query.all()

    # --- CROSS REFERENCE SUPPORT --- #

    def get_plateless_transactions(self, session_id: str) -> List[Tuple[int, str, str, datetime]]:
        """(id, platform, driver_name, transaction_time) of driver keyed rows still missing a plate"""
        return self.db.query(
            Transaction.id, Transaction.platform, Transaction.driver_name, Transaction.transaction_time
        ).filter(
            Transaction.session_id == session_id,
            Transaction.license_plate == "",
            Transaction.driver_name.isnot(None),
        ).order_by(Transaction.id).all()

    def get_driver_trip_index(
        self, session_id: str
    ) -> Dict[Tuple[str, str], List[Tuple[datetime, str]]]:
        """
        Trips grouped by (platform, driver name), each list sorted by order time.

        Only rows with a driver name are returned.
        """
        rows = self.db.query(
            Trip.platform, Trip.driver_name, Trip.order_time, Trip.license_plate
        ).filter(
            Trip.session_id == session_id,
            Trip.driver_name.isnot(None),
        ).order_by(Trip.order_time).all()

        index: Dict[Tuple[str, str], List[Tuple[datetime, str]]] = {}
        for platform, driver_name, order_time, license_plate in rows:
            index.setdefault((platform, driver_name), []).append((order_time, license_plate))
        return index

    def update_transaction_plates(self, updates: Iterable[Tuple[int, str]]) -> int:
        """Set license plates by transaction id"""
        payload = [{"id": tx_id, "license_plate": plate} for tx_id, plate in updates]
        if not payload:
            return 0
        self.db.execute(update(Transaction), payload)
        return len(payload)

    # --- DELETE --- #

    def delete_by_session(self, session_id: str) -> Tuple[int, int]:
        """Delete every trip and transaction of a session"""
        transactions_deleted = self.db.query(Transaction).filter(
            Transaction.session_id == session_id
        ).delete(synchronize_session=False)
        trips_deleted = self.db.query(Trip).filter(
            Trip.session_id == session_id
        ).delete(synchronize_session=False)
        logger.info(
            "Deleted session records", session_id=session_id,
            trips=trips_deleted, transactions=transactions_deleted,
        )
        return trips_deleted, transactions_deleted
