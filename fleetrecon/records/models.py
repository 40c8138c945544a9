# fleetrecon/records/models.py

"""
Trip and Transaction Data Models

This module defines the two canonical record types produced by ingest:
1. Trip: one ordered ride from a platform trip log
2. Transaction: one monetary row from a payment or campaign report

Timestamps are naive wall-clock datetimes in the operator's timezone.
Money is stored as integer cents only.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON, BigInteger, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
)
from sqlalchemy.orm import Mapped, mapped_column

from fleetrecon.core.db import Base, TimestampMixin

COMPLETED_TRIP_STATUSES = frozenset({"completed", "abgeschlossen", "beendet", "finished"})


def is_completed_status(status: Optional[str]) -> bool:
    return bool(status) and status.strip().casefold() in COMPLETED_TRIP_STATUSES


class TransactionCategory:
    """Which kind of file produced a transaction"""
    PAYMENT = "payment"
    CAMPAIGN = "campaign"


class Trip(Base, TimestampMixin):
    """One ride from a platform trip export"""

    __tablename__ = "trips"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    session_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    upload_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("uploads.id", ondelete="SET NULL"), nullable=True,
        comment="Upload the row was read from"
    )

    trip_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, comment="Platform trip id when the export has one"
    )
    license_plate: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True,
        comment="Normalized plate: uppercase, no whitespace"
    )
    driver_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    order_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    trip_status: Mapped[str] = mapped_column(String(50), nullable=False)
    platform: Mapped[str] = mapped_column(String(10), nullable=False)

    raw_data: Mapped[dict] = mapped_column(JSON, nullable=False, comment="Original CSV row")

    __table_args__ = (
        UniqueConstraint("session_id", "license_plate", "order_time", name="uq_trip_session_plate_time"),
        Index("idx_trip_session_order_time", "session_id", "order_time"),
        Index("idx_trip_session_driver", "session_id", "platform", "driver_name"),
    )

    def __repr__(self):
        return f"<Trip(id={self.id}, plate='{self.license_plate}', order_time={self.order_time})>"


class Transaction(Base, TimestampMixin):
    """
    One monetary row

    Rows with a `trip_uuid` are per-ride earnings and feed the performance
    dashboard; rows without one are payouts (bonus, campaign, adjustments)
    and feed reconciliation.
    """

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    session_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    upload_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("uploads.id", ondelete="SET NULL"), nullable=True
    )

    license_plate: Mapped[str] = mapped_column(
        String(20), nullable=False, default="", index=True,
        comment="Empty until the cross-reference pass fills it for driver keyed rows"
    )
    driver_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    transaction_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    amount: Mapped[int] = mapped_column(BigInteger, nullable=False, comment="Cents")
    revenue: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True, comment="Gross cents")
    fare_price: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True, comment="Fare cents")

    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    trip_uuid: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, comment="Per-ride correlation id"
    )
    platform: Mapped[str] = mapped_column(String(10), nullable=False)
    category: Mapped[str] = mapped_column(
        String(10), nullable=False, default=TransactionCategory.PAYMENT,
        comment="payment | campaign"
    )

    # Typed copies of raw fields, used for SQL side grouping
    distance: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, comment="Centi-km, 0 when unknown"
    )
    duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    dedup_key: Mapped[str] = mapped_column(
        String(300), nullable=False,
        comment="plate-epochms-cents, or ~driver-epochms-cents when plate is unknown at ingest"
    )
    raw_data: Mapped[dict] = mapped_column(JSON, nullable=False, comment="Original CSV row")

    __table_args__ = (
        UniqueConstraint("session_id", "dedup_key", name="uq_transaction_session_dedup"),
        Index("idx_transaction_session_time", "session_id", "transaction_time"),
        Index("idx_transaction_session_trip_uuid", "session_id", "trip_uuid"),
    )

    def __repr__(self):
        return (
            f"<Transaction(id={self.id}, plate='{self.license_plate}', "
            f"time={self.transaction_time}, amount={self.amount})>"
        )
