# fleetrecon/uploads/models.py

"""
Upload Data Models

Every uploaded file is kept verbatim so a session can be reprocessed later
without asking the operator for the files again.
"""

from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Index, Integer, LargeBinary, String
from sqlalchemy.dialects.mysql import LONGBLOB
from sqlalchemy.orm import Mapped, mapped_column

from fleetrecon.core.db import Base, TimestampMixin


class Platform(str, PyEnum):
    """Ride-hailing platform a file was exported from"""
    UBER = "uber"
    BOLT = "bolt"


class FileType(str, PyEnum):
    """
    Kind of export

    TRIPS: one row per ordered ride
    PAYMENTS: per-ride earnings and payouts
    CAMPAIGN: incentive campaign payouts, keyed by driver
    OTHER: unrecognized header, stored but never ingested
    """
    TRIPS = "trips"
    PAYMENTS = "payments"
    CAMPAIGN = "campaign"
    OTHER = "other"


class Upload(Base, TimestampMixin):
    """Original bytes and classification of one uploaded file"""

    __tablename__ = "uploads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    session_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True,
        comment="Work session the file was uploaded into"
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    size: Mapped[int] = mapped_column(Integer, nullable=False, comment="Size in bytes")

    platform: Mapped[Optional[str]] = mapped_column(
        String(10), nullable=True,
        comment="uber | bolt, NULL when the header was not recognized"
    )
    file_type: Mapped[str] = mapped_column(
        String(10), nullable=False, default=FileType.OTHER.value,
        comment="trips | payments | campaign | other"
    )

    content: Mapped[bytes] = mapped_column(
        LargeBinary().with_variant(LONGBLOB, "mysql"), nullable=False,
        comment="Original file bytes"
    )

    __table_args__ = (
        Index("idx_upload_session_type", "session_id", "file_type"),
    )

    def __repr__(self):
        return f"<Upload(id={self.id}, filename='{self.filename}', type={self.platform}/{self.file_type})>"
