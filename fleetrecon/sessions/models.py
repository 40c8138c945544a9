# fleetrecon/sessions/models.py

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fleetrecon.core.db import Base, TimestampMixin


class WorkSession(Base, TimestampMixin):
    """
    One operator's working dataset

    Every trip, transaction and upload is partitioned by `session_id`.
    """

    __tablename__ = "work_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    session_id: Mapped[str] = mapped_column(
        String(64), unique=True, index=True, nullable=False,
        comment="Opaque partition key sent by the client"
    )
    company_name: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True,
        comment="Fleet company name, taken from the first payment file that carries one"
    )
    current_step: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    last_activity_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, nullable=False
    )

    def __repr__(self):
        return f"<WorkSession(session_id='{self.session_id}', company='{self.company_name}')>"
