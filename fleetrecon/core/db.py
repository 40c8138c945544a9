# fleetrecon/core/db.py

"""
Database engine, session factory and declarative base
"""

from datetime import datetime

from sqlalchemy import DateTime, create_engine, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from fleetrecon.core.config import settings

_connect_args = {"check_same_thread": False} if settings.db_url.startswith("sqlite") else {}

engine = create_engine(settings.db_url, pool_pre_ping=True, connect_args=_connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    """Creation / modification timestamps shared by all tables"""

    created_on: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), default=datetime.now,
        comment="Row creation time"
    )
    updated_on: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), default=datetime.now, onupdate=datetime.now,
        comment="Last modification time"
    )


def get_db():
    """FastAPI dependency yielding a request scoped session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
