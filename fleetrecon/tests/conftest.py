# fleetrecon/tests/conftest.py

import os

# Must be set before fleetrecon.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta
from typing import Iterable, List, Sequence

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fleetrecon.core.db import Base, get_db
from fleetrecon.ingest.progress import ProgressBroker

# Import models so every table is registered with Base
import fleetrecon.records.models  # noqa: F401
import fleetrecon.sessions.models  # noqa: F401
import fleetrecon.uploads.models  # noqa: F401

SESSION_ID = "test-session"

UBER_TRIPS_HEADER = [
    "Fahrt-ID", "Vorname des Fahrers", "Nachname des Fahrers", "Kennzeichen",
    "Zeitpunkt der Fahrtbestellung", "Fahrtstatus",
]
UBER_PAYMENTS_HEADER = [
    "Name des Unternehmens", "Fahrt-UUID", "Vorname des Fahrers", "Nachname des Fahrers",
    "vs-Berichterstattung", "Beschreibung", "An dein Unternehmen gezahlt",
    "Startzeit der Fahrt", "Ankunftszeit der Fahrt", "Fahrtdistanz",
]
UBER_CAMPAIGN_HEADER = ["Kampagne", "Vorname des Fahrers", "Nachname des Fahrers", "Zeitpunkt", "Betrag"]
BOLT_TRIPS_HEADER = ["Fahrer", "Kennzeichen", "Bestellzeit", "Status", "Fahrtpreis"]
BOLT_PAYMENTS_HEADER = ["Flottenname", "Fahrer", "Datum", "Fahrt-ID", "Nettoeinnahmen", "Bruttoeinnahmen"]
BOLT_CAMPAIGN_HEADER = ["Fahrer", "Kampagne", "Datum", "Betrag"]


def build_csv(header: Sequence[str], rows: Iterable[Sequence[object]], delimiter: str = ";") -> bytes:
    """Render rows the way the platforms export them: UTF-8 with BOM"""
    lines = [delimiter.join(header)]
    for row in rows:
        lines.append(delimiter.join("" if value is None else str(value) for value in row))
    return ("\ufeff" + "\n".join(lines) + "\n").encode("utf-8")


def uber_trip_rows(
    count: int,
    plate: str = "B-MU 1234",
    start: datetime = datetime(2024, 6, 1, 8, 0),
    step: timedelta = timedelta(minutes=30),
    status: str = "completed",
    driver: Sequence[str] = ("Max", "Mustermann"),
) -> List[list]:
    return [
        [f"trip-{i}", driver[0], driver[1], plate, (start + step * i).strftime("%Y-%m-%d %H:%M:%S"), status]
        for i in range(count)
    ]


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared across connections of one test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """Database session fixture for testing"""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def broker():
    """Isolated progress broker so tests never share listeners"""
    return ProgressBroker()


@pytest.fixture
def client(db_session):
    """API client bound to the test database"""
    from fleetrecon.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with_header = TestClient(app, headers={"X-Session-Id": SESSION_ID})
    yield with_header
    app.dependency_overrides.clear()
