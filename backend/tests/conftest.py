"""Shared test fixtures."""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("SWEEPER_ENABLED", "false")

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app import main as main_module
from app.database import build_engine, get_db
from app.main import app
from app.models.generated import Base, Bookings
from app.services import events
from app.services.config_provider import ConfigProvider


class RecordingRedis:
    """Collects pushed events instead of talking to a server."""

    def __init__(self):
        self.lists: dict[str, list[str]] = {}

    def rpush(self, key, value):
        self.lists.setdefault(key, []).append(value)
        return len(self.lists[key])

    def ping(self):
        return True


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so that threads see the same database."""
    engine = build_engine(f"sqlite:///{tmp_path / 'booking.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    """Session over a database seeded with default configuration."""
    session = session_factory()
    ConfigProvider(session).init_defaults()
    session.commit()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    fake = RecordingRedis()
    monkeypatch.setattr(events, "redis_client", fake)
    monkeypatch.setattr(main_module, "redis_client", fake)
    return fake


@pytest.fixture
def client(session_factory, db):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_booking(db):
    """Insert a bare pending booking row (slot not claimed)."""
    def _create(client_id: int = 1, day: date = date(2024, 1, 15), start_time: str = "09:00"):
        booking = Bookings(
            client_id=client_id,
            date=day.isoformat(),
            start_time=start_time,
            end_time=start_time,
            status="pending",
            payment_status="pending",
        )
        db.add(booking)
        db.commit()
        return booking
    return _create


@pytest.fixture
def next_monday() -> date:
    """A Monday at least one day ahead, so lead time never trims it."""
    today = date.today()
    return today + timedelta(days=7 - today.weekday())
