"""
Shared fixtures.

Every test gets its own in-memory SQLite database; the API client routes
``get_db`` to it and replaces the process-wide reminder scheduler with one
that never delivers anything.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import random
from collections.abc import Generator
from datetime import date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src import models  # noqa: F401  (registers tables on Base)
from src.database import Base, get_db
from src.event_settings.schemas import EventSettingsUpdate, ScheduleUpdate
from src.event_settings.service import SettingsStore
from src.tickets.registry import TicketRegistry
from src.tickets.reminder_service import ReminderScheduler

EVENT_DAY = "2025-10-31"
ADMIN_PIN = "noguchi"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def delivered() -> list:
    return []


@pytest.fixture
def scheduler(delivered) -> Generator[ReminderScheduler, None, None]:
    """Scheduler that records delivered ticket ids instead of touching the database"""
    scheduler = ReminderScheduler(deliver=delivered.append)
    yield scheduler
    scheduler.cancel_all()


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 10, 31, 8, 0)


@pytest.fixture
def small_event(db):
    """Three 10-minute slots (09:00-09:30) with room for one ticket each"""
    return SettingsStore(db).update(EventSettingsUpdate(
        slot_minutes=10,
        slot_capacity=1,
        schedule=ScheduleUpdate(date=EVENT_DAY, start="09:00", end="09:30"),
    ))


@pytest.fixture
def registry(db, scheduler, fixed_now, small_event) -> TicketRegistry:
    return TicketRegistry(
        db,
        reminders=scheduler,
        rng=random.Random(20251031),
        clock=lambda: fixed_now,
    )


@pytest.fixture
def future_day() -> str:
    return (date.today() + timedelta(days=1)).isoformat()


@pytest.fixture
def client(engine, scheduler, monkeypatch) -> Generator[TestClient, None, None]:
    from src.main import app

    testing_session = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        session = testing_session()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr("src.tickets.registry.reminder_scheduler", scheduler)
    app.dependency_overrides[get_db] = override_get_db

    # Not entered as a context manager: the lifespan would initialise the real database
    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    return {"X-Admin-Pin": ADMIN_PIN}
