from __future__ import annotations

import os

# Must be set before backend.app.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ["SLOTS_CACHE_ENABLED"] = "false"

import fnmatch
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.app.database import get_db
from backend.app.main import app
from backend.app.models.generated import Base
from backend.app.services.slots.models import PostModel, WeeklySchedule


WORKDAY = {"start": "09:00", "end": "18:00", "is_working_day": True}
CLOSED = {"start": "09:00", "end": "18:00", "is_working_day": False}

# Mon–Fri 09:00–18:00, weekend closed
WEEKDAYS_9_TO_18 = {
    "mon": WORKDAY,
    "tue": WORKDAY,
    "wed": WORKDAY,
    "thu": WORKDAY,
    "fri": WORKDAY,
    "sat": CLOSED,
    "sun": CLOSED,
}

WEDNESDAY = date(2025, 1, 15)
SATURDAY = date(2025, 1, 18)
SUNDAY = date(2025, 1, 19)


def next_weekday(weekday: int, start: date | None = None) -> date:
    """Nearest date (today or later) falling on `weekday` (0 = Monday)."""
    start = start or date.today()
    return start + timedelta(days=(weekday - start.weekday()) % 7)


class FakeRedis:
    """In-memory stand-in for the few Redis commands the grid cache uses."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttl: dict[str, int | None] = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ex=None):
        self.data[key] = value
        self.ttl[key] = ex
        return True

    def scan_iter(self, match=None):
        return [k for k in list(self.data) if match is None or fnmatch.fnmatch(k, match)]

    def delete(self, *keys):
        deleted = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                deleted += 1
        return deleted

    def ping(self):
        return True


@pytest.fixture
def weekly_schedule() -> WeeklySchedule:
    return WeeklySchedule.from_dict(WEEKDAYS_9_TO_18)


@pytest.fixture
def post_a() -> PostModel:
    return PostModel(id=1, name="Post A", is_active=True, category_id=1)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
