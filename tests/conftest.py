from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app
from repository import InMemoryRoomRepository
from services import ReservationService


def instant(*args) -> int:
    """Milliseconds since the epoch for a UTC wall-clock time."""
    dt = datetime(*args, tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


# Half a minute into 09:00 UTC, so "now" truncates to 09:00
NOW = instant(2030, 1, 1, 9, 0, 30) + 500


@pytest.fixture
def settings() -> Settings:
    return Settings(room_count=10, max_duration_minutes=12 * 60)


@pytest.fixture
def repo(settings: Settings) -> InMemoryRoomRepository:
    return InMemoryRoomRepository(settings.room_count)


@pytest.fixture
def service(repo: InMemoryRoomRepository, settings: Settings) -> ReservationService:
    return ReservationService(repo, settings=settings, clock=lambda: NOW)


@pytest.fixture
def client(repo: InMemoryRoomRepository, settings: Settings) -> TestClient:
    app = create_app(settings, repo=repo, clock=lambda: NOW)
    return TestClient(app)
