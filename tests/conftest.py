from collections.abc import Iterator
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from snaplink.core.config import Settings
from snaplink.core.rate_limit import limiter
from snaplink.main import create_app
from snaplink.services import MemStorage


class FakeClock:
    """Manually advanced clock for expiry and ordering tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage(clock: FakeClock) -> MemStorage:
    return MemStorage(clock=clock)


@pytest.fixture
def settings() -> Settings:
    return Settings(public_domains="", frontend_dir="", log_json=False, rate_limit_enabled=False)


@pytest.fixture
def client(storage: MemStorage, settings: Settings) -> Iterator[TestClient]:
    app = create_app(storage=storage, settings=settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def reset_limiter() -> Iterator[None]:
    """Leave the shared limiter disabled and empty after the test."""
    yield
    limiter.enabled = False
    limiter.reset()
