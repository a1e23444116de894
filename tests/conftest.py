import os

import pytest

from orderdesk.core.config import get_settings
from orderdesk.services.api import reset_order_api
from orderdesk.services.api.mock import MockOrderApi
from orderdesk.services.storage.memory import MemorySessionStorage


# Tests always run against the in-memory services
os.environ.setdefault("ENV_MODE", "development")


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings and clients so env changes in a test take effect."""
    get_settings.cache_clear()
    reset_order_api()
    yield
    get_settings.cache_clear()
    reset_order_api()


class FakeClock:
    """Epoch-milliseconds clock the test moves by hand."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> MemorySessionStorage:
    return MemorySessionStorage()


@pytest.fixture
def api() -> MockOrderApi:
    """Mock order server that never fails and answers immediately."""
    return MockOrderApi(failure_rate=0.0, min_latency=0.0, max_latency=0.0)
