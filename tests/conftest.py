"""Pytest configuration and shared fixtures."""

import threading
import time
from datetime import date, datetime, timedelta, timezone

import pytest

from equity_scheduler.domain.models import Holiday, Participant
from equity_scheduler.errors import HolidaySourceError
from equity_scheduler.services.holidays import HolidayCache, HolidaySource
from equity_scheduler.services.retry import RetryPolicy


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


class FakeClock:
    """Controllable clock for cache freshness tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeHolidaySource(HolidaySource):
    """In-memory holiday source that records calls.

    ``failures`` is the number of calls that raise before succeeding; -1 fails forever.
    """

    def __init__(self, holidays=None, failures: int = 0, fetch_delay: float = 0.0):
        self.holidays = holidays or {}
        self.failures = failures
        self.fetch_delay = fetch_delay
        self.calls = []
        self._lock = threading.Lock()

    def fetch(self, country_code, year):
        with self._lock:
            self.calls.append((country_code, year))
            should_fail = self.failures != 0
            if self.failures > 0:
                self.failures -= 1
        if self.fetch_delay:
            time.sleep(self.fetch_delay)
        if should_fail:
            raise HolidaySourceError(f"source unavailable for {country_code} {year}")
        return list(self.holidays.get((country_code, year), []))


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def sleeps():
    """Records requested backoff delays instead of sleeping."""
    return []


@pytest.fixture
def make_cache(clock, sleeps):
    def _make(source, repository=None, retry_policy=RetryPolicy()):
        return HolidayCache(source, repository, retry_policy=retry_policy, clock=clock, sleep=sleeps.append)
    return _make


@pytest.fixture
def paris():
    return Participant(name="Amelie", timezone="Europe/Paris", country_code="FR", id="p-fr")


@pytest.fixture
def new_york():
    return Participant(name="Noah", timezone="America/New_York", country_code="US", id="p-us")


@pytest.fixture
def tokyo():
    return Participant(name="Haruto", timezone="Asia/Tokyo", country_code="JP", id="p-jp")


@pytest.fixture
def bastille_day():
    return Holiday(date=date(2025, 7, 14), name="Bastille Day", country_code="FR", local_name="Fête nationale")
