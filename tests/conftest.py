"""Shared fixtures for boost accounting tests."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from healthrocket.boosts.errors import DataUnavailable, PersistenceFailure
from healthrocket.config import Settings
from healthrocket.service import build_service
from healthrocket.store.database import CompletionStore

EASTERN = ZoneInfo("America/New_York")


def eastern(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    """Aware datetime in the reference timezone."""
    return datetime(year, month, day, hour, minute, tzinfo=EASTERN)


class FixedClock:
    """Settable clock for the coordinator."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FlakyStore:
    """Wraps a real store and fails reads or writes on demand."""

    def __init__(self, inner: CompletionStore):
        self.inner = inner
        self.fail_reads = False
        self.fail_writes = False
        self.reads = 0

    def _read(self):
        self.reads += 1
        if self.fail_reads:
            raise DataUnavailable("connection reset")

    async def list_completions_on(self, user_id, day):
        self._read()
        return await self.inner.list_completions_on(user_id, day)

    async def list_completions_since(self, user_id, since):
        self._read()
        return await self.inner.list_completions_since(user_id, since)

    async def list_completions(self, user_id):
        self._read()
        return await self.inner.list_completions(user_id)

    async def list_active_dates(self, user_id):
        self._read()
        return await self.inner.list_active_dates(user_id)

    async def record_completion(self, *args, **kwargs):
        if self.fail_writes:
            raise PersistenceFailure("disk I/O error")
        return await self.inner.record_completion(*args, **kwargs)


@pytest.fixture
def store(tmp_path):
    return CompletionStore(str(tmp_path / "boosts.db"))


@pytest.fixture
def flaky_store(store):
    return FlakyStore(store)


@pytest.fixture
def clock():
    # Wednesday
    return FixedClock(eastern(2025, 6, 4))


@pytest.fixture
def settings(tmp_path):
    return Settings(database_path=str(tmp_path / "boosts.db"))


@pytest.fixture
def service(settings, store, clock):
    svc = build_service(settings, store=store)
    svc.coordinator.clock = clock
    return svc


@pytest.fixture
def flaky_service(settings, flaky_store, clock):
    svc = build_service(settings, store=flaky_store)
    svc.coordinator.clock = clock
    return svc


class GatedStore:
    """Holds record_completion until the test releases it."""

    def __init__(self, inner):
        self.inner = inner
        self.entered = None
        self.gate = None
        self.recorded = False

    def __getattr__(self, name):
        return getattr(self.inner, name)

    async def record_completion(self, *args, **kwargs):
        self.entered.set()
        await self.gate.wait()
        result = await self.inner.record_completion(*args, **kwargs)
        self.recorded = True
        return result
