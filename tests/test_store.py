"""Tests for the SQLite completion store."""

import asyncio
import sqlite3
from datetime import date

import pytest

from healthrocket.boosts.catalog import catalog
from healthrocket.boosts.errors import (
    AlreadyCompleted,
    DailyLimitExceeded,
    DataUnavailable,
    PersistenceFailure,
)
from healthrocket.store.database import CompletionStore

from conftest import eastern

DAY = date(2025, 6, 4)


def record(store, boost_id, now=None, user_id="ava", day=DAY):
    now = now or eastern(2025, 6, 4, 9)
    return asyncio.run(store.record_completion(user_id, catalog.get(boost_id), now, day))


def test_record_and_read_back(store):
    completion, count = record(store, "sleep-104")

    assert count == 1
    assert completion.id is not None
    assert completion.category == "Sleep"

    rows = asyncio.run(store.list_completions_on("ava", DAY))
    assert len(rows) == 1
    assert rows[0].boost_id == "sleep-104"
    assert rows[0].completed_at == eastern(2025, 6, 4, 9)
    assert rows[0].completed_at.tzinfo is not None


def test_cap_enforced_per_user_and_date(store):
    for n, boost_id in enumerate(["sleep-101", "sleep-102", "sleep-103"], start=1):
        _, count = record(store, boost_id)
        assert count == n

    with pytest.raises(DailyLimitExceeded):
        record(store, "sleep-104")

    # Other users and other days are unaffected
    record(store, "sleep-104", user_id="ben")
    record(store, "sleep-104", day=date(2025, 6, 5))
    assert len(asyncio.run(store.list_completions_on("ava", DAY))) == 3


def test_duplicate_triple_rejected(store):
    record(store, "mindset-101")
    with pytest.raises(AlreadyCompleted):
        record(store, "mindset-101")
    assert len(asyncio.run(store.list_completions("ava"))) == 1


def test_cap_holds_across_store_instances(tmp_path):
    path = str(tmp_path / "shared.db")
    first = CompletionStore(path)
    second = CompletionStore(path)

    record(first, "sleep-101")
    record(second, "sleep-102")
    record(first, "sleep-103")
    with pytest.raises(DailyLimitExceeded):
        record(second, "sleep-104")


def test_since_and_active_dates(store):
    record(store, "sleep-101", eastern(2025, 5, 31, 9), day=date(2025, 5, 31))
    record(store, "sleep-101", eastern(2025, 6, 2, 9), day=date(2025, 6, 2))
    record(store, "sleep-102", eastern(2025, 6, 2, 10), day=date(2025, 6, 2))

    since = asyncio.run(store.list_completions_since("ava", date(2025, 6, 1)))
    assert [c.boost_id for c in since] == ["sleep-101", "sleep-102"]

    dates = asyncio.run(store.list_active_dates("ava"))
    assert dates == [date(2025, 5, 31), date(2025, 6, 2)]


def test_read_errors_become_data_unavailable(store):
    with sqlite3.connect(store.db_path) as conn:
        conn.execute("DROP TABLE completed_boosts")

    with pytest.raises(DataUnavailable):
        asyncio.run(store.list_completions_on("ava", DAY))
    with pytest.raises(DataUnavailable):
        asyncio.run(store.list_active_dates("ava"))


def test_write_errors_become_persistence_failure(store):
    with sqlite3.connect(store.db_path) as conn:
        conn.execute("DROP TABLE completed_boosts")

    with pytest.raises(PersistenceFailure):
        record(store, "sleep-101")


class TrackingConnection(sqlite3.Connection):
    closed = False

    def close(self):
        self.closed = True
        super().close()


def test_every_connection_is_closed(store, monkeypatch):
    opened = []

    def connect():
        conn = sqlite3.connect(store.db_path, isolation_level=None, factory=TrackingConnection)
        conn.row_factory = sqlite3.Row
        opened.append(conn)
        return conn

    monkeypatch.setattr(store, "_connect", connect)

    record(store, "sleep-101")
    asyncio.run(store.list_completions("ava"))
    asyncio.run(store.list_completions_on("ava", DAY))
    asyncio.run(store.list_active_dates("ava"))

    assert len(opened) == 4
    assert all(conn.closed for conn in opened)
