"""SQLite store for the append-only boost completion history."""

import asyncio
import logging
import sqlite3
from contextlib import closing
from datetime import date, datetime
from pathlib import Path

from healthrocket.boosts.errors import (
    AlreadyCompleted,
    DailyLimitExceeded,
    DataUnavailable,
    PersistenceFailure,
)
from healthrocket.boosts.models import Boost, CompletedBoost

logger = logging.getLogger(__name__)


class CompletionStore:
    """
    Completion history backed by SQLite.

    Rows are only ever inserted. The daily cap and the (user, boost, date)
    uniqueness are enforced inside a single write transaction, so two
    connections racing for the last slot cannot both succeed.
    """

    def __init__(self, db_path: str = "data/boosts.db"):
        """Initialize database."""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        # Transactions are managed explicitly in record_completion
        conn = sqlite3.connect(self.db_path, timeout=10, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self):
        """Create database tables if they don't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS completed_boosts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    boost_id TEXT NOT NULL,
                    category TEXT NOT NULL,
                    completed_at TEXT NOT NULL,
                    completed_date TEXT NOT NULL,
                    UNIQUE (user_id, boost_id, completed_date)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_completed_boosts_user_date
                ON completed_boosts (user_id, completed_date)
            """)
            conn.commit()
        logger.info(f"Database initialized at {self.db_path}")

    # Reads

    async def list_completions_on(self, user_id: str, day: date) -> list[CompletedBoost]:
        """Completions for a user on one reference-timezone date."""
        return await asyncio.to_thread(
            self._select,
            "SELECT * FROM completed_boosts WHERE user_id = ? AND completed_date = ? "
            "ORDER BY completed_at",
            (user_id, day.isoformat()),
        )

    async def list_completions_since(self, user_id: str, since: date) -> list[CompletedBoost]:
        """Completions for a user on or after a date, oldest first."""
        return await asyncio.to_thread(
            self._select,
            "SELECT * FROM completed_boosts WHERE user_id = ? AND completed_date >= ? "
            "ORDER BY completed_at",
            (user_id, since.isoformat()),
        )

    async def list_completions(self, user_id: str) -> list[CompletedBoost]:
        """Full completion history for a user, oldest first."""
        return await asyncio.to_thread(
            self._select,
            "SELECT * FROM completed_boosts WHERE user_id = ? ORDER BY completed_at",
            (user_id,),
        )

    async def list_active_dates(self, user_id: str) -> list[date]:
        """Distinct dates with at least one completion, oldest first."""
        return await asyncio.to_thread(self._select_dates, user_id)

    def _select(self, query: str, params: tuple) -> list[CompletedBoost]:
        try:
            with closing(self._connect()) as conn:
                rows = conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Failed to read completions: {e}")
            raise DataUnavailable(f"Completion history unavailable: {e}") from e
        return [_row_to_completion(row) for row in rows]

    def _select_dates(self, user_id: str) -> list[date]:
        try:
            with closing(self._connect()) as conn:
                rows = conn.execute(
                    "SELECT DISTINCT completed_date FROM completed_boosts "
                    "WHERE user_id = ? ORDER BY completed_date",
                    (user_id,),
                ).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Failed to read active dates: {e}")
            raise DataUnavailable(f"Completion history unavailable: {e}") from e
        return [date.fromisoformat(row["completed_date"]) for row in rows]

    # Writes

    async def record_completion(
        self,
        user_id: str,
        boost: Boost,
        completed_at: datetime,
        completed_date: date,
        daily_cap: int = 3,
    ) -> tuple[CompletedBoost, int]:
        """
        Atomically check the daily cap and append one completion.

        Returns:
            Tuple of (stored completion, completions for that date including it)

        Raises:
            DailyLimitExceeded: The user already has daily_cap completions that date
            AlreadyCompleted: This boost is already recorded for that date
            PersistenceFailure: The write could not be committed
        """
        return await asyncio.to_thread(
            self._insert, user_id, boost, completed_at, completed_date, daily_cap
        )

    def _insert(
        self,
        user_id: str,
        boost: Boost,
        completed_at: datetime,
        completed_date: date,
        daily_cap: int,
    ) -> tuple[CompletedBoost, int]:
        day = completed_date.isoformat()
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            raise PersistenceFailure(f"Could not open completion store: {e}") from e

        try:
            # IMMEDIATE takes the write lock before the count is read
            conn.execute("BEGIN IMMEDIATE")
            try:
                count = conn.execute(
                    "SELECT COUNT(*) FROM completed_boosts "
                    "WHERE user_id = ? AND completed_date = ?",
                    (user_id, day),
                ).fetchone()[0]
                if count >= daily_cap:
                    raise DailyLimitExceeded(
                        f"User {user_id} already completed {count} boosts on {day}"
                    )
                cursor = conn.execute(
                    """
                    INSERT INTO completed_boosts
                        (user_id, boost_id, category, completed_at, completed_date)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (user_id, boost.id, boost.category, completed_at.isoformat(), day),
                )
                conn.execute("COMMIT")
            except BaseException:
                conn.execute("ROLLBACK")
                raise
        except sqlite3.IntegrityError as e:
            raise AlreadyCompleted(
                f"Boost {boost.id} already completed by {user_id} on {day}"
            ) from e
        except sqlite3.Error as e:
            logger.error(f"Failed to record completion of {boost.id} for {user_id}: {e}")
            raise PersistenceFailure(f"Could not record completion: {e}") from e
        finally:
            conn.close()

        completion = CompletedBoost(
            user_id=user_id,
            boost_id=boost.id,
            category=boost.category,
            completed_at=completed_at,
            completed_date=completed_date,
            id=cursor.lastrowid,
        )
        logger.info(f"Recorded completion: {boost.id} for {user_id} on {day}")
        return completion, count + 1


def _row_to_completion(row: sqlite3.Row) -> CompletedBoost:
    return CompletedBoost(
        id=row["id"],
        user_id=row["user_id"],
        boost_id=row["boost_id"],
        category=row["category"],
        completed_at=datetime.fromisoformat(row["completed_at"]),
        completed_date=date.fromisoformat(row["completed_date"]),
    )
