"""Per-user boost view state with optimistic completion."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from healthrocket.events import (
    BOOST_COMPLETED,
    WEEK_RESET,
    CompletionEvent,
    EventBus,
    WeekResetEvent,
)

from .coordinator import BoostCompletionCoordinator
from .daily import DailyCompletionTracker
from .errors import BoostError, DataUnavailable
from .models import CompletedBoost, CompletionResult
from .weekly import WeeklyCycleTracker

logger = logging.getLogger(__name__)


@dataclass
class BoardEntry:
    """A boost shown as done. Unconfirmed until the store acknowledges it."""
    boost_id: str
    completed_at: datetime
    confirmed: bool = True

    @classmethod
    def from_completion(cls, completion: CompletedBoost) -> "BoardEntry":
        return cls(boost_id=completion.boost_id, completed_at=completion.completed_at)


class BoostBoard:
    """
    Boost state for one user's session.

    Holds today's and this week's completions plus the days left until the
    weekly reset. Completions are applied optimistically and rolled back if
    rejected. After close(), results that arrive late are dropped.
    """

    def __init__(
        self,
        user_id: str,
        daily: DailyCompletionTracker,
        weekly: WeeklyCycleTracker,
        coordinator: BoostCompletionCoordinator,
        bus: EventBus,
    ):
        self.user_id = user_id
        self.daily = daily
        self.weekly = weekly
        self.coordinator = coordinator

        self.selected: list[BoardEntry] = []
        self.weekly_entries: list[BoardEntry] = []
        self.days_until_reset = 7
        self.error: Optional[str] = None
        self.stale = False
        self.closed = False

        self._pending: set[str] = set()
        self._subscriptions = [
            bus.subscribe(WEEK_RESET, self._on_week_reset),
            bus.subscribe(BOOST_COMPLETED, self._on_boost_completed),
        ]

    @property
    def remaining(self) -> int:
        return max(self.daily.daily_cap - len(self.selected), 0)

    @property
    def fuel_points_today(self) -> int:
        return sum(self.daily.catalog.points_for(e.boost_id) for e in self.selected)

    async def refresh(self, now: datetime):
        """Reload today's and this week's completions from the store."""
        if self.closed:
            return

        selection = await self.daily.today_or_empty(self.user_id, now)
        error = None if selection.available else "Could not load today's boosts"

        try:
            weekly = await self.weekly.weekly_completions(self.user_id, now)
        except DataUnavailable as e:
            logger.warning(f"Weekly boosts unavailable for {self.user_id}: {e}")
            weekly = []
            error = error or "Could not load this week's boosts"

        if self.closed:
            return

        self.selected = [BoardEntry.from_completion(c) for c in selection.completions]
        self.weekly_entries = [BoardEntry.from_completion(c) for c in weekly]
        self.days_until_reset = self.weekly.window(now).days_until_reset
        self.error = error
        self.stale = False

    async def complete(self, boost_id: str, now: datetime) -> CompletionResult:
        """
        Complete a boost, showing it immediately and reconciling with the result.

        The tentative entry is removed on any failure, including cancellation.

        Raises:
            RuntimeError: If the board has been closed
            BoostError: If the completion was rejected
        """
        if self.closed:
            raise RuntimeError("Board is closed")

        tentative = BoardEntry(boost_id=boost_id, completed_at=now, confirmed=False)
        self.selected.append(tentative)
        self.weekly_entries.append(tentative)
        self._pending.add(boost_id)

        try:
            result = await self.coordinator.complete(self.user_id, boost_id, now)
        except BaseException as e:
            if not self.closed:
                self._discard(tentative)
                if isinstance(e, BoostError):
                    self.error = e.message
            raise
        finally:
            self._pending.discard(boost_id)

        if self.closed:
            return result

        confirmed = BoardEntry.from_completion(result.completion)
        self._replace(tentative, confirmed)
        self.days_until_reset = self.weekly.window(now).days_until_reset
        self.error = None
        return result

    def close(self):
        """Detach from the event bus and ignore any in-flight results."""
        self.closed = True
        for subscription in self._subscriptions:
            subscription.unsubscribe()

    def _discard(self, entry: BoardEntry):
        self.selected = [e for e in self.selected if e is not entry]
        self.weekly_entries = [e for e in self.weekly_entries if e is not entry]

    def _replace(self, old: BoardEntry, new: BoardEntry):
        self.selected = [new if e is old else e for e in self.selected]
        self.weekly_entries = [new if e is old else e for e in self.weekly_entries]

    def _on_week_reset(self, event: WeekResetEvent):
        logger.info(f"Clearing boost board for {self.user_id} at week {event.start.date()}")
        self.selected = [e for e in self.selected if not e.confirmed]
        self.weekly_entries = [e for e in self.weekly_entries if not e.confirmed]
        self.stale = True

    def _on_boost_completed(self, event: CompletionEvent):
        # Completions from another session for the same user
        if event.user_id == self.user_id and event.boost_id not in self._pending:
            self.stale = True
