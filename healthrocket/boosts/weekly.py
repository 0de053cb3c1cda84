"""Sunday-aligned weekly window and its completion cache."""

import logging
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from healthrocket.events import WEEK_RESET, EventBus, WeekResetEvent

from .dates import days_until_reset, week_start
from .models import CompletedBoost, WeeklyWindow

logger = logging.getLogger(__name__)


class WeeklyCycleTracker:
    """Tracks the current week and clears cached weekly completions at rollover."""

    def __init__(self, store, tz: ZoneInfo, bus: Optional[EventBus] = None):
        """
        Initialize tracker.

        Args:
            store: Completion store exposing list_completions_since()
            tz: Reference timezone for week boundaries
            bus: Optional event bus for week_reset notifications
        """
        self.store = store
        self.tz = tz
        self.bus = bus
        self.reset_count = 0
        self._current_start: Optional[datetime] = None
        self._cache: dict[str, list[CompletedBoost]] = {}

    def window(self, now: datetime) -> WeeklyWindow:
        """
        Get the weekly window containing now.

        The first read inside a new window clears the weekly cache once. A
        read from an earlier week (clock skew, late request) never resets.
        """
        start = week_start(now, self.tz)

        if self._current_start is None:
            self._current_start = start
            logger.info(f"Current week starts {start.date()}")
        elif start > self._current_start:
            self._reset(start)

        return WeeklyWindow(start=start, days_until_reset=days_until_reset(now, self.tz))

    async def weekly_completions(self, user_id: str, now: datetime) -> list[CompletedBoost]:
        """
        Completions in the current window, cached until the next reset.

        Raises:
            DataUnavailable: If the completion history cannot be read
        """
        window = self.window(now)

        # The cache only holds the current window
        current = window.start == self._current_start
        cached = self._cache.get(user_id) if current else None
        if cached is not None:
            return list(cached)

        completions = await self.store.list_completions_since(user_id, window.start_date)
        # The window may have rolled over while we were waiting on the store
        if self._current_start == window.start:
            self._cache[user_id] = completions
        return list(completions)

    def invalidate(self, user_id: Optional[str] = None):
        """Drop cached weekly completions for one user, or for everyone."""
        if user_id is None:
            self._cache.clear()
        else:
            self._cache.pop(user_id, None)

    def _reset(self, start: datetime):
        previous = self._current_start
        self._current_start = start
        self._cache.clear()
        self.reset_count += 1
        logger.info(f"Weekly reset: {previous.date()} -> {start.date()}")

        if self.bus:
            self.bus.publish(WEEK_RESET, WeekResetEvent(previous_start=previous, start=start))
