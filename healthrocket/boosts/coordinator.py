"""Boost completion: validate, record, award, notify."""

import asyncio
import logging
import weakref
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from healthrocket.events import BOOST_COMPLETED, CompletionEvent, EventBus

from .catalog import BoostCatalog
from .daily import DailyCompletionTracker
from .dates import local_date
from .errors import (
    AlreadyCompleted,
    BoostError,
    DailyLimitExceeded,
    DataUnavailable,
)
from .models import CompletionResult
from .streak import StreakCalculator
from .weekly import WeeklyCycleTracker

logger = logging.getLogger(__name__)


class CompletionState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    RECORDING = "recording"
    COMPLETED = "completed"
    REJECTED = "rejected"


_TRANSITIONS = {
    CompletionState.IDLE: {CompletionState.VALIDATING},
    CompletionState.VALIDATING: {CompletionState.RECORDING, CompletionState.REJECTED},
    CompletionState.RECORDING: {CompletionState.COMPLETED, CompletionState.REJECTED},
    CompletionState.COMPLETED: set(),
    CompletionState.REJECTED: set(),
}


class CompletionRequest:
    """State of a single completion attempt."""

    def __init__(self, user_id: str, boost_id: str):
        self.user_id = user_id
        self.boost_id = boost_id
        self.state = CompletionState.IDLE
        self.states = [CompletionState.IDLE]
        self.error: Optional[BoostError] = None

    def advance(self, state: CompletionState):
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal transition {self.state.value} -> {state.value}")
        self.state = state
        self.states.append(state)

    def reject(self, error: BoostError) -> BoostError:
        self.advance(CompletionState.REJECTED)
        self.error = error
        error.request = self
        return error


class BoostCompletionCoordinator:
    """Runs one boost completion request end to end."""

    def __init__(
        self,
        store,
        catalog: BoostCatalog,
        daily: DailyCompletionTracker,
        weekly: WeeklyCycleTracker,
        streaks: StreakCalculator,
        bus: EventBus,
        tz: ZoneInfo,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.catalog = catalog
        self.daily = daily
        self.weekly = weekly
        self.streaks = streaks
        self.bus = bus
        self.tz = tz
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    async def complete(
        self, user_id: str, boost_id: str, now: Optional[datetime] = None
    ) -> CompletionResult:
        """
        Complete a boost for a user.

        Raises:
            BoostNotFound: Unknown boost id
            DailyLimitExceeded: User already has the daily maximum
            AlreadyCompleted: Boost already completed today
            PersistenceFailure: Completion could not be recorded
        """
        if not user_id:
            raise ValueError("user_id is required")

        now = now or self.clock()
        today = local_date(now, self.tz)
        request = CompletionRequest(user_id, boost_id)
        request.advance(CompletionState.VALIDATING)

        try:
            boost = self.catalog.get(boost_id)
        except BoostError as e:
            raise request.reject(e)

        # Serialise completions for the same user in this process; the store
        # is still the authority across processes and devices.
        async with self._lock_for(user_id):
            try:
                selection = await self.daily.today(user_id, now)
            except DataUnavailable as e:
                logger.warning(f"Pre-check skipped for {user_id}: {e}")
                selection = None

            if selection is not None:
                if len(selection.completions) >= self.daily.daily_cap:
                    logger.info(f"Daily boost limit reached for {user_id}")
                    raise request.reject(
                        DailyLimitExceeded(f"Daily limit of {self.daily.daily_cap} boosts reached")
                    )
                if boost.id in selection.boost_ids:
                    raise request.reject(
                        AlreadyCompleted(f"{boost.name} was already completed today")
                    )

            try:
                active_dates = set(await self.store.list_active_dates(user_id))
            except DataUnavailable as e:
                logger.warning(f"Streak history unavailable for {user_id}, no bonus this time: {e}")
                active_dates = None

            request.advance(CompletionState.RECORDING)
            # The write runs to the end even if this request is cancelled, and
            # the weekly cache is dropped once it has landed.
            write = asyncio.ensure_future(
                self.store.record_completion(
                    user_id, boost, now, today, daily_cap=self.daily.daily_cap
                )
            )
            write.add_done_callback(lambda _: self.weekly.invalidate(user_id))
            try:
                completion, count_today = await asyncio.shield(write)
            except asyncio.CancelledError:
                logger.warning(f"Completion of {boost.id} for {user_id} cancelled while recording")
                raise
            except BoostError as e:
                logger.warning(f"Completion of {boost.id} for {user_id} rejected: {e}")
                raise request.reject(e)

        bonus = 0
        if active_dates is None:
            streak = self.streaks.current({today}, today)
        else:
            streak = self.streaks.current(active_dates | {today}, today)
            # Only the completion that activates the day can reach a new length
            if count_today == 1:
                bonus = self.streaks.bonus_for(streak.length)

        request.advance(CompletionState.COMPLETED)
        result = CompletionResult(
            completion=completion,
            boost_points=boost.fuel_points,
            bonus_points=bonus,
            streak=streak,
            remaining=max(self.daily.daily_cap - count_today, 0),
        )

        self.weekly.invalidate(user_id)
        self.bus.publish(
            BOOST_COMPLETED,
            CompletionEvent(
                user_id=user_id,
                boost_id=boost.id,
                points_earned=result.points_earned,
                category=boost.category,
            ),
        )

        if bonus:
            logger.info(f"{user_id} reached a {streak.length}-day burn streak: +{bonus} FP")
        logger.info(
            f"{user_id} completed {boost.id}: +{result.points_earned} FP "
            f"({result.remaining} boosts left today)"
        )
        return result
