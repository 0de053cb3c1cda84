"""Component wiring for the boost service."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .boosts.board import BoostBoard
from .boosts.catalog import BoostCatalog, catalog as default_catalog
from .boosts.coordinator import BoostCompletionCoordinator
from .boosts.daily import DailyCompletionTracker
from .boosts.dates import local_date, reference_zone
from .boosts.progress import LevelProgress, fuel_points_from_history, level_for_points
from .boosts.streak import StreakCalculator
from .boosts.weekly import WeeklyCycleTracker
from .config import Settings
from .events import EventBus
from .store.database import CompletionStore

logger = logging.getLogger(__name__)


@dataclass
class BoostService:
    """Everything the HTTP layer needs, built once per process."""
    store: CompletionStore
    catalog: BoostCatalog
    daily: DailyCompletionTracker
    weekly: WeeklyCycleTracker
    streaks: StreakCalculator
    coordinator: BoostCompletionCoordinator
    bus: EventBus

    async def progress(self, user_id: str) -> tuple[int, LevelProgress]:
        """Total fuel points from boosts and the level they reach."""
        history = await self.store.list_completions(user_id)
        total = fuel_points_from_history(history, self.catalog, self.streaks)
        return total, level_for_points(total)

    async def streak(self, user_id: str, now: datetime):
        dates = await self.store.list_active_dates(user_id)
        return self.streaks.current(dates, local_date(now, self.daily.tz))

    def board(self, user_id: str) -> BoostBoard:
        """Open a boost board for one user session. Call close() when done."""
        return BoostBoard(user_id, self.daily, self.weekly, self.coordinator, self.bus)


def build_service(settings: Settings, store: Optional[CompletionStore] = None) -> BoostService:
    """Build the service graph from settings."""
    tz = reference_zone(settings.reference_timezone)
    store = store or CompletionStore(settings.database_path)
    catalog = default_catalog
    bus = EventBus()
    streaks = StreakCalculator()
    daily = DailyCompletionTracker(store, tz, catalog, daily_cap=settings.daily_boost_cap)
    weekly = WeeklyCycleTracker(store, tz, bus=bus)
    coordinator = BoostCompletionCoordinator(
        store=store,
        catalog=catalog,
        daily=daily,
        weekly=weekly,
        streaks=streaks,
        bus=bus,
        tz=tz,
    )

    logger.info(
        f"Boost service ready: {len(catalog)} boosts, timezone {settings.reference_timezone}, "
        f"{settings.daily_boost_cap} boosts per day"
    )
    return BoostService(
        store=store,
        catalog=catalog,
        daily=daily,
        weekly=weekly,
        streaks=streaks,
        coordinator=coordinator,
        bus=bus,
    )
