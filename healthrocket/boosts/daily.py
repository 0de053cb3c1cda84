"""Today's boost completions for a user."""

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from .catalog import BoostCatalog
from .dates import local_date
from .errors import DataUnavailable
from .models import DailySelection

logger = logging.getLogger(__name__)

DAILY_BOOST_CAP = 3


class DailyCompletionTracker:
    """Reads which boosts a user completed on the current reference-timezone day."""

    def __init__(
        self,
        store,
        tz: ZoneInfo,
        catalog: BoostCatalog,
        daily_cap: int = DAILY_BOOST_CAP,
    ):
        """
        Initialize tracker.

        Args:
            store: Completion store exposing list_completions_on()
            tz: Reference timezone for day boundaries
            catalog: Boost catalog used to value completions
            daily_cap: Maximum completions per user per day
        """
        self.store = store
        self.tz = tz
        self.catalog = catalog
        self.daily_cap = daily_cap

    async def today(self, user_id: str, now: datetime) -> DailySelection:
        """
        Get today's completions and remaining daily slots.

        Raises:
            ValueError: If user_id is empty or now is naive
            DataUnavailable: If the completion history cannot be read
        """
        if not user_id:
            raise ValueError("user_id is required")

        day = local_date(now, self.tz)
        completions = await self.store.list_completions_on(user_id, day)

        return DailySelection(
            user_id=user_id,
            day=day,
            completions=completions,
            remaining=max(self.daily_cap - len(completions), 0),
            fuel_points=sum(self.catalog.points_for(c.boost_id) for c in completions),
        )

    async def today_or_empty(self, user_id: str, now: datetime) -> DailySelection:
        """Like today(), but degrades to an empty, unavailable selection on read failure."""
        try:
            return await self.today(user_id, now)
        except DataUnavailable as e:
            logger.warning(f"Today's boosts unavailable for {user_id}: {e}")
            return DailySelection(
                user_id=user_id,
                day=local_date(now, self.tz),
                completions=[],
                remaining=self.daily_cap,
                available=False,
            )
