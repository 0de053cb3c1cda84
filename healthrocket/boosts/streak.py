"""Burn streak calculation from completion dates."""

from datetime import date, timedelta
from typing import Iterable, Optional

from .models import StreakState

# streak length -> bonus fuel points
MILESTONES = {3: 5, 7: 10, 21: 100}


class StreakCalculator:
    """Derives consecutive-day burn streaks. Pure, no store access."""

    def __init__(self, milestones: Optional[dict[int, int]] = None):
        self.milestones = dict(sorted((milestones or MILESTONES).items()))

    def current(self, active_dates: Iterable[date], today: date) -> StreakState:
        """
        Calculate the streak as of today.

        A day is active if it has at least one completion. Today counts only
        once it is active; until then the current streak is 0 and the run
        ending yesterday is reported as carried.

        Args:
            active_dates: Dates with at least one completion (any order, duplicates ok)
            today: Current date in the reference timezone

        Returns:
            StreakState with the next milestone still ahead
        """
        days = set(active_dates)
        yesterday = today - timedelta(days=1)

        carried = self._run_ending(days, yesterday)
        active_today = today in days
        length = carried + 1 if active_today else 0

        base = length if active_today else carried
        next_milestone = self._next_milestone(base)

        return StreakState(
            length=length,
            carried=carried,
            active_today=active_today,
            next_milestone=next_milestone,
            next_bonus=self.milestones[next_milestone] if next_milestone else None,
            days_to_milestone=next_milestone - base if next_milestone else None,
        )

    def bonus_for(self, length: int) -> int:
        """Bonus fuel points for reaching exactly this streak length."""
        return self.milestones.get(length, 0)

    def history(self, active_dates: Iterable[date]) -> dict[date, int]:
        """
        Streak length on each active date.

        Example:
            {Jan 1, Jan 2, Jan 4} -> {Jan 1: 1, Jan 2: 2, Jan 4: 1}
        """
        lengths: dict[date, int] = {}
        for day in sorted(set(active_dates)):
            previous = lengths.get(day - timedelta(days=1), 0)
            lengths[day] = previous + 1
        return lengths

    def _run_ending(self, days: set[date], last: date) -> int:
        """Count consecutive active days walking backward from last."""
        length = 0
        day = last
        while day in days:
            length += 1
            day -= timedelta(days=1)
        return length

    def _next_milestone(self, base: int) -> Optional[int]:
        for milestone in self.milestones:
            if milestone > base:
                return milestone
        return None
