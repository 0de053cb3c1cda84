"""Data models for boosts, completions and derived views."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

CATEGORIES = ("Sleep", "Mindset", "Exercise", "Nutrition", "Biohacking")


@dataclass(frozen=True)
class Boost:
    """A catalog entry. At most one completion per user per calendar day."""
    id: str
    name: str
    category: str
    fuel_points: int  # 1-9
    tier: int  # 1 or 2
    estimated_time: str = ""


@dataclass(frozen=True)
class CompletedBoost:
    """An append-only completion fact."""
    user_id: str
    boost_id: str
    category: str
    completed_at: datetime
    completed_date: date  # in the reference timezone
    id: Optional[int] = None


@dataclass
class DailySelection:
    """Today's completions for one user."""
    user_id: str
    day: date
    completions: list[CompletedBoost] = field(default_factory=list)
    remaining: int = 0
    fuel_points: int = 0
    available: bool = True  # False when history could not be read

    @property
    def boost_ids(self) -> set[str]:
        return {c.boost_id for c in self.completions}


@dataclass(frozen=True)
class WeeklyWindow:
    """Sunday-aligned week in the reference timezone."""
    start: datetime
    days_until_reset: int  # 1-7

    @property
    def start_date(self) -> date:
        return self.start.date()


@dataclass(frozen=True)
class StreakState:
    """Burn streak as of a given day."""
    length: int
    carried: int  # run ending yesterday
    active_today: bool
    next_milestone: Optional[int] = None
    next_bonus: Optional[int] = None
    days_to_milestone: Optional[int] = None


@dataclass(frozen=True)
class CompletionResult:
    """Outcome of a successful boost completion."""
    completion: CompletedBoost
    boost_points: int
    bonus_points: int
    streak: StreakState
    remaining: int

    @property
    def points_earned(self) -> int:
        return self.boost_points + self.bonus_points

    @property
    def category(self) -> str:
        return self.completion.category
