"""HTTP response models."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class BoostResponse(BaseModel):
    """Catalog entry."""

    id: str
    name: str
    category: str
    fuel_points: int
    tier: int
    estimated_time: str = ""


class CompletionResponse(BaseModel):
    """Stored completion."""

    boost_id: str
    category: str
    completed_at: datetime
    completed_date: date


class TodayResponse(BaseModel):
    """Response for /api/users/{user_id}/boosts/today."""

    user_id: str
    day: date
    completions: list[CompletionResponse]
    remaining: int
    fuel_points: int
    available: bool = True
    days_until_reset: int


class WeekResponse(BaseModel):
    """Response for /api/users/{user_id}/boosts/week."""

    user_id: str
    week_start: datetime
    days_until_reset: int
    completions: list[CompletionResponse]


class StreakResponse(BaseModel):
    """Burn streak as of today."""

    length: int
    carried: int
    active_today: bool
    next_milestone: Optional[int] = None
    next_bonus: Optional[int] = None
    days_to_milestone: Optional[int] = None


class ProgressResponse(BaseModel):
    """Fuel point total and level."""

    user_id: str
    fuel_points: int
    level: int
    points_into_level: int
    next_level_points: int


class CompleteBoostResponse(BaseModel):
    """Response for a successful boost completion."""

    boost_id: str
    category: str
    points_earned: int
    bonus_points: int = 0
    remaining: int
    streak: StreakResponse


class BoardEntryResponse(BaseModel):
    """Boost shown on a board."""

    boost_id: str
    completed_at: datetime
    confirmed: bool = True


class BoardResponse(BaseModel):
    """Response for /api/users/{user_id}/board."""

    user_id: str
    selected: list[BoardEntryResponse]
    weekly: list[BoardEntryResponse]
    remaining: int
    fuel_points: int
    days_until_reset: int
    error: Optional[str] = None
