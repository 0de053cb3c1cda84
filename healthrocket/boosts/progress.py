"""Fuel point totals and levels derived from completion history."""

from dataclasses import dataclass
from typing import Iterable

from .catalog import BoostCatalog
from .models import CompletedBoost
from .streak import StreakCalculator

LEVEL_2_POINTS = 20
LEVEL_GROWTH = 1.414


@dataclass(frozen=True)
class LevelProgress:
    """Where a fuel point total sits on the level ladder."""
    level: int
    points_into_level: int
    next_level_points: int  # FP needed to go from this level to the next


def points_for_level(level: int) -> int:
    """
    FP needed to advance from a level to the next one.

    Example:
        1 -> 20, 2 -> 28, 3 -> 40
    """
    if level < 1:
        raise ValueError(f"Levels start at 1, got {level}")
    return round(LEVEL_2_POINTS * LEVEL_GROWTH ** (level - 1))


def level_for_points(total: int) -> LevelProgress:
    """Level reached with a fuel point total."""
    if total < 0:
        raise ValueError(f"Fuel points must be non-negative, got {total}")

    level = 1
    remaining = total
    while remaining >= points_for_level(level):
        remaining -= points_for_level(level)
        level += 1

    return LevelProgress(
        level=level,
        points_into_level=remaining,
        next_level_points=points_for_level(level),
    )


def fuel_points_from_history(
    completions: Iterable[CompletedBoost],
    catalog: BoostCatalog,
    streaks: StreakCalculator,
) -> int:
    """
    Replay completion history into a fuel point total.

    Each completion is worth its catalog value. Each active date adds the
    milestone bonus for the streak length reached that day, so a milestone
    pays once per attainment.
    """
    completions = list(completions)
    total = sum(catalog.points_for(c.boost_id) for c in completions)

    lengths = streaks.history(c.completed_date for c in completions)
    total += sum(streaks.bonus_for(length) for length in lengths.values())
    return total
