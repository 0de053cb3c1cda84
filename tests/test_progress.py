"""Tests for fuel point totals and levels."""

from datetime import date, timedelta

import pytest

from healthrocket.boosts.catalog import catalog
from healthrocket.boosts.models import CompletedBoost
from healthrocket.boosts.progress import (
    fuel_points_from_history,
    level_for_points,
    points_for_level,
)
from healthrocket.boosts.streak import StreakCalculator

from conftest import eastern


def completion(boost_id, day):
    return CompletedBoost(
        user_id="ava",
        boost_id=boost_id,
        category=catalog.get(boost_id).category,
        completed_at=eastern(day.year, day.month, day.day),
        completed_date=day,
    )


def test_points_for_level():
    assert [points_for_level(n) for n in (1, 2, 3)] == [20, 28, 40]
    with pytest.raises(ValueError):
        points_for_level(0)


@pytest.mark.parametrize(
    "total, level, into, needed",
    [(0, 1, 0, 20), (19, 1, 19, 20), (20, 2, 0, 28), (47, 2, 27, 28), (48, 3, 0, 40)],
)
def test_level_for_points(total, level, into, needed):
    progress = level_for_points(total)
    assert (progress.level, progress.points_into_level, progress.next_level_points) == (
        level,
        into,
        needed,
    )


def test_negative_points_rejected():
    with pytest.raises(ValueError):
        level_for_points(-1)


def test_history_includes_streak_bonus_once():
    start = date(2025, 6, 2)
    history = [completion("sleep-101", start + timedelta(days=n)) for n in range(3)]
    history.append(completion("mindset-102", start + timedelta(days=2)))

    # 1 + 1 + 1 + 2 boost points, +5 for the three-day streak
    assert fuel_points_from_history(history, catalog, StreakCalculator()) == 10


def test_history_with_gap_has_no_bonus():
    days = [date(2025, 6, 2), date(2025, 6, 3), date(2025, 6, 5)]
    history = [completion("exercise-103", d) for d in days]
    assert fuel_points_from_history(history, catalog, StreakCalculator()) == 9
