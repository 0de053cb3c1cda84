"""Static registry of daily boosts."""

from typing import Iterator, Optional

from .errors import BoostNotFound
from .models import CATEGORIES, Boost

# (id, name, fuel points, tier, estimated time)
_SLEEP = [
    ("sleep-101", "Morning Light Protocol", 1, 1, "10-15 minutes"),
    ("sleep-102", "Sleep Preparation Zone", 2, 1, "15-20 minutes"),
    ("sleep-103", "Digital Sunset Protocol", 3, 1, "20 minutes"),
    ("sleep-104", "Evening Wind-Down", 4, 1, "25 minutes"),
    ("sleep-105", "Sleep Schedule Alignment", 5, 1, "30 minutes"),
    ("sleep-106", "Recovery Breathing Protocol", 6, 1, "30 minutes"),
    ("sleep-201", "Advanced Sleep Architecture Optimization", 7, 2, "9-10 hours"),
    ("sleep-202", "Circadian Reset Protocol", 8, 2, "24 hours"),
    ("sleep-203", "Elite Recovery Integration", 9, 2, "36 hours"),
]

_MINDSET = [
    ("mindset-101", "Morning Gratitude Practice", 1, 1, "5-10 minutes"),
    ("mindset-102", "Focus Block Session", 2, 1, "25 minutes"),
    ("mindset-103", "Mindfulness Meditation", 3, 1, "15 minutes"),
    ("mindset-104", "Growth Mindset Integration", 4, 1, "20 minutes"),
    ("mindset-105", "Peak State Activation", 5, 1, "30 minutes"),
    ("mindset-106", "Mental Performance Optimization", 6, 1, "30 minutes"),
    ("mindset-201", "Advanced Meditation Integration", 7, 2, "45-60 minutes"),
    ("mindset-202", "Flow State Protocol", 8, 2, "90-120 minutes"),
    ("mindset-203", "Elite Mental Performance Integration", 9, 2, "120-150 minutes"),
]

_EXERCISE = [
    ("exercise-101", "Movement Pattern Practice", 1, 1, "15 minutes"),
    ("exercise-102", "Morning Movement Flow", 2, 1, "20 minutes"),
    ("exercise-103", "Zone 2 Training Session", 3, 1, "30 minutes"),
    ("exercise-104", "Strength Foundation", 4, 1, "45 minutes"),
    ("exercise-105", "Recovery Integration", 5, 1, "45 minutes"),
    ("exercise-106", "Movement Integration Protocol", 6, 1, "60 minutes"),
    ("exercise-201", "Advanced Performance Protocol", 7, 2, "90 minutes"),
    ("exercise-202", "Elite Strength Development", 8, 2, "120 minutes"),
    ("exercise-203", "Complete Performance Integration", 9, 2, "150 minutes"),
]

_NUTRITION = [
    ("nutrition-101", "Nutrient Density Protocol", 1, 1, "15 minutes"),
    ("nutrition-102", "Anti-Inflammatory Meal", 2, 1, "20 minutes"),
    ("nutrition-103", "Meal Timing Protocol", 3, 1, "25 minutes + tracking"),
    ("nutrition-104", "Personalized Protocol Design", 4, 1, "30 minutes"),
    ("nutrition-105", "Micronutrient Optimization", 5, 1, "45 minutes"),
    ("nutrition-106", "Metabolic Health Planning", 6, 1, "60 minutes"),
    ("nutrition-201", "Advanced Glucose Optimization", 7, 2, "12 hours active monitoring"),
    ("nutrition-202", "Advanced Functional Protocol", 8, 2, "16 hours"),
    ("nutrition-203", "Elite Nutrition Integration", 9, 2, "24 hours"),
]

_BIOHACKING = [
    ("biohack-101", "Basic Cold Exposure", 1, 1, "5-10 minutes"),
    ("biohack-102", "Red Light Session", 2, 1, "15-20 minutes"),
    ("biohack-103", "HRV Breathing Protocol", 3, 1, "20 minutes"),
    ("biohack-104", "Heat Exposure Protocol", 4, 1, "25 minutes"),
    ("biohack-105", "Recovery Tech Stack", 5, 1, "30 minutes"),
    ("biohack-106", "Metabolic Enhancement", 6, 1, "45 minutes"),
    ("biohack-201", "Advanced Recovery Integration", 7, 2, "90 minutes"),
    ("biohack-202", "Longevity Protocol Integration", 8, 2, "120 minutes"),
    ("biohack-203", "Complete Performance Integration", 9, 2, "150 minutes"),
]

_TABLES = {
    "Sleep": _SLEEP,
    "Mindset": _MINDSET,
    "Exercise": _EXERCISE,
    "Nutrition": _NUTRITION,
    "Biohacking": _BIOHACKING,
}


class BoostCatalog:
    """Read-only lookup over boost definitions."""

    def __init__(self, boosts: Optional[list[Boost]] = None):
        if boosts is None:
            boosts = _default_boosts()
        self._boosts = {boost.id: boost for boost in boosts}

    def get(self, boost_id: str) -> Boost:
        """Look up a boost, raising BoostNotFound for unknown ids."""
        try:
            return self._boosts[boost_id]
        except KeyError:
            raise BoostNotFound(f"Unknown boost: {boost_id}") from None

    def by_category(self, category: str) -> list[Boost]:
        return [b for b in self._boosts.values() if b.category == category]

    def categories(self) -> list[str]:
        present = {b.category for b in self._boosts.values()}
        return [c for c in CATEGORIES if c in present]

    def points_for(self, boost_id: str) -> int:
        """Fuel points for a boost id; 0 for ids no longer in the catalog."""
        boost = self._boosts.get(boost_id)
        return boost.fuel_points if boost else 0

    def __iter__(self) -> Iterator[Boost]:
        return iter(self._boosts.values())

    def __len__(self) -> int:
        return len(self._boosts)

    def __contains__(self, boost_id: object) -> bool:
        return boost_id in self._boosts


def _default_boosts() -> list[Boost]:
    return [
        Boost(
            id=boost_id,
            name=name,
            category=category,
            fuel_points=points,
            tier=tier,
            estimated_time=estimated_time,
        )
        for category, rows in _TABLES.items()
        for boost_id, name, points, tier, estimated_time in rows
    ]


catalog = BoostCatalog()
