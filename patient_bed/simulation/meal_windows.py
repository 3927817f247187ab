"""Daily meal windows during which the bed is raised."""

from dataclasses import dataclass
from datetime import datetime
from typing import List

from .config import InclinationPolicy


@dataclass(frozen=True)
class MealWindow:
    start_minute_of_day: int
    duration_minutes: int

    @property
    def end_minute_of_day(self) -> int:
        return self.start_minute_of_day + self.duration_minutes

    def contains(self, minute_of_day: int) -> bool:
        return self.start_minute_of_day <= minute_of_day < self.end_minute_of_day


def minute_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def meal_windows_from_policy(policy: InclinationPolicy) -> List[MealWindow]:
    """Expand the policy's meal start times into windows."""
    return [
        MealWindow(hour * 60 + minute, policy.meal_duration_minutes)
        for hour, minute in policy.meal_start_times
    ]


def in_meal_window(windows: List[MealWindow], moment: datetime) -> bool:
    """Whether the local wall-clock time falls inside any meal window."""
    current = minute_of_day(moment)
    return any(window.contains(current) for window in windows)
