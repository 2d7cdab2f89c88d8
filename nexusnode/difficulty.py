"""Adaptive task difficulty selection for fetching proving tasks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

# A task finishing in this many seconds or more keeps the difficulty where it is.
PROMOTION_THRESHOLD_SECS = 420


class TaskDifficulty(Enum):
    """Difficulty levels a task can be requested or assigned at."""

    SMALL = "SMALL"
    SMALL_MEDIUM = "SMALL_MEDIUM"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"
    EXTRA_LARGE = "EXTRA_LARGE"
    EXTRA_LARGE_2 = "EXTRA_LARGE_2"

    @property
    def promoted(self) -> "TaskDifficulty":
        """The next level up; the highest level promotes to itself."""
        return _PROMOTIONS[self]


_PROMOTIONS = {
    # A server override down to Small is lifted back to SmallMedium.
    TaskDifficulty.SMALL: TaskDifficulty.SMALL_MEDIUM,
    TaskDifficulty.SMALL_MEDIUM: TaskDifficulty.MEDIUM,
    TaskDifficulty.MEDIUM: TaskDifficulty.LARGE,
    TaskDifficulty.LARGE: TaskDifficulty.EXTRA_LARGE,
    TaskDifficulty.EXTRA_LARGE: TaskDifficulty.EXTRA_LARGE_2,
    TaskDifficulty.EXTRA_LARGE_2: TaskDifficulty.EXTRA_LARGE_2,
}

DEFAULT_DIFFICULTY = TaskDifficulty.SMALL_MEDIUM


def next_difficulty(
    current: TaskDifficulty, last_duration_secs: Optional[int]
) -> TaskDifficulty:
    """Difficulty to request after a success at ``current``.

    Promotes one level unless the last success took at least
    PROMOTION_THRESHOLD_SECS seconds.
    """
    if last_duration_secs is not None and last_duration_secs >= PROMOTION_THRESHOLD_SECS:
        return current
    return current.promoted


@dataclass
class DifficultyTracker:
    """Tracks assigned and completed difficulties to choose the next request."""

    max_difficulty: Optional[TaskDifficulty] = None
    last_success_duration_secs: Optional[int] = None
    last_success_difficulty: Optional[TaskDifficulty] = None
    last_requested_difficulty: Optional[TaskDifficulty] = None

    def desired_difficulty(self) -> TaskDifficulty:
        """The difficulty to ask the server for next."""
        if self.max_difficulty is not None:
            return self.max_difficulty
        if self.last_success_difficulty is None:
            return DEFAULT_DIFFICULTY
        return next_difficulty(self.last_success_difficulty, self.last_success_duration_secs)

    def record_assignment(self, difficulty: TaskDifficulty) -> None:
        """Remember the difficulty the server actually assigned to the fetched task."""
        self.last_requested_difficulty = difficulty

    def update_success_tracking(self, duration_secs: int) -> None:
        """Record a completed task; does nothing if no assignment was recorded."""
        if self.last_requested_difficulty is None:
            return
        self.last_success_difficulty = self.last_requested_difficulty
        self.last_success_duration_secs = duration_secs