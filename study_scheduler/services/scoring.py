"""Scoring functions for candidate slot desirability."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, Optional

from study_scheduler.entities import Constraints, SchedulerPreferences, Task, TaskCategory
from study_scheduler.services.constraints import day_window

DEFAULT_ENERGY = 0.5


def average_energy(start: datetime, end: datetime, profile: Dict[int, float]) -> float:
    """
    Mean energy weight across the clock hours a block touches.

    Args:
        start: Block start
        end: Block end (exclusive)
        profile: Hour-of-day -> weight in [0, 1]

    Returns:
        Mean weight; hours missing from the profile count as 0.5
    """
    if end <= start:
        return float(profile.get(start.hour, DEFAULT_ENERGY))

    weights = []
    cursor = start.replace(minute=0, second=0, microsecond=0)
    while cursor < end:
        weights.append(float(profile.get(cursor.hour, DEFAULT_ENERGY)))
        cursor += timedelta(hours=1)
    return sum(weights) / len(weights)


def urgency(due: Optional[datetime], start: datetime, reference: datetime) -> float:
    """
    Urgency of starting at `start` for a task due at `due`.

    Rises linearly from 0 at the reference time to 1 at the deadline.
    Tasks without a deadline have no urgency.
    """
    if due is None:
        return 0.0
    span = (due - reference).total_seconds()
    if span <= 0:
        return 1.0
    remaining = (due - start).total_seconds()
    return max(0.0, min(1.0, 1.0 - remaining / span))


def early_slot_bonus(difficulty: float, start: datetime, constraints: Constraints) -> float:
    """Bonus for placing difficult work early in the work window."""
    window_start, window_end = day_window(start.date(), constraints)
    length = (window_end - window_start).total_seconds()
    if length <= 0:
        return 0.0
    offset = max(0.0, (start - window_start).total_seconds())
    position = min(1.0, offset / length)
    return max(0.0, min(1.0, difficulty)) * (1.0 - position)


class SlotScorer:
    """
    Score candidate placements for one run.

    Higher score = better slot. Candidates that would end after the task's
    deadline are disqualified (None) instead of penalized.
    """

    def __init__(self, constraints: Constraints, preferences: SchedulerPreferences, reference: datetime):
        self.constraints = constraints
        self.preferences = preferences
        self.reference = reference
        self.profile = preferences.learned_energy_profile or constraints.energy_profile

    def score(self, task: Task, start: datetime, end: datetime) -> Optional[float]:
        if task.due is not None and end > task.due:
            return None

        prefs = self.preferences
        energy = average_energy(start, end, self.profile)
        urgent = urgency(task.due, start, self.reference)
        importance = max(0.0, min(1.0, task.importance))
        early = self._difficulty_term(task, start)

        return (
            prefs.energy_weight * energy
            + prefs.urgency_weight * urgent
            + prefs.importance_weight * importance
            + prefs.difficulty_weight * early
        )

    def _difficulty_term(self, task: Task, start: datetime) -> float:
        category = task.category
        if category == TaskCategory.EXAM_PREP:
            # Exam review is treated as at least moderately hard.
            return early_slot_bonus(max(task.difficulty, 0.5), start, self.constraints)
        elif category == TaskCategory.REGULAR:
            return early_slot_bonus(task.difficulty, start, self.constraints)
        raise ValueError(f"Unhandled task category: {category}")
