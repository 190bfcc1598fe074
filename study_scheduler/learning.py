"""
Preference learning from post-block feedback.

Each study block can be rated after the fact: how much of it got done, and
whether the student kept, moved, shortened, extended or deleted it. The
learner folds a batch of such ratings into SchedulerPreferences with an
exponential moving average:

- energy per clock hour, from the share of successful minutes that started there
- preferred block length per task category, from successful blocks
- per-course bias, nudged up when a course's blocks fail more than they succeed

Updated preferences are returned as a new value; nothing is mutated.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Sequence

import yaml

from study_scheduler.entities import SchedulerPreferences, TaskCategory
from study_scheduler.errors import ConfigurationError

logger = logging.getLogger(__name__)

SUCCESS_COMPLETION = 0.7
FAILURE_COMPLETION = 0.3
DEFAULT_BLOCK_MINUTES = 50
MIN_LEARNED_BLOCK = 15
MAX_LEARNED_BLOCK = 240


class FeedbackAction(str, Enum):
    KEPT = "kept"
    RESCHEDULED = "rescheduled"
    DELETED = "deleted"
    SHORTENED = "shortened"
    EXTENDED = "extended"


@dataclass(frozen=True)
class BlockFeedback:
    """How one scheduled block turned out."""

    block_id: str
    task_id: str
    start: datetime
    end: datetime
    completion: float
    action: FeedbackAction
    category: TaskCategory = TaskCategory.REGULAR
    course_id: Optional[str] = None

    @property
    def minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60.0

    @property
    def succeeded(self) -> bool:
        return self.completion >= SUCCESS_COMPLETION and self.action == FeedbackAction.KEPT

    @property
    def failed(self) -> bool:
        return self.completion < FAILURE_COMPLETION or self.action == FeedbackAction.DELETED


def update_preferences(
    feedback: Sequence[BlockFeedback],
    preferences: SchedulerPreferences,
    alpha: float = 0.2,
    course_learning_rate: float = 0.05,
) -> SchedulerPreferences:
    """
    Fold a batch of block feedback into the preferences.

    Args:
        feedback: Feedback records; an empty batch returns the input unchanged
        preferences: Current preferences
        alpha: EMA weight given to the new observation
        course_learning_rate: Step applied per net failed block of a course

    Returns:
        New SchedulerPreferences
    """
    if not feedback:
        return preferences

    success_by_hour: Dict[int, float] = defaultdict(float)
    failure_by_hour: Dict[int, float] = defaultdict(float)
    minutes_by_category: Dict[TaskCategory, float] = defaultdict(float)
    count_by_category: Dict[TaskCategory, int] = defaultdict(int)
    success_by_course: Dict[str, int] = defaultdict(int)
    failure_by_course: Dict[str, int] = defaultdict(int)

    for item in feedback:
        hour = item.start.hour
        if item.succeeded:
            success_by_hour[hour] += item.minutes
            minutes_by_category[item.category] += item.minutes
            count_by_category[item.category] += 1
            if item.course_id is not None:
                success_by_course[item.course_id] += 1
        elif item.failed:
            failure_by_hour[hour] += item.minutes
            if item.course_id is not None:
                failure_by_course[item.course_id] += 1

    # 1. Energy profile
    previous = preferences.learned_energy_profile or {}
    energy: Dict[int, float] = {}
    for hour in range(24):
        old = previous.get(hour, 0.5)
        succ, fail = success_by_hour[hour], failure_by_hour[hour]
        observed = succ / max(1.0, succ + fail) if succ + fail > 0 else old
        energy[hour] = min(1.0, max(0.0, alpha * observed + (1 - alpha) * old))

    # 2. Preferred block length
    block_minutes = dict(preferences.preferred_block_minutes)
    for category, total in minutes_by_category.items():
        average = max(1, round(total / count_by_category[category]))
        old = block_minutes.get(category, DEFAULT_BLOCK_MINUTES)
        updated = round(alpha * average + (1 - alpha) * old)
        block_minutes[category] = min(MAX_LEARNED_BLOCK, max(MIN_LEARNED_BLOCK, updated))

    # 3. Course bias (only courses with failures move)
    course_bias = dict(preferences.course_bias)
    for course_id, failed in failure_by_course.items():
        delta = failed - success_by_course.get(course_id, 0)
        course_bias[course_id] = course_bias.get(course_id, 0.0) + course_learning_rate * delta

    logger.info("Learned preferences from %d feedback records", len(feedback))
    return replace(
        preferences,
        learned_energy_profile=energy,
        preferred_block_minutes=block_minutes,
        course_bias=course_bias,
    )


def save_learned_preferences(path: str | Path, preferences: SchedulerPreferences) -> None:
    """Write the learned part of the preferences to a YAML file."""
    state = {
        "learned_energy_profile": {
            int(hour): round(float(weight), 4)
            for hour, weight in sorted((preferences.learned_energy_profile or {}).items())
        },
        "preferred_block_minutes": {
            category.value: int(minutes) for category, minutes in preferences.preferred_block_minutes.items()
        },
        "course_bias": {str(k): round(float(v), 4) for k, v in preferences.course_bias.items()},
    }
    Path(path).write_text(yaml.safe_dump(state, sort_keys=True), encoding="utf-8")
    print(f"[INFO] Saved learned preferences to {path}")


def load_learned_preferences(path: str | Path, base: SchedulerPreferences) -> SchedulerPreferences:
    """
    Overlay learned state saved by save_learned_preferences onto base.

    Raises:
        ConfigurationError: If the file is not a mapping
    """
    raw = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Learned preferences {path} must contain a mapping")

    profile = raw.get("learned_energy_profile") or None
    return replace(
        base,
        learned_energy_profile={int(h): float(w) for h, w in profile.items()} if profile else None,
        preferred_block_minutes={
            **base.preferred_block_minutes,
            **{TaskCategory.parse(k): int(v) for k, v in (raw.get("preferred_block_minutes") or {}).items()},
        },
        course_bias={**base.course_bias, **{str(k): float(v) for k, v in (raw.get("course_bias") or {}).items()}},
    )
