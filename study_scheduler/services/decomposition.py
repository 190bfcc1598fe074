"""Session decomposition: split a task's effort into schedulable chunks."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import List, Optional, Tuple

from study_scheduler.entities import (
    Constraints,
    SchedulerPreferences,
    Session,
    Task,
    TaskCategory,
    UnscheduledReason,
)
from study_scheduler.services.constraints import effective_max_block

logger = logging.getLogger(__name__)

MIN_EXAM_SESSIONS = 3


def split_evenly(total: int, count: int) -> List[int]:
    """Split total into count equal parts; the final part absorbs the remainder."""
    base, remainder = divmod(total, count)
    parts = [base] * count
    parts[-1] += remainder
    return parts


class SessionDecomposer:
    """
    Expand tasks into sessions sized within [min_block, effective max].

    Args:
        constraints: Request constraints (block cap, horizon)
        preferences: Scheduler preferences (optional preferred block length per category)
        reference: Earliest placement instant, used to spread exam sessions
    """

    def __init__(self, constraints: Constraints, preferences: SchedulerPreferences, reference: datetime):
        self.constraints = constraints
        self.preferences = preferences
        self.reference = reference

    def decompose(self, task: Task) -> Tuple[List[Session], Optional[UnscheduledReason]]:
        """
        Decompose one task.

        Returns:
            (sessions, reason) where reason is set when the task is flagged
            unschedulable before placement; degenerate effort yields ([], None)
        """
        estimated = task.estimated_minutes
        if estimated <= 0:
            return [], None

        if task.due is not None and task.due < self.constraints.horizon_start:
            logger.debug("Task %s is due before the horizon starts", task.id)
            return [], UnscheduledReason.DUE_BEFORE_HORIZON

        max_block = effective_max_block(task, self.constraints)
        category = task.category
        if category == TaskCategory.EXAM_PREP:
            sizes = self._exam_sizes(task, max_block)
        elif category == TaskCategory.REGULAR:
            sizes = self._regular_sizes(task, max_block)
        else:
            raise ValueError(f"Unhandled task category: {category}")

        if not sizes:
            return [], UnscheduledReason.BLOCK_LIMITS_INCOMPATIBLE

        if category == TaskCategory.EXAM_PREP:
            starts, untils = self._preferred_windows(task, len(sizes))
        else:
            starts = untils = [None] * len(sizes)
        last = len(sizes) - 1
        return [
            Session(
                task_id=task.id,
                target_minutes=minutes,
                sequence=index,
                is_final=index == last,
                earliest_start=starts[index],
                preferred_until=untils[index],
            )
            for index, minutes in enumerate(sizes)
        ], None

    def _chunk_size(self, task: Task, max_block: int) -> int:
        preferred = self.preferences.preferred_block_minutes.get(task.category)
        if preferred:
            return max(task.min_block_minutes, min(max_block, int(preferred)))
        return max_block

    def _regular_sizes(self, task: Task, max_block: int) -> List[int]:
        estimated = task.estimated_minutes
        min_block = task.min_block_minutes

        if estimated < min_block:
            return [estimated] if estimated <= max_block else []
        if min_block > max_block:
            return []

        chunk = self._chunk_size(task, max_block)
        count = math.ceil(estimated / chunk)

        # Fewer, larger sessions when an even split would undercut the minimum block
        if count > 1 and estimated // count < min_block:
            reduced = max(1, estimated // min_block)
            if math.ceil(estimated / reduced) <= max_block:
                count = reduced

        sizes = split_evenly(estimated, count)
        if len(sizes) > 1 and sizes[-1] < min_block and sizes[-2] + sizes[-1] <= max_block:
            sizes[-2] += sizes.pop()

        # No split fits both bounds: round short sessions up to the minimum block
        return [max(min_block, minutes) for minutes in sizes]

    def _exam_sizes(self, task: Task, max_block: int) -> List[int]:
        min_block = task.min_block_minutes
        if min_block > max_block:
            return []

        chunk = self._chunk_size(task, max_block)
        count = max(MIN_EXAM_SESSIONS, math.ceil(task.estimated_minutes / chunk))
        return [max(min_block, min(max_block, share)) for share in split_evenly(task.estimated_minutes, count)]

    def _preferred_windows(self, task: Task, count: int) -> Tuple[List[Optional[datetime]], List[Optional[datetime]]]:
        """
        Consecutive, equal windows from the reference to the deadline, one per session.

        Session k prefers to start in [start_k, start_k+1); the last window
        closes at the due date (or horizon end).
        """
        deadline = task.due or self.constraints.horizon_end
        deadline = min(deadline, self.constraints.horizon_end)
        if deadline <= self.reference:
            return [None] * count, [None] * count
        span = deadline - self.reference
        starts = [self.reference + span * index / count for index in range(count)]
        return starts, starts[1:] + [deadline]
