"""Greedy constrained placement of task sessions into calendar blocks."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Set, Tuple

from study_scheduler.entities import (
    Constraints,
    ExternallyFixed,
    FixedEvent,
    SchedulerPreferences,
    ScheduledBlock,
    ScheduleResult,
    Session,
    Task,
    UnscheduledReason,
)
from study_scheduler.services.constraints import (
    can_place_block,
    horizon_days,
    placement_floor,
    validate_constraints,
)
from study_scheduler.services.decomposition import SessionDecomposer
from study_scheduler.services.free_time import FreeTimeCalculator
from study_scheduler.services.scoring import SlotScorer

from .base import BaseScheduler
from .result import ScheduleResultAssembler

logger = logging.getLogger(__name__)

Candidate = Tuple[float, datetime, datetime]


class GreedyScheduler(BaseScheduler):
    """
    Earliest-deadline-first greedy scheduler.

    Sessions are ordered by deadline, then importance, then learned course
    bias, then difficulty. Each one is committed to the highest-scoring
    admissible slot across its candidate days, or recorded as unscheduled.
    A failed session never aborts the run.
    """

    name = "greedy"

    def make_schedule(
        self,
        tasks: Sequence[Task],
        fixed_events: Sequence[FixedEvent],
        constraints: Constraints,
        preferences: Optional[SchedulerPreferences] = None,
        now: Optional[datetime] = None,
    ) -> ScheduleResult:
        validate_constraints(constraints)
        preferences = preferences or SchedulerPreferences()
        floor = placement_floor(constraints, now)
        logger.info("Scheduling %d tasks against %d fixed events", len(tasks), len(fixed_events))

        # INIT
        assembler = ScheduleResultAssembler(tasks)
        decomposer = SessionDecomposer(constraints, preferences, floor)
        capacity: Dict[date, int] = {
            day: constraints.max_study_minutes_per_day
            for day in horizon_days(floor.date(), constraints.horizon_end.date())
        }
        pinned = self._collect_pinned(tasks, capacity, assembler)
        pending = self._collect_sessions(tasks, decomposer, assembler)

        # ORDER
        pending.sort(key=lambda item: self._order_key(item[0], constraints, preferences))

        # PLACE
        calculator = FreeTimeCalculator(constraints, fixed_events, extra_obstacles=pinned)
        scorer = SlotScorer(constraints, preferences, floor)
        step = timedelta(minutes=max(1, preferences.scan_granularity_minutes))
        placed: List[ScheduledBlock] = []

        for task, session in pending:
            choice = self._best_candidate(task, session, constraints, calculator, scorer, placed, capacity, floor, step)
            if choice is None:
                logger.debug("No feasible slot for %s session %d", task.id, session.sequence)
                assembler.mark_session(session)
                continue

            score, start, end = choice
            block = ScheduledBlock(
                id=f"{task.id}:{session.sequence}",
                task_id=task.id,
                start=start,
                end=end,
                session_index=session.sequence,
                score=round(score, 6),
            )
            placed.append(block)
            capacity[start.date()] -= session.target_minutes
            assembler.commit(block)

        # DONE
        result = assembler.build()
        logger.info(
            "Schedule complete: %d blocks, %d unscheduled items",
            len(result.blocks),
            len(result.unscheduled),
        )
        if result.unscheduled:
            logger.warning("%d tasks could not be fully scheduled", len(result.unscheduled_task_ids))
        return result

    @staticmethod
    def _order_key(task: Task, constraints: Constraints, preferences: SchedulerPreferences):
        due = task.due if task.due is not None else constraints.horizon_end
        # Learned course bias breaks ties after importance
        bias = preferences.course_bias.get(task.course_id, 0.0) if task.course_id else 0.0
        return (due, -task.importance, -bias, -task.difficulty)

    @staticmethod
    def _collect_pinned(
        tasks: Sequence[Task],
        capacity: Dict[date, int],
        assembler: ScheduleResultAssembler,
    ) -> List[Tuple[datetime, datetime]]:
        """Externally fixed tasks become obstacles and consume their day's capacity."""
        pinned: List[Tuple[datetime, datetime]] = []
        for task in tasks:
            if task.completed or not isinstance(task.placement, ExternallyFixed):
                continue
            start, end = task.placement.start, task.placement.end
            pinned.append((start, end))
            assembler.pin(task, start, end)
            day = start.date()
            if day in capacity:
                minutes = int((end - start).total_seconds() // 60)
                capacity[day] = max(0, capacity[day] - minutes)
        return pinned

    @staticmethod
    def _collect_sessions(
        tasks: Sequence[Task],
        decomposer: SessionDecomposer,
        assembler: ScheduleResultAssembler,
    ) -> List[Tuple[Task, Session]]:
        completed: Set[str] = {task.id for task in tasks if task.completed}
        known: Set[str] = {task.id for task in tasks}
        pending: List[Tuple[Task, Session]] = []

        for task in tasks:
            if task.completed:
                assembler.note(f"Task {task.title}: skipped (completed).")
                continue
            if task.locked:
                continue

            open_prereqs = [p for p in task.prerequisites if p in known and p not in completed]
            if open_prereqs:
                assembler.mark_task(task, UnscheduledReason.BLOCKED_BY_PREREQUISITE)
                assembler.note(f"Task {task.title}: blocked by {len(open_prereqs)} prerequisite(s).")
                continue

            sessions, reason = decomposer.decompose(task)
            if reason is not None:
                assembler.mark_task(task, reason)
                assembler.note(f"Task {task.title}: unschedulable ({reason.value}).")
                continue

            assembler.add_sessions(sessions)
            pending.extend((task, session) for session in sessions)

        return pending

    @staticmethod
    def _best_candidate(
        task: Task,
        session: Session,
        constraints: Constraints,
        calculator: FreeTimeCalculator,
        scorer: SlotScorer,
        placed: Sequence[ScheduledBlock],
        capacity: Dict[date, int],
        floor: datetime,
        step: timedelta,
    ) -> Optional[Candidate]:
        """
        Scan candidate days and slots for one session.

        Returns the best admissible candidate; a candidate starting inside the
        session's preferred window wins over any candidate outside it.
        """
        duration = timedelta(minutes=session.target_minutes)
        last_instant = constraints.horizon_end
        if task.due is not None:
            last_instant = min(task.due, last_instant)
        if last_instant < floor:
            return None

        best: Optional[Candidate] = None
        best_preferred: Optional[Candidate] = None

        for day in horizon_days(floor.date(), last_instant.date()):
            if capacity.get(day, 0) <= 0:
                continue
            for interval in calculator.free_intervals(day, placed, floor):
                if interval.duration_minutes < session.target_minutes:
                    continue
                start = interval.start
                while start + duration <= interval.end:
                    end = start + duration
                    if can_place_block(task, start, end, constraints, capacity):
                        score = scorer.score(task, start, end)
                        if score is not None:
                            if best is None or score > best[0]:
                                best = (score, start, end)
                            if session.prefers(start):
                                if best_preferred is None or score > best_preferred[0]:
                                    best_preferred = (score, start, end)
                    start += step

        return best_preferred or best
