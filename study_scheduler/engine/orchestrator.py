"""Orchestrator - runs a scheduler, validates its output and optionally persists it."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from study_scheduler.domain.models import ScheduleRun, StudyBlock, UnscheduledEntry
from study_scheduler.domain.repositories import ScheduleRunRepository, StudyBlockRepository
from study_scheduler.entities import Constraints, FixedEvent, SchedulerPreferences, ScheduleResult, Task
from study_scheduler.validator import validate_schedule

from .base import BaseScheduler
from .greedy import GreedyScheduler

logger = logging.getLogger(__name__)


def build_schedule(
    tasks: Sequence[Task],
    fixed_events: Sequence[FixedEvent],
    constraints: Constraints,
    preferences: Optional[SchedulerPreferences] = None,
    now: Optional[datetime] = None,
    scheduler: Optional[BaseScheduler] = None,
    session: Optional[Session] = None,
    persist: bool = False,
) -> ScheduleResult:
    """
    Build and validate a schedule, replacing stored blocks in the horizon when asked.

    Args:
        tasks: Tasks to schedule
        fixed_events: Calendar events blocks must avoid
        constraints: Request constraints
        preferences: Scoring preferences (defaults when omitted)
        now: Placement floor; nothing is scheduled before it
        scheduler: Scheduler implementation (default: GreedyScheduler)
        session: Database session, required when persist is True
        persist: If True, save blocks and a run record to the database

    Returns:
        The validated ScheduleResult

    Raises:
        ConfigurationError: If the constraints are malformed
        ValueError: If the produced schedule breaks a guarantee, or persist is
            requested without a session
    """
    scheduler = scheduler or GreedyScheduler()
    name = scheduler.get_name()
    print(f"[INFO] Running {name} scheduler for {constraints.horizon_start:%Y-%m-%d} - {constraints.horizon_end:%Y-%m-%d}")

    result = scheduler.make_schedule(tasks, fixed_events, constraints, preferences, now)
    print(f"[OK] {name} scheduler completed: {len(result.blocks)} blocks")

    # Global validation
    print("[INFO] Validating schedule...")
    validate_schedule(result, tasks, fixed_events, constraints)
    for task_id in result.unscheduled_task_ids:
        print(f"[WARN] Task {task_id} could not be fully scheduled")

    if persist:
        if session is None:
            raise ValueError("persist=True requires a database session")
        persist_schedule(session, result, constraints, name)

    return result


def persist_schedule(
    session: Session,
    result: ScheduleResult,
    constraints: Constraints,
    scheduler_name: str = "greedy",
) -> ScheduleRun:
    """Replace the horizon's stored blocks with the result and record the run."""
    deleted = StudyBlockRepository.delete_in_range(session, constraints.horizon_start, constraints.horizon_end)
    if deleted > 0:
        print(f"[INFO] Deleted {deleted} existing blocks in the horizon")

    run = ScheduleRunRepository.create(
        session,
        ScheduleRun(
            scheduler=scheduler_name,
            horizon_start=constraints.horizon_start,
            horizon_end=constraints.horizon_end,
            requested_minutes=result.diagnostics.requested_minutes,
            scheduled_minutes=result.diagnostics.scheduled_minutes,
        ),
    )

    records: List[StudyBlock] = [
        StudyBlock(
            block_id=block.id,
            run_id=run.id,
            task_id=block.task_id,
            session_index=block.session_index,
            start_time=block.start,
            end_time=block.end,
            score=block.score,
        )
        for block in result.blocks
    ]
    StudyBlockRepository.bulk_create(session, records)

    session.add_all(
        UnscheduledEntry(
            run_id=run.id,
            task_id=item.task_id,
            session_index=item.session_index,
            minutes=item.minutes,
            reason=item.reason.value,
        )
        for item in result.unscheduled
    )
    session.commit()

    logger.info("Persisted run %s with %d blocks", run.id, len(records))
    print(f"[INFO] Persisted {len(records)} blocks to database")
    return run
