"""Assembly of committed blocks and unscheduled remainders into a ScheduleResult."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Sequence

from study_scheduler.entities import (
    ScheduleDiagnostics,
    ScheduledBlock,
    ScheduleResult,
    Session,
    Task,
    UnscheduledItem,
    UnscheduledReason,
)


class ScheduleResultAssembler:
    """Collects the outcome of one run and renders the final result."""

    def __init__(self, tasks: Sequence[Task]):
        self.tasks = list(tasks)
        self.blocks: List[ScheduledBlock] = []
        self.unscheduled: List[UnscheduledItem] = []
        self.pinned: List[tuple] = []
        self.sessions_by_task: Dict[str, List[Session]] = defaultdict(list)
        self.notes: List[str] = []

    def add_sessions(self, sessions: Sequence[Session]) -> None:
        for session in sessions:
            self.sessions_by_task[session.task_id].append(session)

    def commit(self, block: ScheduledBlock) -> None:
        self.blocks.append(block)

    def mark_task(self, task: Task, reason: UnscheduledReason) -> None:
        self.unscheduled.append(
            UnscheduledItem(task_id=task.id, reason=reason, minutes=max(0, task.estimated_minutes))
        )

    def mark_session(self, session: Session, reason: UnscheduledReason = UnscheduledReason.NO_FEASIBLE_SLOT) -> None:
        self.unscheduled.append(
            UnscheduledItem(
                task_id=session.task_id,
                reason=reason,
                minutes=session.target_minutes,
                session_index=session.sequence,
            )
        )

    def pin(self, task: Task, start: datetime, end: datetime) -> None:
        self.pinned.append((task.id, start, end))

    def note(self, message: str) -> None:
        self.notes.append(message)

    def build(self) -> ScheduleResult:
        blocks = sorted(self.blocks, key=lambda b: (b.start, b.task_id, b.session_index))

        minutes_by_day: Dict = defaultdict(int)
        minutes_by_task: Dict[str, int] = defaultdict(int)
        for block in blocks:
            minutes_by_day[block.start.date()] += block.duration_minutes
            minutes_by_task[block.task_id] += block.duration_minutes

        log = list(self.notes)
        requested = 0
        for task in self.tasks:
            sessions = self.sessions_by_task.get(task.id)
            if not sessions:
                continue
            wanted = sum(s.target_minutes for s in sessions)
            requested += wanted
            got = minutes_by_task.get(task.id, 0)
            if got >= wanted:
                log.append(f"Task {task.title}: fully scheduled.")
            else:
                log.append(
                    f"Task {task.title}: scheduled {got}/{wanted} minutes; "
                    "could not fully schedule within horizon."
                )

        diagnostics = ScheduleDiagnostics(
            task_count=len(self.tasks),
            session_count=sum(len(s) for s in self.sessions_by_task.values()),
            requested_minutes=requested,
            scheduled_minutes=sum(minutes_by_day.values()),
            minutes_by_day=dict(sorted(minutes_by_day.items())),
            pinned_blocks=list(self.pinned),
            log=log,
        )
        return ScheduleResult(blocks=blocks, unscheduled=list(self.unscheduled), diagnostics=diagnostics)
