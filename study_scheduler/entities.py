"""Value types consumed and produced by the scheduling engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union


class TaskCategory(str, Enum):
    """Closed set of task categories the decomposer and scorer branch on."""

    REGULAR = "regular"
    EXAM_PREP = "exam_prep"

    @classmethod
    def parse(cls, raw: str) -> "TaskCategory":
        """Map a free-form category label onto a member (unknown labels are REGULAR)."""
        key = str(raw).strip().lower().replace("-", "_").replace(" ", "_")
        if key in {"exam", "exam_prep", "examprep", "quiz"}:
            return cls.EXAM_PREP
        return cls.REGULAR


@dataclass(frozen=True)
class Schedulable:
    """Placement for a task the engine is free to place."""


@dataclass(frozen=True)
class ExternallyFixed:
    """Placement for a task pinned by the caller to a concrete interval."""

    start: datetime
    end: datetime


Placement = Union[Schedulable, ExternallyFixed]


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    estimated_minutes: int
    min_block_minutes: int = 25
    max_block_minutes: int = 90
    due: Optional[datetime] = None
    course_id: Optional[str] = None
    difficulty: float = 0.5
    importance: float = 0.5
    category: TaskCategory = TaskCategory.REGULAR
    placement: Placement = field(default_factory=Schedulable)
    completed: bool = False
    prerequisites: Tuple[str, ...] = ()

    @property
    def locked(self) -> bool:
        return isinstance(self.placement, ExternallyFixed)


@dataclass(frozen=True)
class Session:
    """One schedulable chunk of a task's effort."""

    task_id: str
    target_minutes: int
    sequence: int
    is_final: bool
    earliest_start: Optional[datetime] = None
    preferred_until: Optional[datetime] = None

    def prefers(self, start: datetime) -> bool:
        """True when start falls inside the session's preferred window."""
        if self.earliest_start is None or start < self.earliest_start:
            return False
        return self.preferred_until is None or start < self.preferred_until


@dataclass(frozen=True)
class FixedEvent:
    start: datetime
    end: datetime
    id: Optional[str] = None
    title: str = ""


def uniform_energy_profile(weight: float = 0.5) -> Dict[int, float]:
    return {hour: weight for hour in range(24)}


@dataclass(frozen=True)
class Constraints:
    horizon_start: datetime
    horizon_end: datetime
    day_start_hour: int = 8
    day_end_hour: int = 20
    max_study_minutes_per_day: int = 360
    max_study_minutes_per_block: int = 120
    min_gap_between_blocks_minutes: int = 10
    do_not_schedule_windows: Tuple[Tuple[datetime, datetime], ...] = ()
    energy_profile: Dict[int, float] = field(default_factory=uniform_energy_profile)


@dataclass(frozen=True)
class SchedulerPreferences:
    """Tunable scoring weights plus the preferences learned from block feedback."""

    energy_weight: float = 0.4
    urgency_weight: float = 0.4
    importance_weight: float = 0.15
    difficulty_weight: float = 0.05
    scan_granularity_minutes: int = 15
    learned_energy_profile: Optional[Dict[int, float]] = None
    preferred_block_minutes: Dict[TaskCategory, int] = field(default_factory=dict)
    course_bias: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ScheduledBlock:
    id: str
    task_id: str
    start: datetime
    end: datetime
    session_index: int = 0
    score: float = 0.0

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


class UnscheduledReason(str, Enum):
    NO_FEASIBLE_SLOT = "no_feasible_slot"
    DUE_BEFORE_HORIZON = "due_before_horizon"
    BLOCK_LIMITS_INCOMPATIBLE = "block_limits_incompatible"
    BLOCKED_BY_PREREQUISITE = "blocked_by_prerequisite"


@dataclass(frozen=True)
class UnscheduledItem:
    """A task (session_index None) or one of its sessions that could not be placed."""

    task_id: str
    reason: UnscheduledReason
    minutes: int = 0
    session_index: Optional[int] = None


@dataclass
class ScheduleDiagnostics:
    task_count: int = 0
    session_count: int = 0
    requested_minutes: int = 0
    scheduled_minutes: int = 0
    minutes_by_day: Dict[date, int] = field(default_factory=dict)
    pinned_blocks: List[Tuple[str, datetime, datetime]] = field(default_factory=list)
    log: List[str] = field(default_factory=list)


@dataclass
class ScheduleResult:
    blocks: List[ScheduledBlock]
    unscheduled: List[UnscheduledItem]
    diagnostics: ScheduleDiagnostics

    @property
    def unscheduled_task_ids(self) -> List[str]:
        seen: List[str] = []
        for item in self.unscheduled:
            if item.task_id not in seen:
                seen.append(item.task_id)
        return seen
