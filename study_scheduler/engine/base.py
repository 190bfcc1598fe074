"""Base scheduler interface that all schedulers must implement."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Sequence

from study_scheduler.entities import Constraints, FixedEvent, SchedulerPreferences, ScheduleResult, Task


class BaseScheduler(ABC):
    """
    Abstract base class for schedulers.

    A scheduler turns a snapshot of tasks, fixed events, constraints and
    preferences into a ScheduleResult. Implementations hold no state between
    calls.
    """

    name: str = "base"

    @abstractmethod
    def make_schedule(
        self,
        tasks: Sequence[Task],
        fixed_events: Sequence[FixedEvent],
        constraints: Constraints,
        preferences: Optional[SchedulerPreferences] = None,
        now: Optional[datetime] = None,
    ) -> ScheduleResult:
        """
        Place the given tasks into concrete blocks.

        Args:
            tasks: Read-only task snapshot
            fixed_events: Busy intervals no block may overlap
            constraints: Horizon, work window, caps and energy profile
            preferences: Scoring weights (defaults when omitted)
            now: Current instant; no block starts before it

        Returns:
            ScheduleResult with committed blocks and unscheduled items

        Raises:
            ConfigurationError: If constraints are malformed
        """

    def get_name(self) -> str:
        return self.name
