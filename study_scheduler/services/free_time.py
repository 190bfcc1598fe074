"""Free-time calculation: a day's work window minus every obstacle."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Sequence, Tuple

from study_scheduler.entities import Constraints, FixedEvent, ScheduledBlock
from study_scheduler.services.constraints import day_window

Interval = Tuple[datetime, datetime]


@dataclass(frozen=True)
class FreeInterval:
    """A contiguous free window inside one day's work window."""

    start: datetime
    end: datetime

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


def subtract_interval(free: List[FreeInterval], lower: datetime, upper: datetime) -> List[FreeInterval]:
    """Remove [lower, upper) from every free interval, splitting where needed."""
    out: List[FreeInterval] = []
    for interval in free:
        # No overlap
        if upper <= interval.start or lower >= interval.end:
            out.append(interval)
            continue

        # Left remainder
        if lower > interval.start:
            out.append(FreeInterval(interval.start, lower))

        # Right remainder
        if upper < interval.end:
            out.append(FreeInterval(upper, interval.end))

    out.sort(key=lambda i: i.start)
    return out


class FreeTimeCalculator:
    """
    Compute the free sub-intervals of a day after subtracting obstacles.

    Fixed events and blackout windows are gathered once per run; placed blocks
    are passed on every call since they grow as the scheduler commits.
    Every obstacle is widened by the minimum gap on both sides, so any block
    placed inside a returned interval keeps that gap to its neighbours.
    """

    def __init__(
        self,
        constraints: Constraints,
        fixed_events: Sequence[FixedEvent] = (),
        extra_obstacles: Iterable[Interval] = (),
    ):
        self.constraints = constraints
        self.gap = timedelta(minutes=constraints.min_gap_between_blocks_minutes)
        static: List[Interval] = [(event.start, event.end) for event in fixed_events]
        static.extend(constraints.do_not_schedule_windows)
        static.extend(extra_obstacles)
        self._static_obstacles = sorted(static)

    def free_intervals(
        self,
        day: date,
        placed: Sequence[ScheduledBlock] = (),
        floor: datetime | None = None,
    ) -> List[FreeInterval]:
        """
        Free intervals of one day, disjoint and ordered by start.

        Args:
            day: Calendar day to inspect
            placed: Blocks already committed in this run
            floor: Earliest allowed start (defaults to the horizon start)

        Returns:
            Remaining intervals; callers drop the ones too short for a session
        """
        window_start, window_end = day_window(day, self.constraints)
        window_start = max(window_start, floor or self.constraints.horizon_start)
        window_end = min(window_end, self.constraints.horizon_end)
        if window_end <= window_start:
            return []

        free = [FreeInterval(window_start, window_end)]
        obstacles = list(self._static_obstacles)
        obstacles.extend((block.start, block.end) for block in placed)

        for lower, upper in obstacles:
            padded_lower = lower - self.gap
            padded_upper = upper + self.gap
            if padded_upper <= window_start or padded_lower >= window_end:
                continue
            free = subtract_interval(free, padded_lower, padded_upper)
            if not free:
                break

        return [interval for interval in free if interval.end > interval.start]
