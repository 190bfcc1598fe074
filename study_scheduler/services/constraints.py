"""Constraint checking for scheduling requests and candidate placements."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Dict, Optional, Tuple

from study_scheduler.entities import Constraints, Task
from study_scheduler.errors import ConfigurationError


def validate_constraints(constraints: Constraints) -> None:
    """
    Reject malformed constraints before any scheduling work starts.

    Args:
        constraints: Constraints supplied by the caller

    Raises:
        ConfigurationError: If the horizon or the daily work window is inverted,
            hours fall outside 0-24, or a cap is negative
    """
    if constraints.horizon_end < constraints.horizon_start:
        raise ConfigurationError(
            f"Horizon end {constraints.horizon_end} is before horizon start {constraints.horizon_start}"
        )

    if not 0 <= constraints.day_start_hour <= 24 or not 0 <= constraints.day_end_hour <= 24:
        raise ConfigurationError(
            f"Day hours must lie within 0-24: {constraints.day_start_hour}-{constraints.day_end_hour}"
        )

    if constraints.day_end_hour <= constraints.day_start_hour:
        raise ConfigurationError(
            f"Day end hour {constraints.day_end_hour} must be after day start hour {constraints.day_start_hour}"
        )

    for name in (
        "max_study_minutes_per_day",
        "max_study_minutes_per_block",
        "min_gap_between_blocks_minutes",
    ):
        if getattr(constraints, name) < 0:
            raise ConfigurationError(f"{name} must not be negative")

    for start, end in constraints.do_not_schedule_windows:
        if end < start:
            raise ConfigurationError(f"Blackout window {start} - {end} is inverted")


def effective_max_block(task: Task, constraints: Constraints) -> int:
    """Largest block a task may occupy: the tighter of its own and the global block cap."""
    return min(task.max_block_minutes, constraints.max_study_minutes_per_block)


def _localize(naive: datetime, tz) -> datetime:
    if tz is None:
        return naive
    # pytz zones pin one UTC offset per tzinfo instance and must resolve it per date
    if hasattr(tz, "localize"):
        return tz.localize(naive)
    return naive.replace(tzinfo=tz)


def day_window(day: date, constraints: Constraints) -> Tuple[datetime, datetime]:
    """Work window of one calendar day, as wall-clock hours in the horizon's timezone."""
    midnight = datetime.combine(day, time(0, 0))
    tz = constraints.horizon_start.tzinfo
    return (
        _localize(midnight + timedelta(hours=constraints.day_start_hour), tz),
        _localize(midnight + timedelta(hours=constraints.day_end_hour), tz),
    )


def horizon_days(first: date, last: date):
    """Yield every calendar day from first through last inclusive."""
    current = first
    while current <= last:
        yield current
        current += timedelta(days=1)


def can_place_block(
    task: Task,
    start: datetime,
    end: datetime,
    constraints: Constraints,
    remaining_capacity: Dict[date, int],
) -> bool:
    """
    Check the hard constraints a committed block must satisfy.

    Overlap with obstacles is not checked here; free intervals produced by
    the free-time calculator already exclude them.

    Args:
        task: Task the block belongs to
        start: Candidate block start
        end: Candidate block end
        constraints: Request constraints
        remaining_capacity: Minutes still available per day

    Returns:
        True if the block can be committed, False otherwise
    """
    duration = int((end - start).total_seconds() // 60)

    # 1. Block size
    if duration <= 0 or duration > effective_max_block(task, constraints):
        return False

    # 2. Daily cap
    if duration > remaining_capacity.get(start.date(), 0):
        return False

    # 3. Deadline
    if task.due is not None and end > task.due:
        return False

    # 4. Horizon
    if start < constraints.horizon_start or end > constraints.horizon_end:
        return False

    # 5. Work window
    window_start, window_end = day_window(start.date(), constraints)
    return window_start <= start and end <= window_end


def placement_floor(constraints: Constraints, now: Optional[datetime]) -> datetime:
    """Earliest instant any block may start."""
    if now is None or now < constraints.horizon_start:
        return constraints.horizon_start
    return now
