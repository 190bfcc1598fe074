from __future__ import annotations

from datetime import timedelta
from typing import Dict, Sequence

from study_scheduler.entities import Constraints, ExternallyFixed, FixedEvent, ScheduleResult, Task
from study_scheduler.io.export_csv import blocks_to_frame
from study_scheduler.services.constraints import day_window, effective_max_block


def validate_schedule(
    result: ScheduleResult,
    tasks: Sequence[Task],
    fixed_events: Sequence[FixedEvent],
    constraints: Constraints,
) -> None:
    """
    Check every guarantee a schedule must satisfy.

    Raises:
        ValueError: Naming the first violated guarantee
    """
    task_lookup: Dict[str, Task] = {task.id: task for task in tasks}
    gap = timedelta(minutes=constraints.min_gap_between_blocks_minutes)

    for block in result.blocks:
        # 1. Referential integrity
        task = task_lookup.get(block.task_id)
        if task is None:
            raise ValueError(f"Block {block.id} references unknown task {block.task_id}")

        # 2. Horizon
        if block.start < constraints.horizon_start or block.end > constraints.horizon_end:
            raise ValueError(f"Block {block.id} falls outside the horizon: {block.start} - {block.end}")

        # 3. Work window
        window_start, window_end = day_window(block.start.date(), constraints)
        if block.start < window_start or block.end > window_end:
            raise ValueError(
                f"Block {block.id} falls outside the work window {window_start:%H:%M}-{window_end:%H:%M}: "
                f"{block.start} - {block.end}"
            )

        # 4. Block size
        duration = block.duration_minutes
        max_block = effective_max_block(task, constraints)
        min_block = min(task.min_block_minutes, task.estimated_minutes)
        if duration > max_block or duration < min_block:
            raise ValueError(
                f"Block {block.id} lasts {duration} min, outside [{min_block}, {max_block}]"
            )

        # 5. Deadline
        if task.due is not None and block.end > task.due:
            raise ValueError(f"Block {block.id} ends after task {task.id} is due: {block.end} > {task.due}")

    # 6. Obstacles, padded by the minimum gap
    obstacles = [(e.start, e.end, f"fixed event {e.id or e.title or e.start}") for e in fixed_events]
    obstacles.extend((start, end, "blackout window") for start, end in constraints.do_not_schedule_windows)
    obstacles.extend(
        (t.placement.start, t.placement.end, f"pinned task {t.id}")
        for t in tasks
        if isinstance(t.placement, ExternallyFixed) and not t.completed
    )
    for block in result.blocks:
        for start, end, label in obstacles:
            if block.start < end + gap and start - gap < block.end:
                raise ValueError(f"Block {block.id} overlaps {label} ({start} - {end}) or its gap buffer")

    # 7. No overlaps, minimum gap between blocks
    ordered = sorted(result.blocks, key=lambda b: b.start)
    for prev, nxt in zip(ordered, ordered[1:]):
        if nxt.start < prev.end + gap:
            raise ValueError(
                f"Blocks {prev.id} and {nxt.id} are closer than "
                f"{constraints.min_gap_between_blocks_minutes} min"
            )

    # 8. Daily cap
    frame = blocks_to_frame(result.blocks)
    if not frame.empty:
        frame["day"] = frame["start"].map(lambda ts: ts.date())
        per_day = frame.groupby("day")["duration_minutes"].sum()
        over = per_day[per_day > constraints.max_study_minutes_per_day]
        if not over.empty:
            day, minutes = next(iter(over.items()))
            raise ValueError(
                f"Daily cap exceeded on {day}: {minutes} > {constraints.max_study_minutes_per_day} minutes"
            )


def summarize_schedule(result: ScheduleResult) -> str:
    if not result.blocks and not result.unscheduled:
        return "No blocks."

    lines = []
    frame = blocks_to_frame(result.blocks)
    if not frame.empty:
        frame["day"] = frame["start"].map(lambda ts: ts.strftime("%Y-%m-%d"))
        per_day = frame.groupby("day")["duration_minutes"].sum()
        per_task = frame.groupby("task_id").agg(
            blocks=("id", "count"),
            minutes=("duration_minutes", "sum"),
        )
        lines.append("Minutes per day:")
        lines.append(per_day.to_string())
        lines.append("")
        lines.append("Blocks per task:")
        lines.append(per_task.to_string())

    if result.unscheduled:
        if lines:
            lines.append("")
        lines.append("Could not be scheduled:")
        for item in result.unscheduled:
            session = "task" if item.session_index is None else f"session {item.session_index}"
            lines.append(f"  - {item.task_id} ({session}, {item.minutes} min): {item.reason.value}")

    return "\n".join(lines)
