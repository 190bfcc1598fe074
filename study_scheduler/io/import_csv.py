"""CSV import utilities that build engine inputs from planner exports."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

import pandas as pd

from study_scheduler.entities import ExternallyFixed, FixedEvent, Schedulable, ScheduledBlock, Task, TaskCategory
from study_scheduler.learning import BlockFeedback, FeedbackAction

TRUTHY = {"TRUE", "T", "1", "YES", "Y"}
ID_COLUMNS = {"id": str, "task_id": str, "block_id": str, "course_id": str, "prerequisites": str}


def _read(csv_path: str | Path, required: List[str]) -> pd.DataFrame:
    df = pd.read_csv(csv_path, dtype=ID_COLUMNS)

    # Normalize column names
    df.columns = df.columns.str.lower().str.strip()

    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"{csv_path} is missing required columns: {', '.join(missing)}")
    return df


def parse_timestamp(value, timezone: Optional[str] = None) -> Optional[datetime]:
    """Parse a CSV cell into a datetime, localized to `timezone` when naive."""
    if value is None or pd.isna(value) or str(value).strip() == "":
        return None
    ts = pd.Timestamp(value)
    if timezone is not None:
        ts = ts.tz_localize(timezone) if ts.tzinfo is None else ts.tz_convert(timezone)
    return ts.to_pydatetime()


def _optional_str(row: pd.Series, key: str) -> Optional[str]:
    value = row.get(key)
    if value is None or pd.isna(value) or str(value).strip() == "":
        return None
    return str(value).strip()


def import_tasks_csv(csv_path: str | Path, timezone: Optional[str] = None) -> List[Task]:
    """
    Load tasks from CSV.

    Required columns: id, title, estimated_minutes. Optional: course_id, due,
    min_block_minutes, max_block_minutes, difficulty, importance, category,
    locked_start, locked_end, completed, prerequisites (semicolon-separated ids).

    Args:
        csv_path: Path to tasks CSV
        timezone: IANA zone applied to naive timestamps

    Returns:
        Tasks in file order
    """
    df = _read(csv_path, ["id", "title", "estimated_minutes"])

    tasks = []
    for _, row in df.iterrows():
        locked_start = parse_timestamp(row.get("locked_start"), timezone)
        locked_end = parse_timestamp(row.get("locked_end"), timezone)
        if locked_start is not None and locked_end is not None:
            placement = ExternallyFixed(start=locked_start, end=locked_end)
        else:
            placement = Schedulable()

        prereqs = _optional_str(row, "prerequisites")
        task = Task(
            id=str(row["id"]),
            title=str(row["title"]),
            estimated_minutes=int(row["estimated_minutes"]),
            min_block_minutes=int(row["min_block_minutes"]) if pd.notna(row.get("min_block_minutes")) else 25,
            max_block_minutes=int(row["max_block_minutes"]) if pd.notna(row.get("max_block_minutes")) else 90,
            due=parse_timestamp(row.get("due"), timezone),
            course_id=_optional_str(row, "course_id"),
            difficulty=float(row["difficulty"]) if pd.notna(row.get("difficulty")) else 0.5,
            importance=float(row["importance"]) if pd.notna(row.get("importance")) else 0.5,
            category=TaskCategory.parse(row["category"]) if pd.notna(row.get("category")) else TaskCategory.REGULAR,
            placement=placement,
            completed=str(row.get("completed", "FALSE")).strip().upper() in TRUTHY,
            prerequisites=tuple(p.strip() for p in prereqs.split(";") if p.strip()) if prereqs else (),
        )
        if task.min_block_minutes > task.max_block_minutes:
            raise ValueError(
                f"Task {task.id}: min_block_minutes {task.min_block_minutes} exceeds "
                f"max_block_minutes {task.max_block_minutes}"
            )
        tasks.append(task)

    print(f"[INFO] Imported {len(tasks)} tasks from {csv_path}")
    return tasks


def import_fixed_events_csv(csv_path: str | Path, timezone: Optional[str] = None) -> List[FixedEvent]:
    """Load fixed events (columns: start, end, optional id, title)."""
    df = _read(csv_path, ["start", "end"])

    events = []
    for _, row in df.iterrows():
        events.append(
            FixedEvent(
                start=parse_timestamp(row["start"], timezone),
                end=parse_timestamp(row["end"], timezone),
                id=_optional_str(row, "id"),
                title=_optional_str(row, "title") or "",
            )
        )

    print(f"[INFO] Imported {len(events)} fixed events from {csv_path}")
    return events


def import_blackouts_csv(csv_path: str | Path, timezone: Optional[str] = None) -> List[Tuple[datetime, datetime]]:
    """Load blackout windows (columns: start, end)."""
    df = _read(csv_path, ["start", "end"])
    windows = [
        (parse_timestamp(row["start"], timezone), parse_timestamp(row["end"], timezone))
        for _, row in df.iterrows()
    ]
    print(f"[INFO] Imported {len(windows)} blackout windows from {csv_path}")
    return windows


def import_blocks_csv(csv_path: str | Path, timezone: Optional[str] = None) -> List[ScheduledBlock]:
    """Load scheduled blocks previously written by write_blocks_csv."""
    df = _read(csv_path, ["id", "task_id", "start", "end"])
    return [
        ScheduledBlock(
            id=str(row["id"]),
            task_id=str(row["task_id"]),
            start=parse_timestamp(row["start"], timezone),
            end=parse_timestamp(row["end"], timezone),
            session_index=int(row["session_index"]) if pd.notna(row.get("session_index")) else 0,
            score=float(row["score"]) if pd.notna(row.get("score")) else 0.0,
        )
        for _, row in df.iterrows()
    ]


def import_feedback_csv(csv_path: str | Path, timezone: Optional[str] = None) -> List[BlockFeedback]:
    """
    Load block feedback.

    Required columns: block_id, task_id, start, end, completion, action.
    Optional: category, course_id.

    Raises:
        ValueError: If completion falls outside [0, 1] or an action is unknown
    """
    df = _read(csv_path, ["block_id", "task_id", "start", "end", "completion", "action"])

    records = []
    for _, row in df.iterrows():
        completion = float(row["completion"])
        if not 0.0 <= completion <= 1.0:
            raise ValueError(f"Feedback for block {row['block_id']}: completion must lie in [0, 1], got {completion}")
        records.append(
            BlockFeedback(
                block_id=str(row["block_id"]),
                task_id=str(row["task_id"]),
                start=parse_timestamp(row["start"], timezone),
                end=parse_timestamp(row["end"], timezone),
                completion=completion,
                action=FeedbackAction(str(row["action"]).strip().lower()),
                category=TaskCategory.parse(row["category"]) if pd.notna(row.get("category")) else TaskCategory.REGULAR,
                course_id=_optional_str(row, "course_id"),
            )
        )

    print(f"[INFO] Imported {len(records)} feedback records from {csv_path}")
    return records
