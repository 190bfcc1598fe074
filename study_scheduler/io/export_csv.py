"""CSV export utilities for schedule results."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pandas as pd

from study_scheduler.entities import ScheduledBlock, ScheduleResult, UnscheduledItem

BLOCK_COLUMNS = ["id", "task_id", "session_index", "start", "end", "duration_minutes", "score"]
UNSCHEDULED_COLUMNS = ["task_id", "session_index", "minutes", "reason"]


def blocks_to_frame(blocks: Sequence[ScheduledBlock]) -> pd.DataFrame:
    """One row per block, ordered as given."""
    return pd.DataFrame(
        [
            {
                "id": b.id,
                "task_id": b.task_id,
                "session_index": b.session_index,
                "start": pd.Timestamp(b.start),
                "end": pd.Timestamp(b.end),
                "duration_minutes": b.duration_minutes,
                "score": b.score,
            }
            for b in blocks
        ],
        columns=BLOCK_COLUMNS,
    )


def unscheduled_to_frame(items: Sequence[UnscheduledItem]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "task_id": item.task_id,
                "session_index": item.session_index,
                "minutes": item.minutes,
                "reason": item.reason.value,
            }
            for item in items
        ],
        columns=UNSCHEDULED_COLUMNS,
    )


def write_blocks_csv(path: str | Path, result: ScheduleResult) -> int:
    """
    Write scheduled blocks to CSV, with unscheduled items alongside.

    The unscheduled list goes to ``<stem>_unscheduled.csv`` next to the
    blocks file when it is non-empty.

    Returns:
        Number of blocks written
    """
    path = Path(path)
    frame = blocks_to_frame(result.blocks)
    frame["start"] = frame["start"].map(lambda ts: ts.isoformat())
    frame["end"] = frame["end"].map(lambda ts: ts.isoformat())
    frame.to_csv(path, index=False)

    if result.unscheduled:
        unscheduled_path = path.with_name(f"{path.stem}_unscheduled.csv")
        unscheduled_to_frame(result.unscheduled).to_csv(unscheduled_path, index=False)
        print(f"[INFO] Wrote {len(result.unscheduled)} unscheduled items to {unscheduled_path}")

    return len(frame)
