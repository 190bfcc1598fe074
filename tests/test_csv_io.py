"""Tests for CSV import/export functionality."""

import datetime as dt

import pandas as pd
import pytest

from study_scheduler.engine.greedy import GreedyScheduler
from study_scheduler.entities import ExternallyFixed, Schedulable, TaskCategory
from study_scheduler.io.export_csv import BLOCK_COLUMNS, write_blocks_csv
from study_scheduler.io.import_csv import (
    import_blackouts_csv,
    import_blocks_csv,
    import_feedback_csv,
    import_fixed_events_csv,
    import_tasks_csv,
)
from study_scheduler.learning import FeedbackAction


def test_import_tasks_csv(tmp_path):
    """Test importing tasks from CSV."""
    csv_content = """id,title,estimated_minutes,due,category,difficulty,course_id,locked_start,locked_end,completed,prerequisites
101,Read chapter 3,60,2025-03-05T17:00:00,reading,0.3,BIO101,,,FALSE,
102,Midterm review,180,2025-03-07T09:00:00,Exam,0.8,BIO101,,,,101
103,Lab report,90,,,,,2025-03-04T10:00:00,2025-03-04T11:30:00,,
104,Old quiz,30,,quiz,,,,,TRUE,
"""
    csv_file = tmp_path / "tasks.csv"
    csv_file.write_text(csv_content)

    tasks = import_tasks_csv(csv_file)
    assert [t.id for t in tasks] == ["101", "102", "103", "104"]

    # Check reading task
    reading = tasks[0]
    assert reading.due == dt.datetime(2025, 3, 5, 17)
    assert reading.category == TaskCategory.REGULAR
    assert reading.course_id == "BIO101"
    assert reading.min_block_minutes == 25
    assert isinstance(reading.placement, Schedulable)

    # Check exam task
    exam = tasks[1]
    assert exam.category == TaskCategory.EXAM_PREP
    assert exam.prerequisites == ("101",)

    # Check pinned and completed tasks
    assert tasks[2].placement == ExternallyFixed(dt.datetime(2025, 3, 4, 10), dt.datetime(2025, 3, 4, 11, 30))
    assert tasks[2].due is None
    assert tasks[3].completed
    assert tasks[3].category == TaskCategory.EXAM_PREP


def test_import_tasks_rejects_inverted_block_limits(tmp_path):
    """Test that min_block_minutes above max_block_minutes is refused."""
    csv_file = tmp_path / "tasks.csv"
    csv_file.write_text("id,title,estimated_minutes,min_block_minutes,max_block_minutes\n1,Essay,60,90,30\n")

    with pytest.raises(ValueError, match="exceeds"):
        import_tasks_csv(csv_file)


def test_missing_columns_reported(tmp_path):
    """Test that required columns are checked."""
    csv_file = tmp_path / "tasks.csv"
    csv_file.write_text("id,title\n1,Essay\n")

    with pytest.raises(ValueError, match="estimated_minutes"):
        import_tasks_csv(csv_file)


def test_import_events_and_blackouts_with_timezone(tmp_path):
    """Test that naive timestamps are localized to the configured zone."""
    events_file = tmp_path / "events.csv"
    events_file.write_text("id,title,start,end\nlec1,Lecture,2025-03-03T09:00:00,2025-03-03T10:00:00\n")
    blackouts_file = tmp_path / "blackouts.csv"
    blackouts_file.write_text("start,end\n2025-03-03T12:00:00,2025-03-03T13:00:00\n")

    events = import_fixed_events_csv(events_file, timezone="Australia/Sydney")
    blackouts = import_blackouts_csv(blackouts_file)

    assert events[0].id == "lec1"
    assert events[0].title == "Lecture"
    assert events[0].start.utcoffset() == dt.timedelta(hours=11)
    assert blackouts == [(dt.datetime(2025, 3, 3, 12), dt.datetime(2025, 3, 3, 13))]


def test_write_and_read_blocks(tmp_path, make_constraints, make_task, monday):
    """Test exporting a schedule and loading its blocks back."""
    constraints = make_constraints(
        horizon_start=monday.replace(hour=8),
        horizon_end=monday.replace(hour=20),
        max_study_minutes_per_day=120,
    )
    tasks = [make_task("a", estimated_minutes=90), make_task("b", estimated_minutes=90)]
    result = GreedyScheduler().make_schedule(tasks, [], constraints)

    out = tmp_path / "blocks.csv"
    count = write_blocks_csv(out, result)

    assert count == 1
    frame = pd.read_csv(out)
    assert list(frame.columns) == BLOCK_COLUMNS
    unscheduled = pd.read_csv(tmp_path / "blocks_unscheduled.csv")
    assert list(unscheduled["task_id"]) == ["b"]

    blocks = import_blocks_csv(out)
    assert [(b.id, b.start, b.end) for b in blocks] == [(b.id, b.start, b.end) for b in result.blocks]


def test_import_feedback_csv(tmp_path):
    """Test importing block feedback."""
    csv_file = tmp_path / "feedback.csv"
    csv_file.write_text(
        "block_id,task_id,course_id,category,start,end,completion,action\n"
        "101:0,101,BIO101,exam,2025-03-03T09:00:00,2025-03-03T10:00:00,0.9,Kept\n"
        "102:0,102,,,2025-03-03T21:00:00,2025-03-03T21:30:00,0.0,deleted\n"
    )

    records = import_feedback_csv(csv_file)

    assert records[0].block_id == "101:0"
    assert records[0].action == FeedbackAction.KEPT
    assert records[0].category == TaskCategory.EXAM_PREP
    assert records[0].succeeded
    assert records[1].course_id is None
    assert records[1].failed


def test_import_feedback_rejects_bad_values(tmp_path):
    """Test that completion outside [0, 1] and unknown actions are refused."""
    header = "block_id,task_id,start,end,completion,action\n"
    bad_completion = tmp_path / "bad_completion.csv"
    bad_completion.write_text(header + "1:0,1,2025-03-03T09:00:00,2025-03-03T10:00:00,1.5,kept\n")
    bad_action = tmp_path / "bad_action.csv"
    bad_action.write_text(header + "1:0,1,2025-03-03T09:00:00,2025-03-03T10:00:00,0.5,skipped\n")

    with pytest.raises(ValueError, match="completion"):
        import_feedback_csv(bad_completion)
    with pytest.raises(ValueError):
        import_feedback_csv(bad_action)
