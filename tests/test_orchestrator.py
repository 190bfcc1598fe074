"""Tests for the orchestrator - schedule generation, validation and persistence."""

import datetime as dt

import pytest

from study_scheduler.domain.repositories import ScheduleRunRepository, StudyBlockRepository
from study_scheduler.engine.base import BaseScheduler
from study_scheduler.engine.orchestrator import build_schedule
from study_scheduler.entities import FixedEvent, ScheduleDiagnostics, ScheduledBlock, ScheduleResult


@pytest.fixture
def sample_tasks(make_task, monday):
    """A small week of coursework."""
    return [
        make_task("essay", estimated_minutes=150, due=monday + dt.timedelta(days=2), importance=0.8),
        make_task("problems", estimated_minutes=90, due=monday + dt.timedelta(days=4)),
        make_task("reading", estimated_minutes=45),
    ]


@pytest.fixture
def sample_events(monday):
    """Lectures on Monday and Tuesday mornings."""
    return [
        FixedEvent(start=monday.replace(hour=9), end=monday.replace(hour=11), id="lec-mon"),
        FixedEvent(start=monday.replace(hour=9) + dt.timedelta(days=1),
                   end=monday.replace(hour=11) + dt.timedelta(days=1), id="lec-tue"),
    ]


def test_build_schedule_returns_validated_result(sample_tasks, sample_events, make_constraints, capsys):
    """Test that the orchestrator builds a complete valid schedule."""
    result = build_schedule(sample_tasks, sample_events, make_constraints())

    assert {b.task_id for b in result.blocks} == {"essay", "problems", "reading"}
    assert result.unscheduled == []
    assert result.diagnostics.scheduled_minutes == 150 + 90 + 45

    output = capsys.readouterr().out
    assert "[INFO] Running greedy scheduler" in output
    assert "[OK] greedy scheduler completed" in output


def test_build_schedule_persists_blocks(db_session, sample_tasks, sample_events, make_constraints):
    """Test that persist=True stores blocks, the run and unscheduled entries."""
    constraints = make_constraints()
    result = build_schedule(sample_tasks, sample_events, constraints, session=db_session, persist=True)

    stored = StudyBlockRepository.get_all(db_session)
    assert [b.block_id for b in stored] == [b.id for b in result.blocks]
    assert len(StudyBlockRepository.get_by_task(db_session, "essay")) == 2

    run = ScheduleRunRepository.get_latest(db_session)
    assert run.scheduler == "greedy"
    assert run.scheduled_minutes == result.diagnostics.scheduled_minutes
    assert all(b.run_id == run.id for b in stored)
    assert ScheduleRunRepository.get_unscheduled(db_session, run.id) == []


def test_rerun_replaces_horizon_blocks(db_session, sample_tasks, sample_events, make_constraints):
    """Test that persisting the same horizon twice does not duplicate blocks."""
    constraints = make_constraints()
    build_schedule(sample_tasks, sample_events, constraints, session=db_session, persist=True)
    first_count = len(StudyBlockRepository.get_all(db_session))

    build_schedule(sample_tasks, sample_events, constraints, session=db_session, persist=True)

    assert len(StudyBlockRepository.get_all(db_session)) == first_count
    assert ScheduleRunRepository.get_latest(db_session).id == 2


def test_unscheduled_items_are_persisted(db_session, make_task, make_constraints, monday):
    """Test that the could-not-be-scheduled list is stored with the run."""
    constraints = make_constraints(horizon_end=monday + dt.timedelta(days=1), max_study_minutes_per_day=60)
    tasks = [make_task("big", estimated_minutes=200)]

    build_schedule(tasks, [], constraints, session=db_session, persist=True)

    run = ScheduleRunRepository.get_latest(db_session)
    entries = ScheduleRunRepository.get_unscheduled(db_session, run.id)
    assert [e.session_index for e in entries] == [0, 1, 2]
    assert {e.reason for e in entries} == {"no_feasible_slot"}


def test_persist_requires_session(sample_tasks, make_constraints):
    """Test that persisting without a database session is refused."""
    with pytest.raises(ValueError, match="session"):
        build_schedule(sample_tasks, [], make_constraints(), persist=True)


def test_invalid_scheduler_output_is_rejected(make_task, make_constraints, monday):
    """Test that a scheduler producing overlapping blocks fails validation."""

    class OverlappingScheduler(BaseScheduler):
        name = "overlapping"

        def make_schedule(self, tasks, fixed_events, constraints, preferences=None, now=None):
            start = monday.replace(hour=9)
            blocks = [
                ScheduledBlock(id=f"{t.id}:0", task_id=t.id, start=start, end=start + dt.timedelta(hours=1))
                for t in tasks
            ]
            return ScheduleResult(blocks=blocks, unscheduled=[], diagnostics=ScheduleDiagnostics())

    tasks = [make_task("a"), make_task("b")]
    with pytest.raises(ValueError):
        build_schedule(tasks, [], make_constraints(), scheduler=OverlappingScheduler())
