"""Tests for the command-line interface."""

import pandas as pd
import pytest
import yaml

from study_scheduler.cli import main
from study_scheduler.domain.db import get_session
from study_scheduler.domain.repositories import StudyBlockRepository


@pytest.fixture
def inputs(tmp_path):
    """Tasks and events CSVs for one week."""
    tasks = tmp_path / "tasks.csv"
    tasks.write_text(
        "id,title,estimated_minutes,due,category\n"
        "1,Essay draft,120,2025-03-05T17:00:00,\n"
        "2,Exam review,180,2025-03-07T09:00:00,exam\n"
    )
    events = tmp_path / "events.csv"
    events.write_text("id,title,start,end\nlec,Lecture,2025-03-03T09:00:00,2025-03-03T11:00:00\n")
    return tasks, events


def _horizon():
    return ["--start", "2025-03-03T00:00:00", "--end", "2025-03-10T00:00:00"]


def test_generate_validate_summarize(tmp_path, inputs, capsys):
    """Test the generate -> validate -> summarize round."""
    tasks, events = inputs
    out = tmp_path / "blocks.csv"
    base = ["--tasks", str(tasks), "--events", str(events), "--config", "./scheduler_config.yaml", *_horizon()]

    main(["generate", *base, "--out", str(out), "--log-level", "WARNING"])
    blocks = pd.read_csv(out)
    assert set(blocks["task_id"].astype(str)) == {"1", "2"}
    assert "[OK] Generated" in capsys.readouterr().out

    main(["validate", *base, "--blocks", str(out)])
    assert "[OK] Validation passed" in capsys.readouterr().out

    main(["summarize", "--blocks", str(out)])
    assert "Minutes per day:" in capsys.readouterr().out


def test_generate_persists_to_database(tmp_path, inputs):
    """Test that --persist writes blocks to the given database."""
    tasks, events = inputs
    db_url = f"sqlite:///{tmp_path / 'planner.db'}"

    main(["--db", db_url, "init-db"])
    main(["--db", db_url, "generate", "--tasks", str(tasks), "--events", str(events), *_horizon(), "--persist"])

    session = get_session(db_url)
    try:
        assert len(StudyBlockRepository.get_all(session)) >= 4
    finally:
        session.close()


def test_learn_writes_preferences(tmp_path):
    """Test that learn folds feedback into a preferences file."""
    feedback = tmp_path / "feedback.csv"
    feedback.write_text(
        "block_id,task_id,start,end,completion,action\n"
        "1:0,1,2025-03-03T09:00:00,2025-03-03T10:00:00,1.0,kept\n"
    )
    out = tmp_path / "learned.yaml"

    main(["learn", "--feedback", str(feedback), "--out", str(out)])

    state = yaml.safe_load(out.read_text())
    assert state["learned_energy_profile"][9] == pytest.approx(0.6)
    assert state["preferred_block_minutes"] == {"regular": 52}
