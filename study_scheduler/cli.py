"""Command-line interface for the study scheduler."""

from __future__ import annotations

import argparse
from typing import List, Optional

from study_scheduler.config import load_config
from study_scheduler.domain.db import DEFAULT_DB_URL, get_session, init_database
from study_scheduler.engine.orchestrator import build_schedule
from study_scheduler.entities import ScheduleDiagnostics, ScheduleResult
from study_scheduler.io.export_csv import write_blocks_csv
from study_scheduler.io.import_csv import (
    import_blackouts_csv,
    import_blocks_csv,
    import_feedback_csv,
    import_fixed_events_csv,
    import_tasks_csv,
    parse_timestamp,
)
from study_scheduler.learning import load_learned_preferences, save_learned_preferences, update_preferences
from study_scheduler.log_config import configure_logging
from study_scheduler.validator import summarize_schedule, validate_schedule


def _load_inputs(args: argparse.Namespace):
    """Config, tasks, fixed events and constraints shared by generate and validate."""
    cfg = load_config(args.config)
    tz = cfg.timezone

    tasks = import_tasks_csv(args.tasks, timezone=tz)
    events = import_fixed_events_csv(args.events, timezone=tz) if args.events else []
    blackouts = import_blackouts_csv(args.blackouts, timezone=tz) if args.blackouts else []

    start = parse_timestamp(args.start, tz)
    end = parse_timestamp(args.end, tz)
    constraints = cfg.constraints_for(start, end, blackouts)
    return cfg, tasks, events, constraints


def _cmd_init_db(args: argparse.Namespace) -> None:
    """Initialize the database."""
    db_url = args.db or DEFAULT_DB_URL
    init_database(db_url)
    print(f"[OK] Database initialized: {db_url}")


def _cmd_generate(args: argparse.Namespace) -> None:
    """Generate a schedule for a horizon."""
    configure_logging(log_level=args.log_level)
    cfg, tasks, events, constraints = _load_inputs(args)

    preferences = cfg.preferences()
    if args.learned:
        preferences = load_learned_preferences(args.learned, preferences)

    session = get_session(args.db or DEFAULT_DB_URL) if args.persist else None
    try:
        result = build_schedule(
            tasks,
            events,
            constraints,
            preferences,
            now=parse_timestamp(args.now, cfg.timezone),
            session=session,
            persist=args.persist,
        )
    except Exception as e:
        if session is not None:
            session.rollback()
        print(f"[ERROR] Generation failed: {e}")
        raise
    finally:
        if session is not None:
            session.close()

    if args.out:
        write_blocks_csv(args.out, result)

    for line in result.diagnostics.log:
        print(f"[INFO] {line}")
    print(f"[OK] Generated {len(result.blocks)} blocks for {len(tasks)} tasks")


def _cmd_validate(args: argparse.Namespace) -> None:
    """Validate a blocks CSV against the inputs it was generated from."""
    _, tasks, events, constraints = _load_inputs(args)
    blocks = import_blocks_csv(args.blocks)
    result = ScheduleResult(blocks=blocks, unscheduled=[], diagnostics=ScheduleDiagnostics())

    try:
        validate_schedule(result, tasks, events, constraints)
    except ValueError as e:
        print(f"[ERROR] Validation failed: {e}")
        raise
    print(f"[OK] Validation passed for {len(blocks)} blocks")


def _cmd_summarize(args: argparse.Namespace) -> None:
    """Print per-day and per-task totals for a blocks CSV."""
    blocks = import_blocks_csv(args.blocks)
    print(summarize_schedule(ScheduleResult(blocks=blocks, unscheduled=[], diagnostics=ScheduleDiagnostics())))


def _cmd_learn(args: argparse.Namespace) -> None:
    """Fold block feedback into the learned preferences file."""
    configure_logging(log_level=args.log_level)
    cfg = load_config(args.config)
    feedback = import_feedback_csv(args.feedback, timezone=cfg.timezone)

    preferences = cfg.preferences()
    if args.learned:
        preferences = load_learned_preferences(args.learned, preferences)

    updated = update_preferences(
        feedback,
        preferences,
        alpha=cfg.learning.alpha,
        course_learning_rate=cfg.learning.course_learning_rate,
    )
    save_learned_preferences(args.out, updated)
    print(f"[OK] Learned from {len(feedback)} feedback records")


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="study-scheduler",
        description="Study planner: place task sessions into free calendar time",
    )

    # Global options
    parser.add_argument("--db", help=f"Database URL (default: {DEFAULT_DB_URL})")

    sub = parser.add_subparsers(dest="command", required=True)

    def add_inputs(p: argparse.ArgumentParser) -> None:
        p.add_argument("--tasks", required=True, help="Path to tasks CSV")
        p.add_argument("--events", help="Path to fixed events CSV")
        p.add_argument("--blackouts", help="Path to do-not-schedule windows CSV")
        p.add_argument("--config", help="Path to config YAML/JSON (defaults apply when omitted)")
        p.add_argument("--start", required=True, help="Horizon start (ISO timestamp)")
        p.add_argument("--end", required=True, help="Horizon end (ISO timestamp)")

    # init-db command
    init = sub.add_parser("init-db", help="Initialize database")
    init.set_defaults(func=_cmd_init_db)

    # generate command
    gen = sub.add_parser("generate", help="Generate a study schedule")
    add_inputs(gen)
    gen.add_argument("--now", help="Do not schedule before this instant (ISO timestamp)")
    gen.add_argument("--learned", help="Learned preferences YAML to apply")
    gen.add_argument("--out", help="Optional: export blocks to CSV")
    gen.add_argument("--persist", action="store_true", help="Save blocks to the database")
    gen.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    gen.set_defaults(func=_cmd_generate)

    # validate command
    val = sub.add_parser("validate", help="Validate a blocks CSV")
    add_inputs(val)
    val.add_argument("--blocks", required=True, help="Blocks CSV written by generate")
    val.set_defaults(func=_cmd_validate)

    # summarize command
    summ = sub.add_parser("summarize", help="Summarize a blocks CSV")
    summ.add_argument("--blocks", required=True, help="Blocks CSV written by generate")
    summ.set_defaults(func=_cmd_summarize)

    # learn command
    learn = sub.add_parser("learn", help="Update learned preferences from block feedback")
    learn.add_argument("--feedback", required=True, help="Path to feedback CSV")
    learn.add_argument("--config", help="Path to config YAML/JSON")
    learn.add_argument("--learned", help="Existing learned preferences YAML to start from")
    learn.add_argument("--out", required=True, help="Where to write the learned preferences YAML")
    learn.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    learn.set_defaults(func=_cmd_learn)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
