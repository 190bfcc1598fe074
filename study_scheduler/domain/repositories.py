"""Repository classes for schedule persistence."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from .models import ScheduleRun, StudyBlock, UnscheduledEntry


class StudyBlockRepository:
    """Repository for study block data access."""

    @staticmethod
    def get_all(session: Session) -> List[StudyBlock]:
        """Get all blocks ordered by start."""
        return session.query(StudyBlock).order_by(StudyBlock.start_time).all()

    @staticmethod
    def get_by_task(session: Session, task_id: str) -> List[StudyBlock]:
        """Get all blocks for one task."""
        return (
            session.query(StudyBlock)
            .filter(StudyBlock.task_id == task_id)
            .order_by(StudyBlock.start_time)
            .all()
        )

    @staticmethod
    def get_in_range(session: Session, start: datetime, end: datetime) -> List[StudyBlock]:
        """Get blocks starting within [start, end)."""
        return (
            session.query(StudyBlock)
            .filter(StudyBlock.start_time >= start, StudyBlock.start_time < end)
            .order_by(StudyBlock.start_time)
            .all()
        )

    @staticmethod
    def bulk_create(session: Session, blocks: List[StudyBlock]) -> None:
        """Create multiple blocks."""
        session.add_all(blocks)
        session.commit()

    @staticmethod
    def delete_in_range(session: Session, start: datetime, end: datetime) -> int:
        """Delete blocks starting within [start, end). Returns number of deleted rows."""
        count = (
            session.query(StudyBlock)
            .filter(StudyBlock.start_time >= start, StudyBlock.start_time < end)
            .delete(synchronize_session=False)
        )
        session.commit()
        return count


class ScheduleRunRepository:
    """Repository for schedule run data access."""

    @staticmethod
    def create(session: Session, run: ScheduleRun) -> ScheduleRun:
        """Create a new run."""
        session.add(run)
        session.commit()
        session.refresh(run)
        return run

    @staticmethod
    def get_latest(session: Session) -> Optional[ScheduleRun]:
        """Get the most recently recorded run."""
        return session.query(ScheduleRun).order_by(ScheduleRun.id.desc()).first()

    @staticmethod
    def get_unscheduled(session: Session, run_id: int) -> List[UnscheduledEntry]:
        """Get the unscheduled entries recorded for a run."""
        return (
            session.query(UnscheduledEntry)
            .filter(UnscheduledEntry.run_id == run_id)
            .order_by(UnscheduledEntry.id)
            .all()
        )
