"""SQLAlchemy models for persisted schedule output."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class ScheduleRun(Base):
    """One invocation of the scheduler whose output was persisted."""

    __tablename__ = "schedule_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    scheduler = Column(String(50), nullable=False, default="greedy")
    horizon_start = Column(DateTime(timezone=True), nullable=False)
    horizon_end = Column(DateTime(timezone=True), nullable=False)
    requested_minutes = Column(Integer, nullable=False, default=0)
    scheduled_minutes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    blocks = relationship("StudyBlock", back_populates="run")
    unscheduled = relationship("UnscheduledEntry", back_populates="run")

    def __repr__(self) -> str:
        return f"<ScheduleRun(id={self.id}, horizon={self.horizon_start}..{self.horizon_end})>"


class StudyBlock(Base):
    """A committed study block, linked to the task it works on."""

    __tablename__ = "study_blocks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    block_id = Column(String(100), nullable=False)
    run_id = Column(Integer, ForeignKey("schedule_runs.id"), nullable=True)
    task_id = Column(String(100), nullable=False, index=True)
    session_index = Column(Integer, nullable=False, default=0)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    score = Column(Float, nullable=True)

    # Relationships
    run = relationship("ScheduleRun", back_populates="blocks")

    def __repr__(self) -> str:
        return f"<StudyBlock(id={self.block_id}, task={self.task_id}, start={self.start_time})>"


class UnscheduledEntry(Base):
    """A task or session the run could not place, surfaced as a warning."""

    __tablename__ = "unscheduled_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(Integer, ForeignKey("schedule_runs.id"), nullable=False)
    task_id = Column(String(100), nullable=False)
    session_index = Column(Integer, nullable=True)
    minutes = Column(Integer, nullable=False, default=0)
    reason = Column(String(50), nullable=False)

    # Relationships
    run = relationship("ScheduleRun", back_populates="unscheduled")

    def __repr__(self) -> str:
        return f"<UnscheduledEntry(task={self.task_id}, session={self.session_index}, reason={self.reason})>"
