"""Persistence models and data access layer for schedule output."""

from .models import Base, ScheduleRun, StudyBlock, UnscheduledEntry
from .repositories import ScheduleRunRepository, StudyBlockRepository

__all__ = [
    "Base",
    "ScheduleRun",
    "StudyBlock",
    "UnscheduledEntry",
    "ScheduleRunRepository",
    "StudyBlockRepository",
]
