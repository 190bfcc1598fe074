"""Scheduler implementations and the orchestrator that runs them."""

from .base import BaseScheduler
from .greedy import GreedyScheduler
from .orchestrator import build_schedule, persist_schedule

__all__ = ["BaseScheduler", "GreedyScheduler", "build_schedule", "persist_schedule"]
