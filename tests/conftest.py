"""Pytest configuration and shared fixtures."""

import datetime as dt

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from study_scheduler.domain.models import Base
from study_scheduler.entities import Constraints, Task


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def monday():
    """Midnight of a Monday used as the default horizon start."""
    return dt.datetime(2025, 3, 3)


@pytest.fixture
def make_constraints(monday):
    """Factory for Constraints over a one-week horizon starting on monday."""

    def _make(**overrides):
        values = dict(horizon_start=monday, horizon_end=monday + dt.timedelta(days=7))
        values.update(overrides)
        return Constraints(**values)

    return _make


@pytest.fixture
def make_task():
    """Factory for Task with sensible defaults."""

    def _make(task_id="t1", **overrides):
        values = dict(id=task_id, title=f"Task {task_id}", estimated_minutes=60)
        values.update(overrides)
        return Task(**values)

    return _make


@pytest.fixture
def db_session():
    """Create in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
