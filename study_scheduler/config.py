"""
SchedulerConfig: user-configurable scheduling settings.

Loaded from YAML (``.yaml`` / ``.yml``) or JSON; every field has a default so
a partial file only overrides what it names.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

import yaml

from study_scheduler.entities import Constraints, SchedulerPreferences, TaskCategory, uniform_energy_profile
from study_scheduler.errors import ConfigurationError


@dataclass
class WorkDay:
    start_hour: int = 8
    end_hour: int = 20


@dataclass
class Limits:
    max_study_minutes_per_day: int = 360
    max_study_minutes_per_block: int = 120
    min_gap_between_blocks_minutes: int = 10


@dataclass
class Weights:
    energy: float = 0.4
    urgency: float = 0.4
    importance: float = 0.15
    difficulty: float = 0.05


@dataclass
class LearningSettings:
    alpha: float = 0.2
    course_learning_rate: float = 0.05


@dataclass
class SchedulerConfig:
    timezone: Optional[str] = None
    work_day: WorkDay = field(default_factory=WorkDay)
    limits: Limits = field(default_factory=Limits)
    weights: Weights = field(default_factory=Weights)
    learning: LearningSettings = field(default_factory=LearningSettings)
    scan_granularity_minutes: int = 15
    energy_profile: Dict[int, float] = field(default_factory=uniform_energy_profile)
    preferred_block_minutes: Dict[str, int] = field(default_factory=dict)
    course_bias: Dict[str, float] = field(default_factory=dict)

    def constraints_for(
        self,
        horizon_start: datetime,
        horizon_end: datetime,
        blackouts: Iterable[Tuple[datetime, datetime]] = (),
    ) -> Constraints:
        """Build engine constraints for one horizon."""
        return Constraints(
            horizon_start=horizon_start,
            horizon_end=horizon_end,
            day_start_hour=self.work_day.start_hour,
            day_end_hour=self.work_day.end_hour,
            max_study_minutes_per_day=self.limits.max_study_minutes_per_day,
            max_study_minutes_per_block=self.limits.max_study_minutes_per_block,
            min_gap_between_blocks_minutes=self.limits.min_gap_between_blocks_minutes,
            do_not_schedule_windows=tuple(blackouts),
            energy_profile=dict(self.energy_profile),
        )

    def preferences(self) -> SchedulerPreferences:
        """Build scoring preferences from the configured weights."""
        return SchedulerPreferences(
            energy_weight=self.weights.energy,
            urgency_weight=self.weights.urgency,
            importance_weight=self.weights.importance,
            difficulty_weight=self.weights.difficulty,
            scan_granularity_minutes=self.scan_granularity_minutes,
            preferred_block_minutes={
                TaskCategory.parse(name): int(minutes) for name, minutes in self.preferred_block_minutes.items()
            },
            course_bias={str(k): float(v) for k, v in self.course_bias.items()},
        )


def _section(raw: Dict[str, Any], key: str, cls):
    values = raw.get(key) or {}
    if not isinstance(values, dict):
        raise ConfigurationError(f"Config section '{key}' must be a mapping")
    try:
        return cls(**values)
    except TypeError as e:
        raise ConfigurationError(f"Unknown setting in '{key}': {e}") from e


def _energy_profile(raw: Optional[Dict[Any, Any]]) -> Dict[int, float]:
    profile = uniform_energy_profile()
    for hour, weight in (raw or {}).items():
        hour = int(hour)
        weight = float(weight)
        if not 0 <= hour <= 23:
            raise ConfigurationError(f"Energy profile hour out of range: {hour}")
        if not 0.0 <= weight <= 1.0:
            raise ConfigurationError(f"Energy weight for hour {hour} must lie in [0, 1]: {weight}")
        profile[hour] = weight
    return profile


def validate_config(cfg: SchedulerConfig) -> None:
    """
    Validate settings that the engine would otherwise reject per request.

    Raises:
        ConfigurationError: If any setting is out of range
    """
    if not 0 <= cfg.work_day.start_hour < cfg.work_day.end_hour <= 24:
        raise ConfigurationError(
            f"Work day must satisfy 0 <= start < end <= 24: {cfg.work_day.start_hour}-{cfg.work_day.end_hour}"
        )
    for name, value in vars(cfg.limits).items():
        if value < 0:
            raise ConfigurationError(f"limits.{name} must not be negative: {value}")
    for name, value in vars(cfg.weights).items():
        if value < 0:
            raise ConfigurationError(f"weights.{name} must not be negative: {value}")
    if cfg.scan_granularity_minutes <= 0:
        raise ConfigurationError("scan_granularity_minutes must be positive")
    if not 0.0 < cfg.learning.alpha <= 1.0:
        raise ConfigurationError(f"learning.alpha must lie in (0, 1]: {cfg.learning.alpha}")


def config_from_dict(raw: Dict[str, Any]) -> SchedulerConfig:
    cfg = SchedulerConfig(
        timezone=raw.get("timezone"),
        work_day=_section(raw, "work_day", WorkDay),
        limits=_section(raw, "limits", Limits),
        weights=_section(raw, "weights", Weights),
        learning=_section(raw, "learning", LearningSettings),
        scan_granularity_minutes=int(raw.get("scan_granularity_minutes", 15)),
        energy_profile=_energy_profile(raw.get("energy_profile")),
        preferred_block_minutes=dict(raw.get("preferred_block_minutes") or {}),
        course_bias=dict(raw.get("course_bias") or {}),
    )
    validate_config(cfg)
    return cfg


def load_config(path: str | Path | None = None) -> SchedulerConfig:
    """
    Load configuration from a YAML or JSON file.

    Args:
        path: Config file; None returns the defaults

    Returns:
        Validated SchedulerConfig

    Raises:
        ConfigurationError: If the file is malformed or a value is out of range
    """
    if path is None:
        return SchedulerConfig()

    path = Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            raw = json.loads(text)
        else:
            raw = yaml.safe_load(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not parse config {path}: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config {path} must contain a mapping at the top level")
    return config_from_dict(raw)
