"""Request-level errors raised by the scheduler."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Malformed constraints or configuration; the whole request is rejected."""
