"""Services for scheduling logic."""

from .constraints import can_place_block, effective_max_block, validate_constraints
from .decomposition import SessionDecomposer
from .free_time import FreeTimeCalculator
from .scoring import SlotScorer

__all__ = [
    "can_place_block",
    "effective_max_block",
    "validate_constraints",
    "SessionDecomposer",
    "FreeTimeCalculator",
    "SlotScorer",
]
