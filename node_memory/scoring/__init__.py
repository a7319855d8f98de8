"""
Retention scoring and forgetting policy.
"""

from node_memory.scoring.calculator import ScoreCalculator
from node_memory.scoring.policy import (
    COMPONENT_PHRASES,
    MANUAL_REASON,
    ForgettingDecision,
    ForgettingPolicy,
    decide_forgetting,
    forgetting_reason,
)

__all__ = [
    "ScoreCalculator",
    "ForgettingPolicy",
    "ForgettingDecision",
    "decide_forgetting",
    "forgetting_reason",
    "COMPONENT_PHRASES",
    "MANUAL_REASON",
]
