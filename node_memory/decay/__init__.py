"""
Decay module for retention signals.

Provides:
- Decay laws for the time score (exponential, linear, stepwise)
- Importance scoring by node kind and pin state
- Interaction counting for the frequency score
"""

from node_memory.decay.frequency import FrequencyScorer, InteractionLog
from node_memory.decay.functions import (
    DECAY_FUNCTIONS,
    DecayInput,
    TimeDecayCalculator,
    exponential_decay,
    linear_decay,
    stepwise_decay,
)
from node_memory.decay.importance import ImportanceScorer

__all__ = [
    # Decay functions
    "DecayInput",
    "TimeDecayCalculator",
    "exponential_decay",
    "linear_decay",
    "stepwise_decay",
    "DECAY_FUNCTIONS",
    # Importance
    "ImportanceScorer",
    # Frequency
    "InteractionLog",
    "FrequencyScorer",
]
