"""
Decay laws for the time component of the retention score.

Each law maps a node's age (days since its last activity) to a value in
[0, 1] that never increases with age:
- Exponential: S(t) = e^(-λt)
- Linear: S(t) = max(0, 1 - λt)
- Stepwise: discrete age buckets, sharpened or flattened by λ
"""

import math
from typing import Protocol

from pydantic import BaseModel, Field

from node_memory.config import ScoringConfig
from node_memory.models.base import clamp
from node_memory.models.score import DecayStrategy

# Decay rate at which stepwise buckets apply unchanged
STEPWISE_REFERENCE_RATE = 0.1


class DecayInput(BaseModel):
    """Inputs for a single decay calculation."""

    age_days: float = Field(
        default=0.0,
        description="Days since the node's last activity",
        ge=0.0,
    )
    decay_rate: float = Field(
        default=0.1,
        description="Decay rate (lambda) per day",
        ge=0.0,
        le=1.0,
    )
    stepwise_buckets: list[tuple[float, float]] = Field(
        default=[(1.0, 1.0), (7.0, 0.7), (30.0, 0.4)],
    )
    stepwise_floor: float = Field(default=0.1, ge=0.0, le=1.0)


class DecayFunction(Protocol):
    """Protocol for decay functions."""

    def __call__(self, params: DecayInput) -> float:
        """Calculate the time score for the given age."""
        ...


def exponential_decay(params: DecayInput) -> float:
    """
    Ebbinghaus exponential decay.

    Formula: S(t) = e^(-λt), t in days.
    """
    strength = math.exp(-params.decay_rate * params.age_days)
    return clamp(strength)


def linear_decay(params: DecayInput) -> float:
    """
    Linear decay.

    Formula: S(t) = max(0, 1 - λt), t in days.
    """
    return clamp(1.0 - params.decay_rate * params.age_days)


def stepwise_decay(params: DecayInput) -> float:
    """
    Stepwise decay with discrete levels.

    Default levels:
    - 1.0: < 1 day
    - 0.7: < 7 days
    - 0.4: < 30 days
    - 0.1: older

    The bucket value is raised to ``λ / 0.1``: at the reference rate the
    buckets apply as listed, a rate of zero disables decay and higher rates
    push every bucket down.
    """
    level = params.stepwise_floor
    for bound, value in params.stepwise_buckets:
        if params.age_days < bound:
            level = value
            break

    exponent = params.decay_rate / STEPWISE_REFERENCE_RATE
    return clamp(math.pow(level, exponent))


# Registry of decay functions
DECAY_FUNCTIONS: dict[DecayStrategy, DecayFunction] = {
    DecayStrategy.EXPONENTIAL: exponential_decay,
    DecayStrategy.LINEAR: linear_decay,
    DecayStrategy.STEPWISE: stepwise_decay,
}


class TimeDecayCalculator:
    """
    Applies the configured decay law and the retention floor.
    """

    def __init__(self, config: ScoringConfig | None = None):
        self.config = config or ScoringConfig()

    def time_score(
        self,
        strategy: DecayStrategy,
        decay_rate: float,
        age_days: float,
        minimum_retention_score: float = 0.0,
    ) -> float:
        """
        Calculate the time score for a node.

        Args:
            strategy: Decay law to apply
            decay_rate: Rate (lambda) per day
            age_days: Days since the node's last activity
            minimum_retention_score: Floor the result never drops below

        Returns:
            Score within [minimum_retention_score, 1]
        """
        params = DecayInput(
            age_days=max(0.0, age_days),
            decay_rate=decay_rate,
            stepwise_buckets=self.config.stepwise_buckets,
            stepwise_floor=self.config.stepwise_floor,
        )
        raw = DECAY_FUNCTIONS[strategy](params)
        return clamp(raw, lower=minimum_retention_score)

    def estimate_days_to_score(
        self,
        strategy: DecayStrategy,
        decay_rate: float,
        target: float,
    ) -> float:
        """
        Estimate days of inactivity until the time score reaches ``target``.

        Returns:
            Days until the target (0 if already there, inf if never)
        """
        if target >= 1.0:
            return 0.0
        if decay_rate <= 0:
            return float("inf")

        if strategy == DecayStrategy.EXPONENTIAL:
            if target <= 0:
                return float("inf")
            # From e^(-λt) = target: t = -ln(target) / λ
            return max(0.0, -math.log(target) / decay_rate)

        if strategy == DecayStrategy.LINEAR:
            return max(0.0, (1.0 - max(0.0, target)) / decay_rate)

        exponent = decay_rate / STEPWISE_REFERENCE_RATE
        previous_bound = 0.0
        for bound, value in self.config.stepwise_buckets:
            if math.pow(value, exponent) <= target:
                return previous_bound
            previous_bound = bound
        if math.pow(self.config.stepwise_floor, exponent) <= target:
            return previous_bound
        return float("inf")
