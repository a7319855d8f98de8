"""
Retention score and forgetting parameter models.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from node_memory.models.base import utcnow


class DecayStrategy(str, Enum):
    """Decay laws available for the time score."""

    EXPONENTIAL = "exponential"
    LINEAR = "linear"
    STEPWISE = "stepwise"


class ScoreComponent(str, Enum):
    """The five signals combined into a retention score."""

    TIME = "time"
    FREQUENCY = "frequency"
    IMPORTANCE = "importance"
    EMOTIONAL = "emotional"
    CONNECTION = "connection"


class ForgettingParameters(BaseModel):
    """
    User-editable forgetting configuration.

    Instances are immutable; the engine swaps the whole object on a
    successful write so a rejected write never leaves a half-applied state.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    strategy: DecayStrategy = Field(
        default=DecayStrategy.EXPONENTIAL,
        description="Decay law for the time score",
    )
    decay_rate: float = Field(
        default=0.1,
        description="Decay rate per day (higher = faster decay)",
        ge=0.0,
        le=1.0,
    )
    forgetting_threshold: float = Field(
        default=0.3,
        description="Overall score at or below which a node is a forgetting candidate",
        ge=0.0,
        le=1.0,
    )
    minimum_retention_score: float = Field(
        default=0.0,
        description="Floor for the time score; decay alone never goes below it",
        ge=0.0,
        le=1.0,
    )
    protection_period_days: int = Field(
        default=7,
        description="Nodes younger than this are never forgotten",
        ge=0,
    )
    max_forgotten_nodes: int = Field(
        default=100,
        description="Archive capacity",
        gt=0,
    )
    enable_auto_forgetting: bool = Field(
        default=True,
        description="Gate for policy-driven forgetting",
    )

    # Extra protection rules
    protect_ai_generated: bool = Field(
        default=True,
        description="Never auto-forget AI-generated nodes",
    )
    emotional_protection_threshold: float = Field(
        default=0.7,
        description="Emotional intensity above this protects a node",
        ge=0.0,
        le=1.0,
    )


class RetentionScore(BaseModel):
    """Scores and forgetting decision for one node, as of one snapshot."""

    model_config = ConfigDict(frozen=True)

    node_id: str
    time_score: float = Field(ge=0.0, le=1.0)
    frequency_score: float = Field(ge=0.0, le=1.0)
    importance_score: float = Field(ge=0.0, le=1.0)
    emotional_score: float = Field(ge=0.0, le=1.0)
    connection_score: float = Field(ge=0.0, le=1.0)
    overall_score: float = Field(ge=0.0, le=1.0)

    should_forget: bool = False
    forgetting_reason: str | None = None
    protection_reason: str | None = Field(
        default=None,
        description="Why a low-scoring node is kept, if a protection rule applied",
    )

    computed_at: datetime = Field(default_factory=utcnow)
    substituted_signals: list[str] = Field(
        default_factory=list,
        description="External signals replaced by neutral defaults",
    )

    @model_validator(mode="after")
    def _reason_present(self) -> "RetentionScore":
        if self.should_forget and not self.forgetting_reason:
            raise ValueError("should_forget requires a forgetting_reason")
        return self

    def components(self) -> dict[ScoreComponent, float]:
        """Component scores keyed by component, in declaration order."""
        return {
            ScoreComponent.TIME: self.time_score,
            ScoreComponent.FREQUENCY: self.frequency_score,
            ScoreComponent.IMPORTANCE: self.importance_score,
            ScoreComponent.EMOTIONAL: self.emotional_score,
            ScoreComponent.CONNECTION: self.connection_score,
        }

    def __repr__(self) -> str:
        return (
            f"RetentionScore(node_id={self.node_id!r}, "
            f"overall={self.overall_score:.3f}, "
            f"should_forget={self.should_forget})"
        )


class MemoryHealthStats(BaseModel):
    """Summary of the retention store."""

    total_nodes: int = 0
    healthy_nodes: int = 0
    at_risk_nodes: int = 0
    forgettable_nodes: int = 0
    forgotten_nodes: int = Field(default=0, description="Current archive size")
    average_memory_score: float = 0.0
    score_histogram: dict[str, int] = Field(default_factory=dict)

    @computed_field
    @property
    def healthy_ratio(self) -> float:
        if self.total_nodes == 0:
            return 0.0
        return self.healthy_nodes / self.total_nodes
