"""
Configuration management for the node memory engine.

Provides centralized configuration for:
- Retention scoring weights and normalization constants
- Interaction counting (frequency window)
- Persistence
- Periodic analysis scheduling

User-editable forgetting behaviour lives in
``node_memory.models.score.ForgettingParameters``; this module holds the
deployment-level knobs that stay fixed while the engine runs.
"""

import json
from pathlib import Path

from pydantic import BaseModel, Field, model_validator


class ScoreWeights(BaseModel):
    """Fixed weights combining the five component scores."""

    time: float = Field(default=0.20, ge=0.0, le=1.0)
    frequency: float = Field(default=0.20, ge=0.0, le=1.0)
    importance: float = Field(default=0.30, ge=0.0, le=1.0)
    emotional: float = Field(default=0.15, ge=0.0, le=1.0)
    connection: float = Field(default=0.15, ge=0.0, le=1.0)

    @property
    def total(self) -> float:
        return self.time + self.frequency + self.importance + self.emotional + self.connection

    def normalize(self) -> "ScoreWeights":
        """Normalize weights to sum to 1.0."""
        total = self.total
        if total == 0:
            return ScoreWeights()

        return ScoreWeights(
            time=self.time / total,
            frequency=self.frequency / total,
            importance=self.importance / total,
            emotional=self.emotional / total,
            connection=self.connection / total,
        )


class ScoringConfig(BaseModel):
    """Configuration for retention score calculation."""

    weights: ScoreWeights = Field(default_factory=ScoreWeights)

    connection_normalization: float = Field(
        default=5.0,
        description="Degree at which the connection score saturates at 1.0",
        gt=0.0,
    )

    # Importance
    type_importance: dict[str, float] = Field(
        default={
            "thought": 0.3,
            "question": 0.4,
            "contradiction": 0.4,
            "structure": 0.5,
            "insight": 0.7,
            "conclusion": 0.7,
        },
        description="Base importance per node type",
    )
    default_type_importance: float = Field(
        default=0.3,
        description="Importance for node types missing from type_importance",
        ge=0.0,
        le=1.0,
    )
    pin_bonus: float = Field(
        default=0.3,
        description="Importance bonus for nodes pinned by the user",
        ge=0.0,
        le=1.0,
    )

    # Missing external signals
    neutral_signal: float = Field(
        default=0.5,
        description="Substitute for an unavailable degree or emotional signal",
        ge=0.0,
        le=1.0,
    )

    # Reason generation
    weak_component_threshold: float = Field(
        default=0.3,
        description="Components below this value are cited in forgetting reasons",
        ge=0.0,
        le=1.0,
    )

    # Stepwise decay buckets: (upper bound in days, score)
    stepwise_buckets: list[tuple[float, float]] = Field(
        default=[(1.0, 1.0), (7.0, 0.7), (30.0, 0.4)],
        description="Age buckets for stepwise decay, ascending by day bound",
    )
    stepwise_floor: float = Field(
        default=0.1,
        description="Stepwise score for nodes older than the last bucket",
        ge=0.0,
        le=1.0,
    )

    @model_validator(mode="after")
    def _check_tables(self) -> "ScoringConfig":
        if self.weights.total <= 0:
            raise ValueError("at least one score weight must be positive")
        for node_type, value in self.type_importance.items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"type_importance[{node_type!r}] must be within [0, 1]")
        bounds = [bound for bound, _ in self.stepwise_buckets]
        if bounds != sorted(bounds):
            raise ValueError("stepwise_buckets must be sorted by day bound")
        for _, value in self.stepwise_buckets:
            if not 0.0 <= value <= 1.0:
                raise ValueError("stepwise bucket scores must be within [0, 1]")
        return self


class InteractionConfig(BaseModel):
    """Configuration for interaction counting (frequency score)."""

    window_days: float = Field(
        default=30.0,
        description="Rolling window of interactions counted towards frequency",
        gt=0.0,
    )
    saturation_count: int = Field(
        default=10,
        description="Interactions within the window that yield a frequency score of 1.0",
        ge=1,
    )
    baseline_score: float = Field(
        default=0.1,
        description="Frequency score for nodes with no recorded interactions",
        ge=0.0,
        le=1.0,
    )
    max_events_per_node: int = Field(
        default=200,
        description="Interactions kept per node (oldest dropped first)",
        ge=1,
    )


class StorageConfig(BaseModel):
    """Configuration for persistence."""

    sqlite_path: Path = Field(
        default=Path("./data/node_memory.db"),
        description="Path to SQLite database file",
    )
    autosave: bool = Field(
        default=False,
        description="Persist engine state after every mutating operation",
    )


class SchedulerConfig(BaseModel):
    """Configuration for periodic analysis."""

    interval_seconds: float = Field(
        default=86400.0,  # daily
        description="Interval between scheduled analysis passes",
        gt=0.0,
    )
    auto_forget: bool = Field(
        default=True,
        description="Apply automatic forgetting after each scheduled pass",
    )


class EngineConfig(BaseModel):
    """Master configuration for the node memory engine."""

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    interactions: InteractionConfig = Field(default_factory=InteractionConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)

    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    @classmethod
    def from_file(cls, path: Path) -> "EngineConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if path.suffix == ".json":
            with open(path) as f:
                data = json.load(f)
            return cls.model_validate(data)
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

    def to_file(self, path: Path) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            f.write(self.model_dump_json(indent=2))
