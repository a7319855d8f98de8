"""
Node models consumed by the engine.

The graph itself (rendering, editing, edges) belongs to the host
application. The engine only sees read-only snapshots of the active nodes
plus the external signals it needs for scoring.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from ulid import ULID

from node_memory.models.base import ensure_utc, utcnow


class NodeType(str, Enum):
    """Kinds of knowledge nodes."""

    THOUGHT = "thought"  # Raw capture
    INSIGHT = "insight"
    QUESTION = "question"
    CONCLUSION = "conclusion"
    CONTRADICTION = "contradiction"
    STRUCTURE = "structure"


class InteractionKind(str, Enum):
    """Interactions counted towards a node's frequency score."""

    EDIT = "edit"
    SELECT = "select"
    CONNECT = "connect"
    VIEW = "view"


class ActiveNode(BaseModel):
    """A node in the active working set."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default_factory=lambda: str(ULID()),
        description="Node identifier, owned by the host graph",
    )
    content: str = Field(description="User-authored node content")
    node_type: NodeType = Field(default=NodeType.THOUGHT)
    created_at: datetime = Field(default_factory=utcnow)
    last_touched_at: datetime | None = Field(
        default=None,
        description="Last edit or explicit touch; None means never touched",
    )
    is_pinned: bool = Field(default=False, description="Explicitly pinned by the user")
    is_ai_generated: bool = Field(default=False)

    @field_validator("created_at", "last_touched_at")
    @classmethod
    def _to_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None

    @property
    def last_activity_at(self) -> datetime:
        """Most recent of creation and last touch."""
        if self.last_touched_at is None:
            return self.created_at
        return max(self.created_at, self.last_touched_at)

    def __str__(self) -> str:
        return f"{self.node_type.value}[{self.id[:8]}]: {self.content[:50]}"


class Interaction(BaseModel):
    """A single recorded interaction with a node."""

    model_config = ConfigDict(frozen=True)

    node_id: str
    kind: InteractionKind = InteractionKind.SELECT
    at: datetime = Field(default_factory=utcnow)

    @field_validator("at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class NodeSnapshot(BaseModel):
    """
    Read-only view of the active graph at one instant.

    ``degrees`` and ``emotional_intensity`` are the external signals. A value
    of None means the whole lookup is unavailable; a missing key means the
    signal is unavailable for that node. Both cases score as neutral.
    """

    model_config = ConfigDict(frozen=True)

    nodes: list[ActiveNode] = Field(default_factory=list)
    degrees: dict[str, int] | None = Field(
        default=None,
        description="Connection count per node id",
    )
    emotional_intensity: dict[str, float] | None = Field(
        default=None,
        description="Highest recorded emotional intensity per node id (0-1)",
    )
    taken_at: datetime = Field(
        default_factory=utcnow,
        description="Reference time for every age computed from this snapshot",
    )

    @field_validator("taken_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _unique_ids(self) -> "NodeSnapshot":
        seen: set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                raise ValueError(f"duplicate node id in snapshot: {node.id}")
            seen.add(node.id)
        return self

    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]
