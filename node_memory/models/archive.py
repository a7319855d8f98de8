"""
Archive entry model.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from ulid import ULID

from node_memory.models.base import ensure_utc, utcnow
from node_memory.models.node import ActiveNode, NodeType


class ForgottenNode(BaseModel):
    """
    Immutable snapshot of a node taken when it was forgotten.

    ``id`` identifies the archive entry (ULID, so entries sort by creation);
    ``node_id`` is the original node id the entry restores to.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(ULID()))
    node_id: str
    content: str
    node_type: NodeType
    created_at: datetime
    forgotten_at: datetime = Field(default_factory=utcnow)
    reason: str
    memory_score: float = Field(
        default=0.0,
        description="Overall retention score at eviction time",
        ge=0.0,
        le=1.0,
    )
    is_pinned: bool = False
    is_ai_generated: bool = False

    @field_validator("created_at", "forgotten_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @classmethod
    def from_node(
        cls,
        node: ActiveNode,
        reason: str,
        memory_score: float = 0.0,
        forgotten_at: datetime | None = None,
    ) -> "ForgottenNode":
        """Snapshot an active node for the archive."""
        return cls(
            node_id=node.id,
            content=node.content,
            node_type=node.node_type,
            created_at=node.created_at,
            forgotten_at=forgotten_at or utcnow(),
            reason=reason,
            memory_score=memory_score,
            is_pinned=node.is_pinned,
            is_ai_generated=node.is_ai_generated,
        )

    def restore(self, touched_at: datetime | None = None) -> ActiveNode:
        """
        Rebuild the active node.

        The restored node counts as freshly touched so its time score starts
        near 1.0 on the next analysis.
        """
        return ActiveNode(
            id=self.node_id,
            content=self.content,
            node_type=self.node_type,
            created_at=self.created_at,
            last_touched_at=touched_at or utcnow(),
            is_pinned=self.is_pinned,
            is_ai_generated=self.is_ai_generated,
        )

    def matches(self, text: str) -> bool:
        """Case-insensitive match on content or reason."""
        needle = text.casefold()
        return needle in self.content.casefold() or needle in self.reason.casefold()
