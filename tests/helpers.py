"""
Shared test helpers.
"""

from datetime import datetime, timedelta, timezone

from node_memory.models.node import ActiveNode, NodeType

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock that advances on demand."""

    def __init__(self, start: datetime = NOW):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_node(
    node_id: str,
    age_days: float = 0.0,
    node_type: NodeType = NodeType.THOUGHT,
    content: str | None = None,
    now: datetime = NOW,
    **kwargs,
) -> ActiveNode:
    """Build a node created ``age_days`` before ``now``."""
    return ActiveNode(
        id=node_id,
        content=content or f"content of {node_id}",
        node_type=node_type,
        created_at=now - timedelta(days=age_days),
        **kwargs,
    )
