"""
Retention store: latest retention score per active node.
"""

from datetime import datetime

from node_memory.models.score import RetentionScore


class RetentionStore:
    """
    Keyed map from node id to its latest retention score.

    An analysis pass replaces the whole map at once so every score in the
    store was computed against the same snapshot. The only partial change
    is removing a node that left the active set.
    """

    def __init__(self):
        self._scores: dict[str, RetentionScore] = {}
        self._computed_at: datetime | None = None

    def replace(self, scores: dict[str, RetentionScore], computed_at: datetime | None = None) -> None:
        """Swap in the results of a full analysis pass."""
        self._scores = dict(scores)
        self._computed_at = computed_at

    def get(self, node_id: str) -> RetentionScore | None:
        return self._scores.get(node_id)

    def remove(self, node_id: str) -> RetentionScore | None:
        """Drop a node that is no longer active."""
        return self._scores.pop(node_id, None)

    def scores(self) -> list[RetentionScore]:
        return list(self._scores.values())

    def as_dict(self) -> dict[str, RetentionScore]:
        return dict(self._scores)

    def candidates(self) -> list[RetentionScore]:
        """Nodes marked for forgetting, lowest overall score first."""
        return sorted(
            (score for score in self._scores.values() if score.should_forget),
            key=lambda s: (s.overall_score, s.node_id),
        )

    def clear(self) -> None:
        self._scores.clear()
        self._computed_at = None

    @property
    def computed_at(self) -> datetime | None:
        """Snapshot time of the last full pass."""
        return self._computed_at

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._scores

    def __len__(self) -> int:
        return len(self._scores)
