"""
Importance scoring for nodes.

Importance is categorical: conclusions and insights start higher than raw
captures, and a user pin adds a fixed bonus.
"""

from node_memory.config import ScoringConfig
from node_memory.models.base import clamp
from node_memory.models.node import ActiveNode, NodeType


class ImportanceScorer:
    """Calculator for node importance scores."""

    def __init__(self, config: ScoringConfig | None = None):
        self.config = config or ScoringConfig()

    def base_importance(self, node_type: NodeType) -> float:
        """Base importance for a node kind."""
        return self.config.type_importance.get(
            node_type.value,
            self.config.default_type_importance,
        )

    def score(self, node: ActiveNode) -> float:
        """
        Calculate importance for a node.

        Returns:
            Base importance for the node type plus the pin bonus, within [0, 1]
        """
        score = self.base_importance(node.node_type)
        if node.is_pinned:
            score += self.config.pin_bonus
        return clamp(score)
