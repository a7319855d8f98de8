"""
Data models for the node memory engine.
"""

from node_memory.models.archive import ForgottenNode
from node_memory.models.node import (
    ActiveNode,
    Interaction,
    InteractionKind,
    NodeSnapshot,
    NodeType,
)
from node_memory.models.score import (
    DecayStrategy,
    ForgettingParameters,
    MemoryHealthStats,
    RetentionScore,
    ScoreComponent,
)

__all__ = [
    # Nodes
    "ActiveNode",
    "NodeSnapshot",
    "NodeType",
    "Interaction",
    "InteractionKind",
    # Scores
    "DecayStrategy",
    "ForgettingParameters",
    "RetentionScore",
    "ScoreComponent",
    "MemoryHealthStats",
    # Archive
    "ForgottenNode",
]
