"""
In-memory state: retention scores, archive and health summaries.
"""

from node_memory.store.archive import ForgettingArchive
from node_memory.store.health import HealthAggregator, classify, health_insights, score_histogram
from node_memory.store.retention import RetentionStore

__all__ = [
    "RetentionStore",
    "ForgettingArchive",
    "HealthAggregator",
    "classify",
    "health_insights",
    "score_histogram",
]
