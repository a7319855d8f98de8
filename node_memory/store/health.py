"""
Health statistics derived from the retention store.

Bands (disjoint, checked in this order):
- forgettable: marked for forgetting, or overall <= 0.3
- healthy: overall > 0.7
- at risk: everything in between
"""

from node_memory.models.score import MemoryHealthStats, RetentionScore
from node_memory.store.retention import RetentionStore

HEALTHY_ABOVE = 0.7
FORGETTABLE_AT_OR_BELOW = 0.3

HISTOGRAM_BUCKETS: list[tuple[str, float, float]] = [
    ("0.0-0.2", 0.0, 0.2),
    ("0.2-0.4", 0.2, 0.4),
    ("0.4-0.6", 0.4, 0.6),
    ("0.6-0.8", 0.6, 0.8),
    ("0.8-1.0", 0.8, 1.0),
]


def classify(score: RetentionScore) -> str:
    """Band name for a single score."""
    if score.should_forget or score.overall_score <= FORGETTABLE_AT_OR_BELOW:
        return "forgettable"
    if score.overall_score > HEALTHY_ABOVE:
        return "healthy"
    return "at_risk"


def score_histogram(scores: list[RetentionScore]) -> dict[str, int]:
    """Count overall scores in five 0.2-wide buckets; 1.0 lands in the last."""
    histogram = {label: 0 for label, _, _ in HISTOGRAM_BUCKETS}
    last = HISTOGRAM_BUCKETS[-1][0]
    for score in scores:
        for label, low, high in HISTOGRAM_BUCKETS:
            if low <= score.overall_score < high:
                histogram[label] += 1
                break
        else:
            histogram[last] += 1
    return histogram


class HealthAggregator:
    """Read-only summaries over a retention store."""

    def compute(self, store: RetentionStore, archived: int = 0) -> MemoryHealthStats:
        scores = store.scores()
        bands = {"healthy": 0, "at_risk": 0, "forgettable": 0}
        for score in scores:
            bands[classify(score)] += 1

        average = (
            sum(score.overall_score for score in scores) / len(scores)
            if scores else 0.0
        )

        return MemoryHealthStats(
            total_nodes=len(scores),
            healthy_nodes=bands["healthy"],
            at_risk_nodes=bands["at_risk"],
            forgettable_nodes=bands["forgettable"],
            forgotten_nodes=archived,
            average_memory_score=average,
            score_histogram=score_histogram(scores),
        )


def health_insights(stats: MemoryHealthStats) -> list[str]:
    """Human-readable observations about a health summary."""
    insights: list[str] = []

    if stats.total_nodes and stats.average_memory_score > 0.8:
        insights.append("Memory is in good shape; most nodes are well retained.")

    if stats.total_nodes and stats.at_risk_nodes > stats.total_nodes / 3:
        insights.append(
            f"{stats.at_risk_nodes} of {stats.total_nodes} nodes are at risk; "
            "consider reviewing them before they fade."
        )

    if stats.forgotten_nodes > 10:
        insights.append(f"{stats.forgotten_nodes} nodes are archived and can still be recalled.")

    if stats.forgettable_nodes > 5:
        insights.append(f"{stats.forgettable_nodes} nodes have decayed enough to be forgotten.")

    if not insights:
        insights.append("Memory is balanced.")

    return insights
