"""
Tests for the retention store and health statistics.
"""

import pytest

from node_memory.models.score import MemoryHealthStats, RetentionScore
from node_memory.store.health import HealthAggregator, classify, health_insights, score_histogram
from node_memory.store.retention import RetentionStore

from tests.helpers import NOW


def _score(node_id: str, overall: float, should_forget: bool = False) -> RetentionScore:
    return RetentionScore(
        node_id=node_id,
        time_score=overall,
        frequency_score=overall,
        importance_score=overall,
        emotional_score=overall,
        connection_score=overall,
        overall_score=overall,
        should_forget=should_forget,
        forgetting_reason="low importance" if should_forget else None,
        computed_at=NOW,
    )


class TestRetentionScore:
    """Tests for the score model."""

    def test_forget_requires_reason(self):
        with pytest.raises(ValueError):
            RetentionScore(
                node_id="a",
                time_score=0.1,
                frequency_score=0.1,
                importance_score=0.1,
                emotional_score=0.1,
                connection_score=0.1,
                overall_score=0.1,
                should_forget=True,
            )

    def test_scores_bounded(self):
        with pytest.raises(ValueError):
            _score("a", 1.5)


class TestRetentionStore:
    """Tests for the keyed score map."""

    def test_replace_swaps_everything(self):
        store = RetentionStore()
        store.replace({"a": _score("a", 0.5), "b": _score("b", 0.6)}, NOW)
        store.replace({"c": _score("c", 0.7)}, NOW)

        assert "a" not in store
        assert store.get("c").overall_score == 0.7
        assert store.computed_at == NOW
        assert len(store) == 1

    def test_candidates_sorted_by_score(self):
        store = RetentionStore()
        store.replace({
            "high": _score("high", 0.9),
            "low2": _score("low2", 0.2, should_forget=True),
            "low1": _score("low1", 0.1, should_forget=True),
        })

        assert [score.node_id for score in store.candidates()] == ["low1", "low2"]

    def test_remove_and_clear(self):
        store = RetentionStore()
        store.replace({"a": _score("a", 0.5)}, NOW)
        assert store.remove("a").node_id == "a"
        assert store.remove("a") is None
        store.clear()
        assert store.computed_at is None


class TestHealth:
    """Tests for health statistics."""

    @pytest.mark.parametrize(
        "overall,should_forget,band",
        [
            (0.9, False, "healthy"),
            (0.71, False, "healthy"),
            (0.7, False, "at_risk"),
            (0.31, False, "at_risk"),
            (0.3, False, "forgettable"),
            (0.5, True, "forgettable"),
        ],
    )
    def test_classify(self, overall, should_forget, band):
        assert classify(_score("a", overall, should_forget)) == band

    def test_histogram_buckets(self):
        scores = [_score(str(i), value) for i, value in enumerate([0.0, 0.19, 0.2, 0.55, 0.79, 1.0])]
        assert score_histogram(scores) == {
            "0.0-0.2": 2,
            "0.2-0.4": 1,
            "0.4-0.6": 1,
            "0.6-0.8": 1,
            "0.8-1.0": 1,
        }

    def test_bands_partition_total(self):
        store = RetentionStore()
        values = [0.05, 0.3, 0.31, 0.5, 0.7, 0.71, 0.99]
        store.replace({str(i): _score(str(i), value) for i, value in enumerate(values)})

        stats = HealthAggregator().compute(store, archived=4)

        assert stats.total_nodes == 7
        assert stats.healthy_nodes + stats.at_risk_nodes + stats.forgettable_nodes == stats.total_nodes
        assert stats.healthy_nodes == 2
        assert stats.forgettable_nodes == 2
        assert stats.forgotten_nodes == 4
        assert stats.average_memory_score == pytest.approx(sum(values) / len(values))
        assert sum(stats.score_histogram.values()) == 7

    def test_empty_store(self):
        stats = HealthAggregator().compute(RetentionStore())
        assert stats.total_nodes == 0
        assert stats.average_memory_score == 0.0
        assert stats.healthy_ratio == 0.0

    def test_insights(self):
        assert health_insights(MemoryHealthStats()) == ["Memory is balanced."]

        busy = MemoryHealthStats(
            total_nodes=9,
            at_risk_nodes=4,
            forgettable_nodes=6,
            forgotten_nodes=12,
            average_memory_score=0.4,
        )
        insights = health_insights(busy)
        assert any("at risk" in insight for insight in insights)
        assert any("archived" in insight for insight in insights)
        assert any("decayed" in insight for insight in insights)
