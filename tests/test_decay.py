"""
Tests for decay laws, importance and frequency scoring.
"""

import math
from datetime import timedelta

import pytest

from node_memory.config import InteractionConfig, ScoringConfig
from node_memory.decay.frequency import FrequencyScorer, InteractionLog
from node_memory.decay.functions import (
    DecayInput,
    TimeDecayCalculator,
    exponential_decay,
    linear_decay,
    stepwise_decay,
)
from node_memory.decay.importance import ImportanceScorer
from node_memory.models.node import Interaction, InteractionKind, NodeType
from node_memory.models.score import DecayStrategy

from tests.helpers import NOW, make_node


class TestExponentialDecay:
    """Tests for exponential decay."""

    def test_no_decay_at_age_zero(self):
        """A node is at full strength when just touched."""
        assert exponential_decay(DecayInput(age_days=0.0, decay_rate=0.1)) == 1.0

    def test_thirty_days_at_rate_point_one(self):
        """e^(-0.1 * 30) = e^-3."""
        score = exponential_decay(DecayInput(age_days=30.0, decay_rate=0.1))
        assert score == pytest.approx(math.exp(-3))
        assert score == pytest.approx(0.0498, abs=1e-3)

    def test_higher_rate_decays_faster(self):
        slow = exponential_decay(DecayInput(age_days=10.0, decay_rate=0.01))
        fast = exponential_decay(DecayInput(age_days=10.0, decay_rate=0.5))
        assert slow > fast


class TestLinearDecay:
    """Tests for linear decay."""

    def test_half_way(self):
        assert linear_decay(DecayInput(age_days=5.0, decay_rate=0.1)) == pytest.approx(0.5)

    def test_never_negative(self):
        assert linear_decay(DecayInput(age_days=50.0, decay_rate=0.1)) == 0.0


class TestStepwiseDecay:
    """Tests for stepwise decay."""

    @pytest.mark.parametrize(
        "age_days,expected",
        [(0.5, 1.0), (3.0, 0.7), (10.0, 0.4), (45.0, 0.1)],
    )
    def test_buckets_at_reference_rate(self, age_days, expected):
        score = stepwise_decay(DecayInput(age_days=age_days, decay_rate=0.1))
        assert score == pytest.approx(expected)

    def test_zero_rate_disables_decay(self):
        assert stepwise_decay(DecayInput(age_days=100.0, decay_rate=0.0)) == 1.0

    def test_higher_rate_lowers_buckets(self):
        score = stepwise_decay(DecayInput(age_days=3.0, decay_rate=0.2))
        assert score == pytest.approx(0.49)


class TestTimeDecayCalculator:
    """Tests for the decay law dispatcher."""

    @pytest.mark.parametrize("strategy", list(DecayStrategy))
    def test_monotonic_in_age(self, strategy):
        """Decay never increases retention as the node ages."""
        calculator = TimeDecayCalculator()
        ages = [0.0, 0.5, 1.0, 3.0, 6.9, 7.0, 15.0, 29.9, 30.0, 90.0, 365.0]
        scores = [calculator.time_score(strategy, 0.1, age) for age in ages]
        assert all(earlier >= later for earlier, later in zip(scores, scores[1:]))

    @pytest.mark.parametrize("strategy", list(DecayStrategy))
    def test_floor_applied(self, strategy):
        calculator = TimeDecayCalculator()
        score = calculator.time_score(strategy, 1.0, 1000.0, minimum_retention_score=0.2)
        assert score == pytest.approx(0.2)

    @pytest.mark.parametrize("strategy", list(DecayStrategy))
    @pytest.mark.parametrize("rate", [0.0, 0.05, 0.5, 1.0])
    def test_within_unit_interval(self, strategy, rate):
        calculator = TimeDecayCalculator()
        for age in [0.0, 1.0, 10.0, 100.0]:
            assert 0.0 <= calculator.time_score(strategy, rate, age) <= 1.0

    def test_custom_buckets(self):
        config = ScoringConfig(stepwise_buckets=[(2.0, 0.9)], stepwise_floor=0.3)
        calculator = TimeDecayCalculator(config)
        assert calculator.time_score(DecayStrategy.STEPWISE, 0.1, 1.0) == pytest.approx(0.9)
        assert calculator.time_score(DecayStrategy.STEPWISE, 0.1, 5.0) == pytest.approx(0.3)

    def test_estimate_exponential(self):
        calculator = TimeDecayCalculator()
        days = calculator.estimate_days_to_score(DecayStrategy.EXPONENTIAL, 0.1, math.exp(-3))
        assert days == pytest.approx(30.0)

    def test_estimate_linear(self):
        calculator = TimeDecayCalculator()
        assert calculator.estimate_days_to_score(DecayStrategy.LINEAR, 0.1, 0.5) == pytest.approx(5.0)

    def test_estimate_stepwise(self):
        calculator = TimeDecayCalculator()
        assert calculator.estimate_days_to_score(DecayStrategy.STEPWISE, 0.1, 0.4) == 7.0

    def test_estimate_without_decay(self):
        calculator = TimeDecayCalculator()
        assert calculator.estimate_days_to_score(DecayStrategy.EXPONENTIAL, 0.0, 0.5) == float("inf")


class TestImportanceScorer:
    """Tests for categorical importance."""

    def test_raw_capture_lower_than_conclusion(self):
        scorer = ImportanceScorer()
        thought = scorer.score(make_node("a", node_type=NodeType.THOUGHT))
        conclusion = scorer.score(make_node("b", node_type=NodeType.CONCLUSION))
        insight = scorer.score(make_node("c", node_type=NodeType.INSIGHT))
        assert thought < conclusion
        assert thought < insight

    def test_pin_bonus(self):
        scorer = ImportanceScorer()
        plain = scorer.score(make_node("a"))
        pinned = scorer.score(make_node("b", is_pinned=True))
        assert pinned == pytest.approx(plain + 0.3)

    def test_clamped_to_one(self):
        config = ScoringConfig(pin_bonus=0.9)
        scorer = ImportanceScorer(config)
        assert scorer.score(make_node("a", node_type=NodeType.INSIGHT, is_pinned=True)) == 1.0

    def test_unknown_type_uses_default(self):
        config = ScoringConfig(type_importance={"insight": 0.9}, default_type_importance=0.2)
        scorer = ImportanceScorer(config)
        assert scorer.base_importance(NodeType.QUESTION) == 0.2


class TestFrequencyScoring:
    """Tests for interaction counting."""

    def test_baseline_without_history(self):
        scorer = FrequencyScorer()
        assert scorer.score(InteractionLog(), "a", NOW) == pytest.approx(0.1)

    def test_counts_within_window(self):
        log = InteractionLog()
        for days in (1, 2, 3):
            log.record(Interaction(node_id="a", at=NOW - timedelta(days=days)))
        assert FrequencyScorer().score(log, "a", NOW) == pytest.approx(0.3)

    def test_old_interactions_fall_back_to_baseline(self):
        log = InteractionLog()
        log.record(Interaction(node_id="a", at=NOW - timedelta(days=45)))
        assert log.count_in_window("a", NOW) == 0
        assert FrequencyScorer().score(log, "a", NOW) == pytest.approx(0.1)

    def test_future_interactions_ignored(self):
        log = InteractionLog()
        log.record(Interaction(node_id="a", at=NOW + timedelta(days=1)))
        assert log.count_in_window("a", NOW) == 0
        assert log.last_interaction_at("a", NOW) is None

    def test_saturates_at_one(self):
        config = InteractionConfig(saturation_count=2)
        log = InteractionLog(config)
        for hours in range(5):
            log.record(Interaction(node_id="a", kind=InteractionKind.EDIT, at=NOW - timedelta(hours=hours)))
        assert FrequencyScorer(config).score(log, "a", NOW) == 1.0

    def test_log_bounded_per_node(self):
        log = InteractionLog(InteractionConfig(max_events_per_node=3))
        for minutes in range(10):
            log.record(Interaction(node_id="a", at=NOW + timedelta(minutes=minutes)))
        assert len(log.events_for("a")) == 3
        assert log.last_interaction_at("a") == NOW + timedelta(minutes=9)

    def test_retain_drops_other_nodes(self):
        log = InteractionLog()
        for node_id in ("a", "b", "c"):
            log.record(Interaction(node_id=node_id, at=NOW))
        assert log.retain({"a", "missing"}) == 2
        assert log.has_history("a")
        assert not log.has_history("b")
        assert len(log) == 1

    def test_clear_and_copy(self):
        log = InteractionLog()
        log.record(Interaction(node_id="a", at=NOW))
        clone = log.copy()
        assert log.clear("a") == 1
        assert not log.has_history("a")
        assert clone.has_history("a")
