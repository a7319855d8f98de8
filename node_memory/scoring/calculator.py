"""
Retention score calculation.

Combines five signals per node into one retention score:
- Time: decay law applied to days since the last activity
- Frequency: interactions within a rolling window
- Importance: node kind plus pin bonus
- Emotional: highest recorded emotional intensity (external signal)
- Connection: degree normalized against a saturation constant

Overall = w_t*time + w_f*freq + w_i*importance + w_e*emotional + w_c*connection
with weights normalized to sum to 1.
"""

import logging
import math

from node_memory.config import InteractionConfig, ScoringConfig
from node_memory.decay.frequency import FrequencyScorer, InteractionLog
from node_memory.decay.functions import TimeDecayCalculator
from node_memory.decay.importance import ImportanceScorer
from node_memory.errors import PartialSignalError
from node_memory.models.base import clamp, days_between
from node_memory.models.node import ActiveNode, NodeSnapshot
from node_memory.models.score import ForgettingParameters, RetentionScore, ScoreComponent
from node_memory.scoring.policy import ForgettingPolicy

logger = logging.getLogger(__name__)


class ScoreCalculator:
    """
    Calculator for retention scores.

    Scoring a node is pure given its inputs: the snapshot supplies the
    reference time and external signals, the interaction log supplies the
    history, and the parameters are immutable.
    """

    def __init__(
        self,
        config: ScoringConfig | None = None,
        interaction_config: InteractionConfig | None = None,
    ):
        self.config = config or ScoringConfig()
        self.weights = self.config.weights.normalize()
        self.time_decay = TimeDecayCalculator(self.config)
        self.importance = ImportanceScorer(self.config)
        self.frequency = FrequencyScorer(interaction_config)

    # Signal lookups

    def _degree(self, node_id: str, snapshot: NodeSnapshot) -> int:
        if snapshot.degrees is None or node_id not in snapshot.degrees:
            raise PartialSignalError(node_id, "degree")
        degree = snapshot.degrees[node_id]
        if degree is None or degree < 0:
            raise PartialSignalError(node_id, "degree")
        return degree

    def _emotional_intensity(self, node_id: str, snapshot: NodeSnapshot) -> float:
        if snapshot.emotional_intensity is None or node_id not in snapshot.emotional_intensity:
            raise PartialSignalError(node_id, "emotional")
        intensity = snapshot.emotional_intensity[node_id]
        if intensity is None or math.isnan(intensity):
            raise PartialSignalError(node_id, "emotional")
        return clamp(intensity)

    # Components

    def connection_score(self, degree: int) -> float:
        """min(1, degree / normalization)."""
        return clamp(degree / self.config.connection_normalization)

    def overall_score(self, components: dict[ScoreComponent, float]) -> float:
        """Weighted sum of the component scores."""
        w = self.weights
        score = (
            components[ScoreComponent.TIME] * w.time
            + components[ScoreComponent.FREQUENCY] * w.frequency
            + components[ScoreComponent.IMPORTANCE] * w.importance
            + components[ScoreComponent.EMOTIONAL] * w.emotional
            + components[ScoreComponent.CONNECTION] * w.connection
        )
        return clamp(score)

    def calculate(
        self,
        node: ActiveNode,
        snapshot: NodeSnapshot,
        params: ForgettingParameters,
        interactions: InteractionLog | None = None,
    ) -> RetentionScore:
        """
        Calculate the retention score for one node.

        Missing degree or emotional signals are replaced by the neutral
        default and listed in ``substituted_signals``.

        Args:
            node: Node to score
            snapshot: Snapshot the node belongs to
            params: Active forgetting parameters
            interactions: Interaction history, if any

        Returns:
            RetentionScore computed as of ``snapshot.taken_at``
        """
        now = snapshot.taken_at
        log = interactions or InteractionLog()
        substituted: list[str] = []

        last_activity = node.last_activity_at
        last_interaction = log.last_interaction_at(node.id, now)
        if last_interaction is not None and last_interaction > last_activity:
            last_activity = last_interaction

        time_score = self.time_decay.time_score(
            strategy=params.strategy,
            decay_rate=params.decay_rate,
            age_days=days_between(last_activity, now),
            minimum_retention_score=params.minimum_retention_score,
        )
        frequency_score = self.frequency.score(log, node.id, now)
        importance_score = self.importance.score(node)

        intensity: float | None
        try:
            intensity = self._emotional_intensity(node.id, snapshot)
            emotional_score = intensity
        except PartialSignalError as e:
            logger.debug(str(e))
            substituted.append(e.signal)
            intensity = None
            emotional_score = self.config.neutral_signal

        try:
            connection_score = self.connection_score(self._degree(node.id, snapshot))
        except PartialSignalError as e:
            logger.debug(str(e))
            substituted.append(e.signal)
            connection_score = self.config.neutral_signal

        components = {
            ScoreComponent.TIME: time_score,
            ScoreComponent.FREQUENCY: frequency_score,
            ScoreComponent.IMPORTANCE: importance_score,
            ScoreComponent.EMOTIONAL: emotional_score,
            ScoreComponent.CONNECTION: connection_score,
        }
        overall = self.overall_score(components)

        policy = ForgettingPolicy(params, self.config.weak_component_threshold)
        decision = policy.decide(
            node=node,
            overall_score=overall,
            components=components,
            age_days=days_between(node.created_at, now),
            emotional_intensity=intensity,
        )

        return RetentionScore(
            node_id=node.id,
            time_score=time_score,
            frequency_score=frequency_score,
            importance_score=importance_score,
            emotional_score=emotional_score,
            connection_score=connection_score,
            overall_score=overall,
            should_forget=decision.should_forget,
            forgetting_reason=decision.reason,
            protection_reason=decision.protection_reason,
            computed_at=now,
            substituted_signals=substituted,
        )

    def neutral_score(self, node: ActiveNode, snapshot: NodeSnapshot) -> RetentionScore:
        """Fallback score for a node whose scoring failed."""
        neutral = self.config.neutral_signal
        return RetentionScore(
            node_id=node.id,
            time_score=neutral,
            frequency_score=neutral,
            importance_score=neutral,
            emotional_score=neutral,
            connection_score=neutral,
            overall_score=neutral,
            should_forget=False,
            protection_reason="scoring failed",
            computed_at=snapshot.taken_at,
            substituted_signals=[component.value for component in ScoreComponent],
        )

    def calculate_batch(
        self,
        snapshot: NodeSnapshot,
        params: ForgettingParameters,
        interactions: InteractionLog | None = None,
    ) -> dict[str, RetentionScore]:
        """
        Score every node in a snapshot.

        A node whose scoring raises gets a neutral score; the batch always
        completes.
        """
        scores: dict[str, RetentionScore] = {}
        for node in snapshot.nodes:
            try:
                scores[node.id] = self.calculate(node, snapshot, params, interactions)
            except Exception:
                logger.exception(f"Scoring failed for node {node.id}, using neutral score")
                scores[node.id] = self.neutral_score(node, snapshot)
        return scores
