"""
Forgetting policy.

Turns a retention score into a keep/forget decision with a human-readable
explanation. Everything here is pure: no I/O, no clock, no shared state.

Decision order for a node whose overall score is at or below the
forgetting threshold:
1. Automatic forgetting disabled -> keep
2. Younger than the protection period -> keep
3. AI-generated (when protected) -> keep
4. Emotional intensity above the protection threshold -> keep
5. Otherwise -> forget, citing the weakest components
"""

from dataclasses import dataclass

from node_memory.models.node import ActiveNode
from node_memory.models.score import ForgettingParameters, ScoreComponent

# Phrases used in forgetting reasons
COMPONENT_PHRASES: dict[ScoreComponent, str] = {
    ScoreComponent.TIME: "content not revisited",
    ScoreComponent.FREQUENCY: "low recent interaction",
    ScoreComponent.IMPORTANCE: "low importance",
    ScoreComponent.EMOTIONAL: "little emotional resonance",
    ScoreComponent.CONNECTION: "few structural connections",
}

NO_CONNECTIONS_PHRASE = "no structural connections"
MANUAL_REASON = "manually forgotten"


@dataclass(frozen=True)
class ForgettingDecision:
    """Outcome of the policy for one node."""

    should_forget: bool
    reason: str | None = None
    protection_reason: str | None = None


def _phrase(component: ScoreComponent, value: float) -> str:
    if component == ScoreComponent.CONNECTION and value <= 0.0:
        return NO_CONNECTIONS_PHRASE
    return COMPONENT_PHRASES[component]


def forgetting_reason(
    components: dict[ScoreComponent, float],
    weak_threshold: float = 0.3,
) -> str:
    """
    Explain why a node would be forgotten.

    The lowest component always leads; other components below
    ``weak_threshold`` follow in ascending order. Ties keep declaration
    order of ``ScoreComponent``.
    """
    order = list(ScoreComponent)
    ranked = sorted(components.items(), key=lambda item: (item[1], order.index(item[0])))

    weakest, weakest_value = ranked[0]
    phrases = [_phrase(weakest, weakest_value)]
    for component, value in ranked[1:]:
        if value < weak_threshold:
            phrases.append(_phrase(component, value))

    return ", ".join(phrases)


def decide_forgetting(
    overall_score: float,
    components: dict[ScoreComponent, float],
    age_days: float,
    params: ForgettingParameters,
    is_ai_generated: bool = False,
    emotional_intensity: float | None = None,
    weak_threshold: float = 0.3,
) -> ForgettingDecision:
    """
    Decide whether a node should be forgotten.

    Args:
        overall_score: Combined retention score
        components: Component scores (used for the reason)
        age_days: Days since the node was created
        params: Active forgetting parameters
        is_ai_generated: Whether the node was generated rather than authored
        emotional_intensity: Highest recorded intensity, if known
        weak_threshold: Cutoff for citing secondary components

    Returns:
        ForgettingDecision; ``reason`` is set exactly when ``should_forget``
    """
    if overall_score > params.forgetting_threshold:
        return ForgettingDecision(should_forget=False)

    if not params.enable_auto_forgetting:
        return ForgettingDecision(
            should_forget=False,
            protection_reason="automatic forgetting disabled",
        )

    if age_days < params.protection_period_days:
        return ForgettingDecision(
            should_forget=False,
            protection_reason=f"within {params.protection_period_days}-day protection period",
        )

    if params.protect_ai_generated and is_ai_generated:
        return ForgettingDecision(
            should_forget=False,
            protection_reason="AI-generated node",
        )

    if (
        emotional_intensity is not None
        and emotional_intensity > params.emotional_protection_threshold
    ):
        return ForgettingDecision(
            should_forget=False,
            protection_reason="emotionally significant",
        )

    return ForgettingDecision(
        should_forget=True,
        reason=forgetting_reason(components, weak_threshold),
    )


class ForgettingPolicy:
    """Binds the decision rules to one parameter set."""

    def __init__(self, params: ForgettingParameters, weak_threshold: float = 0.3):
        self.params = params
        self.weak_threshold = weak_threshold

    def decide(
        self,
        node: ActiveNode,
        overall_score: float,
        components: dict[ScoreComponent, float],
        age_days: float,
        emotional_intensity: float | None = None,
    ) -> ForgettingDecision:
        return decide_forgetting(
            overall_score=overall_score,
            components=components,
            age_days=age_days,
            params=self.params,
            is_ai_generated=node.is_ai_generated,
            emotional_intensity=emotional_intensity,
            weak_threshold=self.weak_threshold,
        )
