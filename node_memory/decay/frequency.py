"""
Interaction counting for the frequency score.

An interaction is an explicit edit, selection, connection or view recorded
by the host application. The frequency score is the number of interactions
inside a rolling window, normalized against a saturation count. Nodes with
no interactions in the window get a low baseline instead of zero.
"""

from collections import deque
from datetime import datetime, timedelta

from node_memory.config import InteractionConfig
from node_memory.models.base import clamp, ensure_utc
from node_memory.models.node import Interaction


class InteractionLog:
    """
    Bounded per-node history of interactions.

    Events are kept in insertion order; each node keeps at most
    ``max_events_per_node`` entries.
    """

    def __init__(self, config: InteractionConfig | None = None):
        self.config = config or InteractionConfig()
        self._events: dict[str, deque[Interaction]] = {}

    def record(self, interaction: Interaction) -> None:
        """Record an interaction."""
        events = self._events.get(interaction.node_id)
        if events is None:
            events = deque(maxlen=self.config.max_events_per_node)
            self._events[interaction.node_id] = events
        events.append(interaction)

    def events_for(self, node_id: str) -> list[Interaction]:
        return list(self._events.get(node_id, ()))

    def has_history(self, node_id: str) -> bool:
        return bool(self._events.get(node_id))

    def count_in_window(self, node_id: str, now: datetime) -> int:
        """Count interactions in the window ending at ``now`` (inclusive)."""
        now = ensure_utc(now)
        start = now - timedelta(days=self.config.window_days)
        return sum(
            1 for event in self._events.get(node_id, ())
            if start <= event.at <= now
        )

    def last_interaction_at(self, node_id: str, now: datetime | None = None) -> datetime | None:
        """Most recent interaction, ignoring events after ``now`` if given."""
        latest = None
        for event in self._events.get(node_id, ()):
            if now is not None and event.at > ensure_utc(now):
                continue
            if latest is None or event.at > latest:
                latest = event.at
        return latest

    def clear(self, node_id: str) -> int:
        """Drop a node's history. Returns the number of events removed."""
        events = self._events.pop(node_id, None)
        return len(events) if events else 0

    def retain(self, node_ids: set[str]) -> int:
        """Drop the history of every node not in ``node_ids``. Returns the number of nodes dropped."""
        stale = [node_id for node_id in self._events if node_id not in node_ids]
        for node_id in stale:
            del self._events[node_id]
        return len(stale)

    def all_events(self) -> list[Interaction]:
        """Every recorded event (for persistence)."""
        return [event for events in self._events.values() for event in events]

    def copy(self) -> "InteractionLog":
        """Independent copy, safe to read while the original keeps changing."""
        clone = InteractionLog(self.config)
        for node_id, events in self._events.items():
            clone._events[node_id] = deque(events, maxlen=events.maxlen)
        return clone

    def load(self, interactions: list[Interaction]) -> None:
        """Replace the log contents."""
        self._events.clear()
        for interaction in sorted(interactions, key=lambda e: e.at):
            self.record(interaction)

    def __len__(self) -> int:
        return sum(len(events) for events in self._events.values())


class FrequencyScorer:
    """Turns an interaction log into frequency scores."""

    def __init__(self, config: InteractionConfig | None = None):
        self.config = config or InteractionConfig()

    def score(self, log: InteractionLog, node_id: str, now: datetime) -> float:
        """
        Calculate the frequency score for a node.

        Args:
            log: Interaction history
            node_id: Node to score
            now: Reference time (end of the rolling window)

        Returns:
            ``baseline_score`` with no interactions inside the window,
            otherwise the normalized in-window count
        """
        count = log.count_in_window(node_id, now)
        if count == 0:
            return self.config.baseline_score
        return clamp(count / self.config.saturation_count)
