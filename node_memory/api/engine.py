"""
Memory Forgetting Engine.

The main entry point: ties scoring, policy, the retention store, the
archive and persistence into one interface.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Any, Callable, Iterable

from pydantic import ValidationError

from node_memory.api.hooks import HookContext, HookEvent, HookRegistry
from node_memory.config import EngineConfig
from node_memory.decay.frequency import InteractionLog
from node_memory.errors import (
    AlreadyArchivedError,
    AnalysisInProgressError,
    NodeNotFoundError,
    ParameterValidationError,
)
from node_memory.models.archive import ForgottenNode
from node_memory.models.base import utcnow
from node_memory.models.node import ActiveNode, Interaction, InteractionKind, NodeSnapshot
from node_memory.models.score import ForgettingParameters, MemoryHealthStats, RetentionScore
from node_memory.scoring.calculator import ScoreCalculator
from node_memory.scoring.policy import MANUAL_REASON
from node_memory.storage.base import BaseRetentionStorage, EngineState, StorageError
from node_memory.store.archive import ForgettingArchive
from node_memory.store.health import HealthAggregator, health_insights
from node_memory.store.retention import RetentionStore

logger = logging.getLogger(__name__)


class MemoryForgettingEngine:
    """
    Adaptive retention and forgetting for a graph of knowledge nodes.

    Provides:
    - Analysis passes scoring every active node
    - Explainable keep/forget decisions
    - Manual and automatic forgetting into a bounded archive
    - Recall from the archive
    - Health statistics

    Analysis runs in the default executor and never overlaps itself; a
    second request while one is in flight raises AnalysisInProgressError.
    Forget, recall and parameter writes are serialized with analysis
    through one lock.

    Usage:
        engine = MemoryForgettingEngine()
        await engine.initialize()

        scores = await engine.run_analysis(NodeSnapshot(nodes=nodes, degrees=degrees))
        entry = await engine.forget(node_id)
        node = await engine.recall(node_id)
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        parameters: ForgettingParameters | None = None,
        storage: BaseRetentionStorage | None = None,
        hooks: HookRegistry | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.config = config or EngineConfig()
        self._parameters = parameters or ForgettingParameters()
        self._storage = storage
        self._hooks = hooks or HookRegistry()
        self._clock = clock

        self._calculator = ScoreCalculator(self.config.scoring, self.config.interactions)
        self._health = HealthAggregator()

        # State
        self._store = RetentionStore()
        self._archive = ForgettingArchive(self._parameters.max_forgotten_nodes)
        self._interactions = InteractionLog(self.config.interactions)
        self._active: dict[str, ActiveNode] = {}

        self._lock = asyncio.Lock()
        self._analyzing = False
        self._last_analysis_at: datetime | None = None
        self._initialized = False

        if self.config.debug:
            logging.getLogger("node_memory").setLevel(logging.DEBUG)

    # Lifecycle

    async def initialize(self) -> None:
        """Connect storage and restore the saved state, if any."""
        if self._initialized:
            return

        if self._storage is not None:
            if not await self._storage.is_connected():
                await self._storage.connect()
            state = await self._storage.load_state()
            if state is not None:
                self.restore_state(state)
                logger.info(
                    f"Restored {len(self._store)} scores and {len(self._archive)} archived nodes"
                )

        self._initialized = True

    async def close(self) -> None:
        """Disconnect storage."""
        if self._storage is not None:
            await self._storage.disconnect()
        self._initialized = False

    async def save(self) -> None:
        """Persist the complete state."""
        if self._storage is None:
            return
        await self._storage.save_state(self.export_state())

    async def _ensure_storage_ready(self, always: bool = False) -> None:
        """Fail before mutating state if a write to storage would fail afterwards."""
        if self._storage is None or not (always or self.config.storage.autosave):
            return
        if not await self._storage.is_connected():
            raise StorageError("Storage is not connected; call initialize() first")

    async def _autosave(self) -> None:
        if self._storage is not None and self.config.storage.autosave:
            await self.save()

    def export_state(self) -> EngineState:
        """Snapshot of everything needed to resume after a restart."""
        return EngineState(
            parameters=self._parameters,
            scores=self._store.as_dict(),
            scores_computed_at=self._store.computed_at,
            archive=self._archive.entries(),
            interactions=self._interactions.all_events(),
            active_nodes=list(self._active.values()),
        )

    def restore_state(self, state: EngineState) -> None:
        """Replace in-memory state with a saved one."""
        self._parameters = state.parameters
        self._archive = ForgettingArchive(state.parameters.max_forgotten_nodes)
        self._archive.load(state.archive)

        archived = {entry.node_id for entry in self._archive}
        self._store.replace(
            {node_id: score for node_id, score in state.scores.items() if node_id not in archived},
            state.scores_computed_at,
        )
        self._active = {node.id: node for node in state.active_nodes if node.id not in archived}
        self._interactions.load([event for event in state.interactions if event.node_id not in archived])
        self._last_analysis_at = state.scores_computed_at

    # Events

    async def _emit(self, event: HookEvent, node_id: str | None = None, **data: Any) -> None:
        await self._hooks.trigger_async(HookContext(event=event, node_id=node_id, data=data))

    @property
    def hooks(self) -> HookRegistry:
        return self._hooks

    # Parameters

    @property
    def parameters(self) -> ForgettingParameters:
        return self._parameters

    async def set_parameters(self, parameters: ForgettingParameters | dict[str, Any]) -> ForgettingParameters:
        """
        Replace the forgetting parameters.

        Lowering ``max_forgotten_nodes`` below the archive size purges the
        oldest archived nodes.

        Raises:
            ParameterValidationError: If the new parameters are invalid; the
                previous parameters stay in effect
            StorageError: If storage is attached but not connected; nothing
                changes
        """
        data = parameters.model_dump() if isinstance(parameters, ForgettingParameters) else parameters
        try:
            validated = ForgettingParameters.model_validate(data)
        except ValidationError as e:
            raise ParameterValidationError(
                f"Invalid forgetting parameters: {e.error_count()} error(s)",
                errors=e.errors(include_url=False),
            ) from e

        await self._ensure_storage_ready(always=True)

        async with self._lock:
            previous = self._parameters
            self._parameters = validated
            purged = self._archive.resize(validated.max_forgotten_nodes)

        logger.info(f"Forgetting parameters updated: {validated.model_dump(mode='json')}")
        await self._emit(
            HookEvent.PARAMETERS_CHANGED,
            previous=previous.model_dump(mode="json"),
            current=validated.model_dump(mode="json"),
        )
        for entry in purged:
            await self._emit(HookEvent.NODE_PURGED, node_id=entry.node_id, entry_id=entry.id)

        if self._storage is not None:
            await self._storage.save_parameters(validated)
        await self._autosave()
        return validated

    async def update_parameters(self, **changes: Any) -> ForgettingParameters:
        """Change selected parameter fields, keeping the rest."""
        data = self._parameters.model_dump()
        data.update(changes)
        return await self.set_parameters(data)

    # Interactions

    def record_interaction(
        self,
        node_id: str,
        kind: InteractionKind = InteractionKind.SELECT,
        at: datetime | None = None,
    ) -> Interaction:
        """
        Record an interaction with an active node.

        Raises:
            AlreadyArchivedError: If the node is archived
        """
        if self._archive.contains_node(node_id):
            raise AlreadyArchivedError(node_id)

        interaction = Interaction(node_id=node_id, kind=kind, at=at or self._clock())
        self._interactions.record(interaction)
        self._hooks.trigger(
            HookContext(
                event=HookEvent.INTERACTION_RECORDED,
                node_id=node_id,
                data={"kind": kind.value},
            )
        )
        return interaction

    def interactions_for(self, node_id: str) -> list[Interaction]:
        return self._interactions.events_for(node_id)

    # Analysis

    @property
    def is_analyzing(self) -> bool:
        return self._analyzing

    @property
    def last_analysis_at(self) -> datetime | None:
        return self._last_analysis_at

    async def run_analysis(
        self,
        snapshot: NodeSnapshot | Iterable[ActiveNode],
        auto_forget: bool = False,
    ) -> dict[str, RetentionScore]:
        """
        Score every node in the snapshot and replace the retention store.

        Nodes already in the archive are skipped. Scores are published only
        after the whole batch finished.
        Interaction history of nodes missing from the snapshot is dropped.

        Args:
            snapshot: Node snapshot, or bare nodes (scored as of now with no
                external signals)
            auto_forget: Apply automatic forgetting after the pass

        Returns:
            Scores computed by this pass, keyed by node id

        Raises:
            AnalysisInProgressError: If another pass is running
        """
        if self._analyzing:
            logger.warning("Analysis requested while another pass is running")
            raise AnalysisInProgressError("An analysis pass is already in progress")

        await self._ensure_storage_ready()
        self._analyzing = True
        try:
            if not isinstance(snapshot, NodeSnapshot):
                snapshot = NodeSnapshot(nodes=list(snapshot), taken_at=self._clock())

            await self._emit(HookEvent.ANALYSIS_STARTED, node_count=len(snapshot.nodes))
            started = time.perf_counter()

            async with self._lock:
                scored = [node for node in snapshot.nodes if not self._archive.contains_node(node.id)]
                if len(scored) != len(snapshot.nodes):
                    logger.warning(
                        f"Skipping {len(snapshot.nodes) - len(scored)} archived nodes in snapshot"
                    )
                    snapshot = snapshot.model_copy(update={"nodes": scored})

                params = self._parameters
                interactions = self._interactions.copy()
                loop = asyncio.get_running_loop()
                scores = await loop.run_in_executor(
                    None,
                    self._calculator.calculate_batch,
                    snapshot,
                    params,
                    interactions,
                )

                self._store.replace(scores, snapshot.taken_at)
                self._active = {node.id: node for node in snapshot.nodes}
                dropped = self._interactions.retain(set(self._active))
                if dropped:
                    logger.debug(f"Dropped interaction history of {dropped} nodes no longer in the graph")
                self._last_analysis_at = snapshot.taken_at

                forgotten: list[ForgottenNode] = []
                purged: list[ForgottenNode] = []
                if auto_forget:
                    forgotten, purged = self._apply_auto_forgetting_locked()
        finally:
            self._analyzing = False

        duration = time.perf_counter() - started
        candidates = sum(1 for score in scores.values() if score.should_forget)
        logger.info(
            f"Analysis scored {len(scores)} nodes in {duration:.3f}s: "
            f"{candidates} candidates, {len(forgotten)} forgotten"
        )

        await self._emit_forgotten(forgotten, purged)
        await self._emit(
            HookEvent.ANALYSIS_COMPLETED,
            node_count=len(scores),
            candidates=candidates,
            forgotten=len(forgotten),
            duration_seconds=duration,
        )
        await self._autosave()
        return scores

    # Queries

    def score_of(self, node_id: str) -> RetentionScore | None:
        """Latest retention score for a node, if it has one."""
        return self._store.get(node_id)

    def scores(self) -> dict[str, RetentionScore]:
        return self._store.as_dict()

    def forgetting_candidates(self) -> list[RetentionScore]:
        """Nodes marked for forgetting, lowest score first."""
        return self._store.candidates()

    def active_nodes(self) -> list[ActiveNode]:
        return list(self._active.values())

    def get_node(self, node_id: str) -> ActiveNode | None:
        return self._active.get(node_id)

    def is_archived(self, node_id: str) -> bool:
        return self._archive.contains_node(node_id)

    @property
    def archive(self) -> ForgettingArchive:
        return self._archive

    def forgotten_nodes(self, newest_first: bool = False) -> list[ForgottenNode]:
        return self._archive.entries(newest_first=newest_first)

    def search_archive(self, text: str) -> list[ForgottenNode]:
        return self._archive.search(text)

    def health_stats(self) -> MemoryHealthStats:
        """Health summary of the current retention store."""
        return self._health.compute(self._store, archived=len(self._archive))

    def health_insights(self) -> list[str]:
        return health_insights(self.health_stats())

    # Forget / recall

    def _forget_locked(
        self,
        node_id: str,
        reason: str | None,
    ) -> tuple[ForgottenNode, list[ForgottenNode]]:
        if self._archive.contains_node(node_id):
            raise AlreadyArchivedError(node_id)

        node = self._active.get(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)

        score = self._store.get(node_id)
        if reason is None:
            reason = score.forgetting_reason if score and score.forgetting_reason else MANUAL_REASON

        entry = ForgottenNode.from_node(
            node,
            reason=reason,
            memory_score=score.overall_score if score else 0.0,
            forgotten_at=self._clock(),
        )
        purged = self._archive.add(entry)

        del self._active[node_id]
        self._store.remove(node_id)
        self._interactions.clear(node_id)

        logger.info(f"Forgot node {node_id}: {reason}")
        return entry, purged

    async def _emit_forgotten(self, forgotten: list[ForgottenNode], purged: list[ForgottenNode]) -> None:
        for entry in forgotten:
            await self._emit(
                HookEvent.NODE_FORGOTTEN,
                node_id=entry.node_id,
                entry_id=entry.id,
                reason=entry.reason,
            )
        for entry in purged:
            await self._emit(HookEvent.NODE_PURGED, node_id=entry.node_id, entry_id=entry.id)

    async def forget(self, node_id: str, reason: str | None = None) -> ForgottenNode:
        """
        Move an active node into the archive.

        Args:
            node_id: Node to forget
            reason: Explanation; defaults to the node's forgetting reason,
                or "manually forgotten"

        Returns:
            The archive entry

        Raises:
            AlreadyArchivedError: If the node is already archived
            NodeNotFoundError: If the node is not active
        """
        await self._ensure_storage_ready()
        async with self._lock:
            entry, purged = self._forget_locked(node_id, reason)

        await self._emit_forgotten([entry], purged)
        await self._autosave()
        return entry

    def _apply_auto_forgetting_locked(self) -> tuple[list[ForgottenNode], list[ForgottenNode]]:
        if not self._parameters.enable_auto_forgetting:
            return [], []

        forgotten: list[ForgottenNode] = []
        purged: list[ForgottenNode] = []
        for score in self._store.candidates()[: self._parameters.max_forgotten_nodes]:
            try:
                entry, evicted = self._forget_locked(score.node_id, score.forgetting_reason)
            except (AlreadyArchivedError, NodeNotFoundError) as e:
                logger.warning(f"Auto forgetting skipped {score.node_id}: {e}")
                continue
            forgotten.append(entry)
            purged.extend(evicted)
        return forgotten, purged

    async def apply_auto_forgetting(self) -> list[ForgottenNode]:
        """
        Forget every node the last analysis marked, lowest score first.

        At most ``max_forgotten_nodes`` nodes are forgotten per call. Does
        nothing when automatic forgetting is disabled.
        """
        await self._ensure_storage_ready()
        async with self._lock:
            forgotten, purged = self._apply_auto_forgetting_locked()

        await self._emit_forgotten(forgotten, purged)
        if forgotten:
            await self._autosave()
        return forgotten

    async def recall(self, key: str) -> ActiveNode:
        """
        Restore an archived node to the active set.

        Args:
            key: Original node id or archive entry id

        Returns:
            The restored node, marked as freshly touched. It has no retention
            score until the next analysis pass. The touch is also recorded as
            an interaction, so the reset holds even when the next snapshot
            carries the host's own copy of the node.

        Raises:
            NotArchivedError: If nothing in the archive matches
        """
        await self._ensure_storage_ready()
        async with self._lock:
            entry = self._archive.pop(key)
            node = entry.restore(touched_at=self._clock())
            self._active[node.id] = node
            self._interactions.record(
                Interaction(node_id=node.id, kind=InteractionKind.VIEW, at=node.last_touched_at)
            )

        logger.info(f"Recalled node {node.id}")
        await self._emit(HookEvent.NODE_RECALLED, node_id=node.id, entry_id=entry.id)
        await self._autosave()
        return node
