"""
Periodic analysis scheduler.

Runs an analysis pass every ``interval_seconds`` against a fresh snapshot
from the host application, optionally applying automatic forgetting.
"""

import asyncio
import inspect
import logging
from datetime import datetime
from typing import Awaitable, Callable, Union

from pydantic import BaseModel, Field

from node_memory.api.engine import MemoryForgettingEngine
from node_memory.config import SchedulerConfig
from node_memory.models.base import utcnow
from node_memory.models.node import NodeSnapshot

logger = logging.getLogger(__name__)

SnapshotProvider = Callable[[], Union[NodeSnapshot, Awaitable[NodeSnapshot]]]


class AnalysisRunResult(BaseModel):
    """Result of a scheduled analysis run."""

    run_id: str
    started_at: datetime
    completed_at: datetime | None = None
    duration_seconds: float | None = None

    nodes_scored: int = 0
    candidates: int = 0
    forgotten: int = 0

    errors: list[str] = Field(default_factory=list)
    success: bool = True


class AnalysisScheduler:
    """
    Background scheduler for analysis passes.

    Usage:
        scheduler = AnalysisScheduler(engine, snapshot_provider=graph.snapshot)
        await scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        engine: MemoryForgettingEngine,
        snapshot_provider: SnapshotProvider,
        config: SchedulerConfig | None = None,
    ):
        self.engine = engine
        self.snapshot_provider = snapshot_provider
        self.config = config or engine.config.scheduler

        self._running = False
        self._task: asyncio.Task | None = None
        self._run_count = 0
        self._last_run: AnalysisRunResult | None = None

    async def start(self) -> None:
        """Start the background loop."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())

    async def stop(self) -> None:
        """Stop the background loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _run_loop(self) -> None:
        """Main analysis loop."""
        while self._running:
            await self.run_once()
            await asyncio.sleep(self.config.interval_seconds)

    async def _snapshot(self) -> NodeSnapshot:
        result = self.snapshot_provider()
        if inspect.isawaitable(result):
            result = await result
        return result

    async def run_once(self) -> AnalysisRunResult:
        """
        Run a single analysis cycle.

        This can be called manually or by the background loop. Failures are
        recorded on the result instead of raised.
        """
        self._run_count += 1
        started_at = utcnow()
        result = AnalysisRunResult(
            run_id=f"run_{self._run_count}_{started_at.timestamp()}",
            started_at=started_at,
        )

        try:
            snapshot = await self._snapshot()
            scores = await self.engine.run_analysis(
                snapshot,
                auto_forget=self.config.auto_forget,
            )
            result.nodes_scored = len(scores)
            result.candidates = sum(1 for score in scores.values() if score.should_forget)
            result.forgotten = sum(
                1 for node_id in scores if self.engine.get_node(node_id) is None
            )
        except Exception as e:
            logger.exception("Scheduled analysis failed")
            result.success = False
            result.errors.append(str(e))

        result.completed_at = utcnow()
        result.duration_seconds = (result.completed_at - started_at).total_seconds()

        self._last_run = result
        return result

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._running

    @property
    def last_run(self) -> AnalysisRunResult | None:
        """Get result of last analysis run."""
        return self._last_run
