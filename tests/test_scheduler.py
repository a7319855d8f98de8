"""
Tests for the periodic analysis scheduler.
"""

import asyncio

import pytest

from node_memory.api.engine import MemoryForgettingEngine
from node_memory.api.scheduler import AnalysisScheduler
from node_memory.config import SchedulerConfig
from node_memory.models.node import NodeSnapshot

from tests.helpers import make_node


@pytest.fixture
async def engine(clock, scenario_params):
    engine = MemoryForgettingEngine(parameters=scenario_params, clock=clock)
    await engine.initialize()
    yield engine
    await engine.close()


def _provider(clock):
    def snapshot() -> NodeSnapshot:
        nodes = [make_node(node_id, age_days=30, now=clock()) for node_id in ("a", "b", "c")]
        return NodeSnapshot(nodes=nodes, degrees={"a": 0, "b": 5, "c": 5}, taken_at=clock())

    return snapshot


class TestAnalysisScheduler:
    """Tests for AnalysisScheduler."""

    @pytest.mark.asyncio
    async def test_run_once_with_auto_forget(self, engine, clock):
        scheduler = AnalysisScheduler(engine, _provider(clock), SchedulerConfig(auto_forget=True))

        result = await scheduler.run_once()

        assert result.success
        assert result.nodes_scored == 3
        assert result.candidates == 1
        assert result.forgotten == 1
        assert engine.is_archived("a")
        assert scheduler.last_run == result

    @pytest.mark.asyncio
    async def test_run_once_without_auto_forget(self, engine, clock):
        scheduler = AnalysisScheduler(engine, _provider(clock), SchedulerConfig(auto_forget=False))

        result = await scheduler.run_once()

        assert result.candidates == 1
        assert result.forgotten == 0
        assert not engine.is_archived("a")

    @pytest.mark.asyncio
    async def test_async_provider(self, engine, clock):
        sync_provider = _provider(clock)

        async def provider():
            return sync_provider()

        result = await AnalysisScheduler(engine, provider).run_once()
        assert result.nodes_scored == 3

    @pytest.mark.asyncio
    async def test_failure_recorded(self, engine):
        def broken():
            raise RuntimeError("graph unavailable")

        result = await AnalysisScheduler(engine, broken).run_once()

        assert not result.success
        assert result.errors == ["graph unavailable"]
        assert result.completed_at is not None

    @pytest.mark.asyncio
    async def test_start_and_stop(self, engine, clock):
        scheduler = AnalysisScheduler(
            engine,
            _provider(clock),
            SchedulerConfig(interval_seconds=3600, auto_forget=False),
        )

        await scheduler.start()
        assert scheduler.is_running
        for _ in range(100):
            if scheduler.last_run is not None:
                break
            await asyncio.sleep(0.01)
        await scheduler.stop()

        assert not scheduler.is_running
        assert scheduler.last_run is not None
        assert scheduler.last_run.success
