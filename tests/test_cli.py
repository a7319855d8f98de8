"""
Tests for the inspection CLI.
"""

import asyncio
import json

import pytest

from node_memory.api.engine import MemoryForgettingEngine
from node_memory.cli import build_parser, main
from node_memory.config import EngineConfig, StorageConfig
from node_memory.models.node import NodeSnapshot
from node_memory.models.score import ForgettingParameters
from node_memory.storage.sqlite import SQLiteRetentionStorage

from tests.helpers import NOW, FakeClock, make_node


async def _populate(db_path) -> None:
    config = EngineConfig(storage=StorageConfig(sqlite_path=db_path))
    engine = MemoryForgettingEngine(
        config=config,
        parameters=ForgettingParameters(protection_period_days=3),
        storage=SQLiteRetentionStorage(config.storage),
        clock=FakeClock(),
    )
    await engine.initialize()
    nodes = [
        make_node("a", age_days=30, content="half-formed idea about caching"),
        make_node("b", age_days=30),
        make_node("c", age_days=30),
    ]
    await engine.run_analysis(NodeSnapshot(nodes=nodes, degrees={"a": 0, "b": 0, "c": 5}, taken_at=NOW))
    await engine.forget("a")
    await engine.save()
    await engine.close()


@pytest.fixture
def db_path(temp_directory):
    path = temp_directory / "cli.db"
    asyncio.run(_populate(path))
    return path


class TestCLI:
    """Tests for the node-memory command."""

    def test_parser_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_stats(self, db_path, capsys):
        assert main(["--db", str(db_path), "stats"]) == 0
        out = capsys.readouterr().out
        assert "Active nodes:      2" in out
        assert "Archived nodes:    1" in out

    def test_stats_json(self, db_path, capsys):
        assert main(["--db", str(db_path), "--json", "stats"]) == 0
        stats = json.loads(capsys.readouterr().out)
        assert stats["total_nodes"] == 2
        assert stats["forgotten_nodes"] == 1

    def test_archive_search(self, db_path, capsys):
        assert main(["--db", str(db_path), "--json", "archive", "--search", "caching"]) == 0
        entries = json.loads(capsys.readouterr().out)
        assert [entry["node_id"] for entry in entries] == ["a"]

    def test_candidates(self, db_path, capsys):
        assert main(["--db", str(db_path), "candidates"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("b ")

    def test_params(self, db_path, capsys):
        assert main(["--db", str(db_path), "params"]) == 0
        params = json.loads(capsys.readouterr().out)
        assert params["protection_period_days"] == 3

    def test_empty_database(self, temp_directory, capsys):
        assert main(["--db", str(temp_directory / "fresh.db"), "stats"]) == 0
        assert "Memory is balanced." in capsys.readouterr().out
