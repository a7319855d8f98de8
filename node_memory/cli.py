#!/usr/bin/env python3
"""
Inspection CLI for a persisted engine state.

Run with: python -m node_memory.cli --db ./data/node_memory.db stats

or if installed: node-memory stats
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from node_memory.api.engine import MemoryForgettingEngine
from node_memory.config import EngineConfig, StorageConfig
from node_memory.storage.base import StorageError
from node_memory.storage.sqlite import SQLiteRetentionStorage
from node_memory.store.health import health_insights


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="node-memory",
        description="Inspect retention scores and the forgetting archive",
    )
    parser.add_argument("--db", type=Path, default=StorageConfig().sqlite_path, help="SQLite database path")
    parser.add_argument("--config", type=Path, default=None, help="Engine config JSON file")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("stats", help="Show memory health statistics")

    archive = sub.add_parser("archive", help="List forgotten nodes, newest first")
    archive.add_argument("--search", default="", help="Filter by content or reason")
    archive.add_argument("--limit", type=int, default=20)

    candidates = sub.add_parser("candidates", help="List nodes marked for forgetting")
    candidates.add_argument("--limit", type=int, default=20)

    sub.add_parser("params", help="Show forgetting parameters")
    return parser


async def _load_engine(args: argparse.Namespace) -> MemoryForgettingEngine:
    config = EngineConfig.from_file(args.config) if args.config else EngineConfig()
    storage = SQLiteRetentionStorage(StorageConfig(sqlite_path=args.db))
    engine = MemoryForgettingEngine(config=config, storage=storage)
    await engine.initialize()
    return engine


async def run(args: argparse.Namespace) -> int:
    engine = await _load_engine(args)
    try:
        if args.command == "stats":
            stats = engine.health_stats()
            if args.json:
                print(stats.model_dump_json(indent=2))
            else:
                print(f"Active nodes:      {stats.total_nodes}")
                print(f"  healthy:         {stats.healthy_nodes}")
                print(f"  at risk:         {stats.at_risk_nodes}")
                print(f"  forgettable:     {stats.forgettable_nodes}")
                print(f"Archived nodes:    {stats.forgotten_nodes}")
                print(f"Average score:     {stats.average_memory_score:.3f}")
                for label, count in stats.score_histogram.items():
                    print(f"  {label}: {'#' * count} {count}")
                for insight in health_insights(stats):
                    print(f"- {insight}")

        elif args.command == "archive":
            entries = engine.search_archive(args.search)[: args.limit]
            if args.json:
                print(json.dumps([entry.model_dump(mode="json") for entry in entries], indent=2))
            else:
                for entry in entries:
                    print(
                        f"{entry.forgotten_at:%Y-%m-%d %H:%M}  {entry.node_id}  "
                        f"[{entry.node_type.value}] score={entry.memory_score:.2f}  "
                        f"{entry.content[:60]!r}  ({entry.reason})"
                    )

        elif args.command == "candidates":
            scores = engine.forgetting_candidates()[: args.limit]
            if args.json:
                print(json.dumps([score.model_dump(mode="json") for score in scores], indent=2))
            else:
                for score in scores:
                    print(f"{score.node_id}  overall={score.overall_score:.3f}  {score.forgetting_reason}")

        elif args.command == "params":
            print(engine.parameters.model_dump_json(indent=2))

        return 0
    finally:
        await engine.close()


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        return asyncio.run(run(args))
    except StorageError as e:
        print(f"Storage error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
