"""
Node Memory - Adaptive retention and forgetting for knowledge graphs

Continuously estimates how "alive" each node of a user-authored knowledge
graph is, decides which nodes should leave the active working set, and
keeps a bounded archive from which forgotten nodes can be recalled:
- Five-signal retention scores (time, frequency, importance, emotion, connections)
- Pluggable decay laws (exponential, linear, stepwise)
- Explainable forgetting decisions with protection rules
- Bounded, recallable archive (oldest purged first)
- Health statistics and event hooks
- SQLite persistence

Quick Start:
    from node_memory import MemoryForgettingEngine, NodeSnapshot, ActiveNode

    engine = MemoryForgettingEngine()
    await engine.initialize()

    snapshot = NodeSnapshot(nodes=[ActiveNode(id="n1", content="...")], degrees={"n1": 2})
    scores = await engine.run_analysis(snapshot)
    print(engine.health_stats())
"""

from node_memory.api.engine import MemoryForgettingEngine
from node_memory.api.hooks import HookContext, HookEvent, HookRegistry
from node_memory.api.scheduler import AnalysisScheduler
from node_memory.config import EngineConfig
from node_memory.errors import (
    AlreadyArchivedError,
    AnalysisInProgressError,
    ForgettingEngineError,
    NodeNotFoundError,
    NotArchivedError,
    ParameterValidationError,
    PartialSignalError,
)
from node_memory.models import (
    ActiveNode,
    DecayStrategy,
    ForgettingParameters,
    ForgottenNode,
    Interaction,
    InteractionKind,
    MemoryHealthStats,
    NodeSnapshot,
    NodeType,
    RetentionScore,
)
from node_memory.storage import SQLiteRetentionStorage

__version__ = "0.1.0"

__all__ = [
    # Main entry points
    "MemoryForgettingEngine",
    "AnalysisScheduler",
    "SQLiteRetentionStorage",

    # Configuration
    "EngineConfig",
    "ForgettingParameters",
    "DecayStrategy",

    # Models
    "ActiveNode",
    "NodeSnapshot",
    "NodeType",
    "Interaction",
    "InteractionKind",
    "RetentionScore",
    "ForgottenNode",
    "MemoryHealthStats",

    # Hooks
    "HookRegistry",
    "HookEvent",
    "HookContext",

    # Errors
    "ForgettingEngineError",
    "ParameterValidationError",
    "NodeNotFoundError",
    "AlreadyArchivedError",
    "NotArchivedError",
    "PartialSignalError",
    "AnalysisInProgressError",
]
