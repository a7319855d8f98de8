"""
Public API for the node memory engine.
"""

from node_memory.api.engine import MemoryForgettingEngine
from node_memory.api.hooks import HookContext, HookEvent, HookRegistry
from node_memory.api.scheduler import AnalysisRunResult, AnalysisScheduler

__all__ = [
    "MemoryForgettingEngine",
    "HookRegistry",
    "HookEvent",
    "HookContext",
    "AnalysisScheduler",
    "AnalysisRunResult",
]
