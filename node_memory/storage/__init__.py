"""
Persistence backends for engine state.
"""

from node_memory.storage.base import BaseRetentionStorage, EngineState, StorageError
from node_memory.storage.sqlite import SQLiteRetentionStorage

__all__ = [
    "BaseRetentionStorage",
    "EngineState",
    "StorageError",
    "SQLiteRetentionStorage",
]
