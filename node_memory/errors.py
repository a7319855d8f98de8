"""
Exceptions raised by the node memory engine.

Structural problems (bad parameters, unknown ids, invalid state transitions)
are raised to the caller. ``PartialSignalError`` never leaves the score
calculator: it is caught there and replaced by a neutral default.
"""

from typing import Any


class ForgettingEngineError(Exception):
    """Base exception for engine errors."""

    pass


class ParameterValidationError(ForgettingEngineError):
    """Raised when a parameter write is rejected."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []


class NodeNotFoundError(ForgettingEngineError):
    """Raised when a node id is neither active nor archived."""

    def __init__(self, node_id: str):
        super().__init__(f"Node not found: {node_id}")
        self.node_id = node_id


class AlreadyArchivedError(ForgettingEngineError):
    """Raised when forgetting a node that is already in the archive."""

    def __init__(self, node_id: str):
        super().__init__(f"Node already archived: {node_id}")
        self.node_id = node_id


class NotArchivedError(ForgettingEngineError):
    """Raised when recalling a node that is not in the archive."""

    def __init__(self, node_id: str):
        super().__init__(f"Node is not archived: {node_id}")
        self.node_id = node_id


class PartialSignalError(ForgettingEngineError):
    """An external input for a node was unavailable during scoring."""

    def __init__(self, node_id: str, signal: str):
        super().__init__(f"Signal {signal!r} unavailable for node {node_id}")
        self.node_id = node_id
        self.signal = signal


class AnalysisInProgressError(ForgettingEngineError):
    """Raised when an analysis pass is requested while another is running."""

    pass
