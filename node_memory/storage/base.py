"""
Abstract base classes for persistence backends.

The engine itself does no I/O; a storage backend saves and restores the
complete engine state between process runs.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from pydantic import BaseModel, Field

from node_memory.models.archive import ForgottenNode
from node_memory.models.node import ActiveNode, Interaction
from node_memory.models.score import ForgettingParameters, RetentionScore


# Custom exceptions
class StorageError(Exception):
    """Base exception for storage errors."""

    pass


class EngineState(BaseModel):
    """Everything the engine needs to resume after a restart."""

    parameters: ForgettingParameters = Field(default_factory=ForgettingParameters)
    scores: dict[str, RetentionScore] = Field(default_factory=dict)
    scores_computed_at: datetime | None = None
    archive: list[ForgottenNode] = Field(default_factory=list)
    interactions: list[Interaction] = Field(default_factory=list)
    active_nodes: list[ActiveNode] = Field(default_factory=list)


class BaseRetentionStorage(ABC):
    """
    Abstract base class for engine state storage.

    Saves replace the stored state as a whole so a reload always sees one
    consistent state.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize connection to storage backend."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to storage backend."""
        pass

    @abstractmethod
    async def is_connected(self) -> bool:
        """Check if storage is connected."""
        pass

    @abstractmethod
    async def save_state(self, state: EngineState) -> None:
        """
        Replace the stored state.

        Args:
            state: Complete engine state
        """
        pass

    @abstractmethod
    async def load_state(self) -> EngineState | None:
        """
        Load the stored state.

        Returns:
            The stored state, or None if nothing has been saved yet
        """
        pass

    @abstractmethod
    async def save_parameters(self, parameters: ForgettingParameters) -> None:
        """Persist only the forgetting parameters."""
        pass

    @abstractmethod
    async def load_parameters(self) -> ForgettingParameters | None:
        """Load the forgetting parameters, or None if never saved."""
        pass

    async def __aenter__(self) -> "BaseRetentionStorage":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()
