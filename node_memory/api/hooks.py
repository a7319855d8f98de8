"""
Event hooks for engine state changes.

The engine does not push state anywhere itself; observers (UI layers,
sync, metrics) subscribe here instead.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable

from node_memory.models.base import utcnow

logger = logging.getLogger(__name__)


class HookEvent(str, Enum):
    """Types of hook events."""

    # Analysis
    ANALYSIS_STARTED = "analysis_started"
    ANALYSIS_COMPLETED = "analysis_completed"

    # Archive lifecycle
    NODE_FORGOTTEN = "node_forgotten"
    NODE_RECALLED = "node_recalled"
    NODE_PURGED = "node_purged"

    # Configuration and signals
    PARAMETERS_CHANGED = "parameters_changed"
    INTERACTION_RECORDED = "interaction_recorded"


@dataclass
class HookContext:
    """Context passed to hook callbacks."""

    event: HookEvent
    timestamp: datetime = field(default_factory=utcnow)
    node_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


# Type for hook callbacks
HookCallback = Callable[[HookContext], None]
AsyncHookCallback = Callable[[HookContext], Awaitable[None]]


class HookRegistry:
    """
    Registry for engine event hooks.

    Callback failures are collected and logged; they never propagate into
    the engine operation that fired the event.
    """

    def __init__(self):
        self._sync_hooks: dict[HookEvent, list[HookCallback]] = {}
        self._async_hooks: dict[HookEvent, list[AsyncHookCallback]] = {}
        self._global_hooks: list[HookCallback] = []
        self._enabled = True

    def register(self, event: HookEvent, callback: HookCallback) -> None:
        """Register a synchronous hook for an event."""
        self._sync_hooks.setdefault(event, []).append(callback)

    def register_async(self, event: HookEvent, callback: AsyncHookCallback) -> None:
        """Register an async hook for an event."""
        self._async_hooks.setdefault(event, []).append(callback)

    def register_global(self, callback: HookCallback) -> None:
        """Register a hook that fires for all events."""
        self._global_hooks.append(callback)

    def unregister(self, event: HookEvent, callback: HookCallback | AsyncHookCallback) -> bool:
        """
        Unregister a hook.

        Returns:
            True if callback was found and removed
        """
        for hooks in (self._sync_hooks, self._async_hooks):
            if event in hooks and callback in hooks[event]:
                hooks[event].remove(callback)
                return True
        return False

    def trigger(self, context: HookContext) -> list[Exception]:
        """
        Trigger all synchronous hooks for an event.

        Returns:
            List of any exceptions that occurred
        """
        if not self._enabled:
            return []

        errors = []
        callbacks = self._global_hooks + self._sync_hooks.get(context.event, [])
        for callback in callbacks:
            try:
                callback(context)
            except Exception as e:
                logger.warning(f"Hook for {context.event.value} failed: {e}")
                errors.append(e)

        return errors

    async def trigger_async(self, context: HookContext) -> list[Exception]:
        """
        Trigger synchronous then async hooks for an event.

        Returns:
            List of any exceptions that occurred
        """
        if not self._enabled:
            return []

        errors = self.trigger(context)

        for callback in self._async_hooks.get(context.event, []):
            try:
                await callback(context)
            except Exception as e:
                logger.warning(f"Async hook for {context.event.value} failed: {e}")
                errors.append(e)

        return errors

    def enable(self) -> None:
        """Enable hook triggering."""
        self._enabled = True

    def disable(self) -> None:
        """Disable hook triggering (for testing/debugging)."""
        self._enabled = False

    def clear(self, event: HookEvent | None = None) -> None:
        """
        Clear registered hooks.

        Args:
            event: Specific event to clear, or None for all
        """
        if event:
            self._sync_hooks.pop(event, None)
            self._async_hooks.pop(event, None)
        else:
            self._sync_hooks.clear()
            self._async_hooks.clear()
            self._global_hooks.clear()

    def get_hook_count(self, event: HookEvent | None = None) -> int:
        """Get count of registered hooks."""
        if event:
            return len(self._sync_hooks.get(event, [])) + len(self._async_hooks.get(event, []))

        total = len(self._global_hooks)
        for hooks in self._sync_hooks.values():
            total += len(hooks)
        for hooks in self._async_hooks.values():
            total += len(hooks)
        return total
