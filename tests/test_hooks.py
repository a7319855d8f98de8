"""
Tests for the hook registry.
"""

import pytest

from node_memory.api.hooks import HookContext, HookEvent, HookRegistry


class TestHookRegistry:
    """Tests for HookRegistry."""

    def test_register_hook(self):
        """Should register hooks."""
        registry = HookRegistry()

        def callback(ctx):
            pass

        registry.register(HookEvent.NODE_FORGOTTEN, callback)

        assert registry.get_hook_count(HookEvent.NODE_FORGOTTEN) == 1

    def test_trigger_hook(self):
        """Should trigger hooks."""
        registry = HookRegistry()

        results = []
        registry.register(HookEvent.NODE_FORGOTTEN, lambda ctx: results.append(ctx.node_id))

        registry.trigger(HookContext(event=HookEvent.NODE_FORGOTTEN, node_id="a"))

        assert results == ["a"]

    def test_unregister_hook(self):
        """Should unregister hooks."""
        registry = HookRegistry()

        def callback(ctx):
            pass

        registry.register(HookEvent.NODE_RECALLED, callback)

        assert registry.unregister(HookEvent.NODE_RECALLED, callback)
        assert not registry.unregister(HookEvent.NODE_RECALLED, callback)
        assert registry.get_hook_count(HookEvent.NODE_RECALLED) == 0

    def test_global_hook(self):
        """Should trigger global hooks for all events."""
        registry = HookRegistry()

        results = []
        registry.register_global(lambda ctx: results.append(ctx.event))

        registry.trigger(HookContext(event=HookEvent.ANALYSIS_STARTED))
        registry.trigger(HookContext(event=HookEvent.PARAMETERS_CHANGED))

        assert results == [HookEvent.ANALYSIS_STARTED, HookEvent.PARAMETERS_CHANGED]

    def test_failing_hook_collected(self):
        """A failing hook does not stop the others."""
        registry = HookRegistry()
        results = []

        def broken(ctx):
            raise RuntimeError("observer down")

        registry.register(HookEvent.NODE_PURGED, broken)
        registry.register(HookEvent.NODE_PURGED, lambda ctx: results.append(ctx))

        errors = registry.trigger(HookContext(event=HookEvent.NODE_PURGED))

        assert len(errors) == 1
        assert len(results) == 1

    def test_disable_hooks(self):
        """Should disable hook triggering."""
        registry = HookRegistry()

        results = []
        registry.register(HookEvent.NODE_FORGOTTEN, results.append)
        registry.disable()

        registry.trigger(HookContext(event=HookEvent.NODE_FORGOTTEN))
        assert results == []

        registry.enable()
        registry.trigger(HookContext(event=HookEvent.NODE_FORGOTTEN))
        assert len(results) == 1

    def test_clear_hooks(self):
        """Should clear all hooks."""
        registry = HookRegistry()

        def callback(ctx):
            pass

        registry.register(HookEvent.NODE_FORGOTTEN, callback)
        registry.register(HookEvent.NODE_RECALLED, callback)
        registry.register_global(callback)
        registry.clear(HookEvent.NODE_FORGOTTEN)
        assert registry.get_hook_count() == 2

        registry.clear()
        assert registry.get_hook_count() == 0

    @pytest.mark.asyncio
    async def test_trigger_async_runs_both_kinds(self):
        registry = HookRegistry()
        results = []

        async def async_callback(ctx):
            results.append("async")

        registry.register(HookEvent.ANALYSIS_COMPLETED, lambda ctx: results.append("sync"))
        registry.register_async(HookEvent.ANALYSIS_COMPLETED, async_callback)

        errors = await registry.trigger_async(HookContext(event=HookEvent.ANALYSIS_COMPLETED))

        assert errors == []
        assert results == ["sync", "async"]
