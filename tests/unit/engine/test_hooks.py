"""Tests for the lifecycle hook registry."""

from __future__ import annotations

from typing import Any

import pytest

from tactics_engine.core.exceptions import HookRegistrationError
from tactics_engine.engine.hooks import (
    PHASES,
    BoundHook,
    HookPhase,
    HookRegistry,
    HookScope,
    HookSet,
    lookup_hooks,
    run_isolated,
    tag_hook_id,
)


def _noop(*args: Any) -> None:
    return None


async def _async_noop(*args: Any) -> None:
    return None


class TestPhaseTable:
    """Tests for the static phase table."""

    def test_every_phase_described(self) -> None:
        """Test each phase has a signature entry."""
        assert set(PHASES) == set(HookPhase)

    def test_scopes(self) -> None:
        """Test phase scopes."""
        assert PHASES[HookPhase.PREPARE].scope == HookScope.ACTION
        assert PHASES[HookPhase.CONFIRM_ACTION_OUTCOME].scope == HookScope.TARGET
        assert PHASES[HookPhase.PREPARE_DEFENSES].scope == HookScope.TARGET
        assert PHASES[HookPhase.PREPARE_STANDARD_CHECK].scope == HookScope.ACTOR
        assert PHASES[HookPhase.DEFEND_ATTACK].scope == HookScope.ACTOR
        assert PHASES[HookPhase.START_TURN].scope == HookScope.ACTOR

    def test_async_phases(self) -> None:
        """Test which phases may await."""
        async_phases = {phase for phase, spec in PHASES.items() if spec.is_async}

        assert async_phases == {
            HookPhase.PRE_ACTIVATE,
            HookPhase.ROLL,
            HookPhase.CONFIRM,
            HookPhase.CONFIRM_ACTION_OUTCOME,
            HookPhase.POST_ACTIVATE,
        }

    def test_table_is_read_only(self) -> None:
        """Test the phase table cannot be modified."""
        with pytest.raises(TypeError):
            PHASES[HookPhase.PREPARE] = None  # type: ignore[index]


class TestHookSet:
    """Tests for HookSet bundles."""

    def test_phases(self) -> None:
        """Test defined phases are reported in lifecycle order."""
        hook_set = HookSet(post_activate=_async_noop, prepare=_noop)

        assert hook_set.phases == [HookPhase.PREPARE, HookPhase.POST_ACTIVATE]
        assert hook_set.get("prepare") is _noop
        assert hook_set.get(HookPhase.ROLL) is None

    def test_non_callable_rejected(self) -> None:
        """Test non-callable members are rejected."""
        with pytest.raises(HookRegistrationError):
            HookSet(prepare="not callable")  # type: ignore[arg-type]

    def test_from_mapping(self) -> None:
        """Test building from a phase-name mapping."""
        hook_set = HookSet.from_mapping({"can_use": _noop})

        assert hook_set.can_use is _noop

    def test_from_mapping_unknown_phase(self) -> None:
        """Test unknown phase names are rejected."""
        with pytest.raises(HookRegistrationError) as exc_info:
            HookSet.from_mapping({"on_hit": _noop})

        assert exc_info.value.details["phase"] == "on_hit"


class TestBoundHook:
    """Tests for invoking bound callbacks."""

    def test_call_sync(self) -> None:
        """Test synchronous invocation returns the result."""
        hook = BoundHook("a", HookPhase.CAN_USE, lambda state, targets: False)

        assert hook.call_sync(None, []) is False

    def test_call_sync_rejects_awaitable(self) -> None:
        """Test synchronous phases reject coroutine callbacks."""
        hook = BoundHook("a", HookPhase.PREPARE, _async_noop)

        with pytest.raises(HookRegistrationError):
            hook.call_sync(None)

    @pytest.mark.asyncio
    async def test_call_async_awaits(self) -> None:
        """Test asynchronous phases await coroutine callbacks."""

        async def fn(state: Any) -> int:
            return 3

        hook = BoundHook("a", HookPhase.PRE_ACTIVATE, fn)

        assert await hook.call_async(None) == 3

    @pytest.mark.asyncio
    async def test_call_async_accepts_plain_function(self) -> None:
        """Test asynchronous phases accept plain callbacks."""
        hook = BoundHook("a", HookPhase.POST_ACTIVATE, lambda state, outcome: 5)

        assert await hook.call_async(None, None) == 5


class TestLookupHooks:
    """Tests for ordered hook resolution."""

    def test_order_follows_ids(self) -> None:
        """Test hooks resolve in identifier order."""
        hooks = {
            "talent": HookSet(prepare=_noop),
            "strike": HookSet(prepare=_noop),
            "item": HookSet(prepare=_noop),
        }

        bound = lookup_hooks(hooks, HookPhase.PREPARE, ["strike", "talent", "item"])

        assert [h.hook_id for h in bound] == ["strike", "talent", "item"]

    def test_missing_and_undefined_skipped(self) -> None:
        """Test identifiers without hooks for the phase are skipped."""
        hooks = {"talent": HookSet(can_use=_noop)}

        bound = lookup_hooks(hooks, HookPhase.PREPARE, ["unknown", "talent"])

        assert bound == []

    def test_duplicates_ignored(self) -> None:
        """Test repeated identifiers contribute once."""
        hooks = {"talent": HookSet(prepare=_noop)}

        bound = lookup_hooks(hooks, "prepare", ["talent", "talent"])

        assert len(bound) == 1

    def test_tag_identifiers(self) -> None:
        """Test tag hook sets resolve under their prefixed identifier."""
        hooks = {"reload": HookSet(can_use=_noop), tag_hook_id("reload"): HookSet(can_use=_noop)}

        bound = lookup_hooks(hooks, HookPhase.CAN_USE, [tag_hook_id("reload")])

        assert tag_hook_id("reload") == "tag:reload"
        assert [h.hook_id for h in bound] == ["tag:reload"]


class TestRunIsolated:
    """Tests for invoking actor hooks in isolation."""

    def test_failing_hook_skipped(self) -> None:
        """Test a raising hook is reported and later hooks still run."""
        calls: list[str] = []

        def broken(actor: Any, update: dict[str, Any]) -> None:
            raise RuntimeError("boom")

        def steady(actor: Any, update: dict[str, Any]) -> None:
            calls.append(actor)

        bound = lookup_hooks(
            {"broken": HookSet(start_turn=broken), "steady": HookSet(start_turn=steady)},
            HookPhase.START_TURN,
            ["broken", "steady"],
        )

        failed = run_isolated(bound, "aldric", {}, actor="aldric")

        assert [h.hook_id for h in failed] == ["broken"]
        assert calls == ["aldric"]

    def test_awaitable_counts_as_failure(self) -> None:
        """Test a coroutine from a synchronous phase is reported as failed."""
        bound = [BoundHook("slow", HookPhase.END_TURN, _async_noop)]

        assert run_isolated(bound, None, {}) == bound

    def test_no_failures(self) -> None:
        """Test hooks that succeed are not reported."""
        bound = [BoundHook("a", HookPhase.END_TURN, _noop)]

        assert run_isolated(bound, None, {}) == []


class TestHookRegistry:
    """Tests for the HookRegistry."""

    def test_register_and_lookup(self) -> None:
        """Test registered hooks are resolved."""
        registry = HookRegistry()
        registry.register("war_mage", HookSet(prepare=_noop))

        assert "war_mage" in registry
        assert len(registry) == 1
        assert [h.hook_id for h in registry.lookup(HookPhase.PREPARE, ["war_mage"])] == ["war_mage"]

    def test_register_mapping(self) -> None:
        """Test registering a phase mapping."""
        registry = HookRegistry()
        registry.register("blood_magic", {"prepare": _noop})

        assert registry.get("blood_magic") == HookSet(prepare=_noop)

    def test_register_invalid(self) -> None:
        """Test invalid registrations are rejected."""
        registry = HookRegistry()

        with pytest.raises(HookRegistrationError):
            registry.register("", HookSet())
        with pytest.raises(HookRegistrationError):
            registry.register("bad", _noop)  # type: ignore[arg-type]

    def test_replace(self) -> None:
        """Test re-registering replaces the hook set."""
        registry = HookRegistry()
        registry.register("talent", HookSet(prepare=_noop))
        registry.register("talent", HookSet(can_use=_noop))

        assert registry.lookup(HookPhase.PREPARE, ["talent"]) == []
        assert registry.ids() == ["talent"]

    def test_unregister(self) -> None:
        """Test unregistering removes the hook set."""
        registry = HookRegistry()
        registry.register("talent", HookSet(prepare=_noop))
        registry.unregister("talent")
        registry.unregister("missing")

        assert "talent" not in registry

    def test_snapshot_isolated_from_later_registration(self) -> None:
        """Test snapshots keep the registrations they captured."""
        registry = HookRegistry()
        registry.register("talent", HookSet(prepare=_noop))
        snapshot = registry.snapshot()

        registry.register("late", HookSet(prepare=_noop))
        registry.unregister("talent")

        assert list(snapshot) == ["talent"]
        with pytest.raises(TypeError):
            snapshot["late"] = HookSet()  # type: ignore[index]

    def test_default_content_registered(self, registry: HookRegistry) -> None:
        """Test the bundled content registers its hooks."""
        for hook_id in ("strike", "delay", "recover", "blood_magic", "armored_shell"):
            assert hook_id in registry
