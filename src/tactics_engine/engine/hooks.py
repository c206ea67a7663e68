"""Lifecycle hook registry.

Content such as talents, items, statuses, action types and action tags
contributes behavior by registering a ``HookSet`` under its identifier. A
hook set is a bundle of optional callbacks, one per ``HookPhase``. Every
callback receives its context explicitly:

    ===========================  ======  ================================
    Phase                        Scope   Arguments
    ===========================  ======  ================================
    prepare                      action  (state)
    can_use                      action  (state, targets)
    display_on_sheet             action  (state, combatant)
    pre_activate (async)         action  (state, targets)
    roll (async)                 action  (state, target, outcome)
    confirm (async)              action  (state, outcomes)
    post_activate (async)        action  (state, outcome)
    confirm_action_outcome       target  (actor, state, outcome)
    prepare_defenses             target  (actor, defenses)
    prepare_standard_check       actor   (actor, state, check)
    defend_attack                actor   (actor, state, check)
    prepare_initiative_check     actor   (actor, check)
    start_turn                   actor   (actor, update)
    end_turn                     actor   (actor, update)
    ===========================  ======  ================================

Action-scoped phases collect the hooks of the action's tags, then the
action's own hooks, then every talent, item and status of the acting
actor. Target-scoped phases collect the same identifiers followed by those
of the actor receiving the outcome or defending. Actor-scoped phases
collect only the identifiers of the actor passed as first argument.

Tags register under ``tag_hook_id(tag)`` so they never collide with an
action of the same name.

Example:
    >>> registry = HookRegistry()
    >>> registry.register("powerful_throw", HookSet(prepare=double_thrown_range))
    >>> [h.hook_id for h in registry.lookup(HookPhase.PREPARE, ["javelin", "powerful_throw"])]
    ['powerful_throw']
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, fields
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from tactics_engine.core.exceptions import HookRegistrationError
from tactics_engine.core.logging import get_logger


logger = get_logger(__name__)

HookCallback = Callable[..., Any]

TAG_PREFIX = "tag:"


def tag_hook_id(tag: str) -> str:
    """Registry identifier of an action tag's hook set."""
    return f"{TAG_PREFIX}{tag}"


class HookPhase(StrEnum):
    """Named extension points of the action lifecycle and combat turns."""

    PREPARE = "prepare"
    CAN_USE = "can_use"
    DISPLAY_ON_SHEET = "display_on_sheet"
    PRE_ACTIVATE = "pre_activate"
    ROLL = "roll"
    CONFIRM = "confirm"
    CONFIRM_ACTION_OUTCOME = "confirm_action_outcome"
    POST_ACTIVATE = "post_activate"
    PREPARE_DEFENSES = "prepare_defenses"
    PREPARE_STANDARD_CHECK = "prepare_standard_check"
    DEFEND_ATTACK = "defend_attack"
    PREPARE_INITIATIVE_CHECK = "prepare_initiative_check"
    START_TURN = "start_turn"
    END_TURN = "end_turn"


class HookScope(StrEnum):
    """Whose identifiers contribute hooks to a phase."""

    ACTION = "action"
    TARGET = "target"
    ACTOR = "actor"


@dataclass(frozen=True)
class PhaseSpec:
    """Static description of a hook phase."""

    phase: HookPhase
    scope: HookScope
    is_async: bool
    arg_names: tuple[str, ...]


PHASES: Mapping[HookPhase, PhaseSpec] = MappingProxyType(
    {
        spec.phase: spec
        for spec in (
            PhaseSpec(HookPhase.PREPARE, HookScope.ACTION, False, ("state",)),
            PhaseSpec(HookPhase.CAN_USE, HookScope.ACTION, False, ("state", "targets")),
            PhaseSpec(HookPhase.DISPLAY_ON_SHEET, HookScope.ACTION, False, ("state", "combatant")),
            PhaseSpec(HookPhase.PRE_ACTIVATE, HookScope.ACTION, True, ("state", "targets")),
            PhaseSpec(HookPhase.ROLL, HookScope.ACTION, True, ("state", "target", "outcome")),
            PhaseSpec(HookPhase.CONFIRM, HookScope.ACTION, True, ("state", "outcomes")),
            PhaseSpec(
                HookPhase.CONFIRM_ACTION_OUTCOME,
                HookScope.TARGET,
                True,
                ("actor", "state", "outcome"),
            ),
            PhaseSpec(HookPhase.POST_ACTIVATE, HookScope.ACTION, True, ("state", "outcome")),
            PhaseSpec(HookPhase.PREPARE_DEFENSES, HookScope.TARGET, False, ("actor", "defenses")),
            PhaseSpec(
                HookPhase.PREPARE_STANDARD_CHECK,
                HookScope.ACTOR,
                False,
                ("actor", "state", "check"),
            ),
            PhaseSpec(HookPhase.DEFEND_ATTACK, HookScope.ACTOR, False, ("actor", "state", "check")),
            PhaseSpec(
                HookPhase.PREPARE_INITIATIVE_CHECK,
                HookScope.ACTOR,
                False,
                ("actor", "check"),
            ),
            PhaseSpec(HookPhase.START_TURN, HookScope.ACTOR, False, ("actor", "update")),
            PhaseSpec(HookPhase.END_TURN, HookScope.ACTOR, False, ("actor", "update")),
        )
    }
)
"""Phase table keyed by phase."""


@dataclass(frozen=True)
class HookSet:
    """Optional lifecycle callbacks contributed by one identifier."""

    prepare: HookCallback | None = None
    can_use: HookCallback | None = None
    display_on_sheet: HookCallback | None = None
    pre_activate: HookCallback | None = None
    roll: HookCallback | None = None
    confirm: HookCallback | None = None
    confirm_action_outcome: HookCallback | None = None
    post_activate: HookCallback | None = None
    prepare_defenses: HookCallback | None = None
    prepare_standard_check: HookCallback | None = None
    defend_attack: HookCallback | None = None
    prepare_initiative_check: HookCallback | None = None
    start_turn: HookCallback | None = None
    end_turn: HookCallback | None = None

    def __post_init__(self) -> None:
        for f in fields(self):
            fn = getattr(self, f.name)
            if fn is not None and not callable(fn):
                raise HookRegistrationError(
                    f"Hook for phase {f.name!r} is not callable",
                    phase=f.name,
                    details={"type": type(fn).__name__},
                )

    def get(self, phase: HookPhase | str) -> HookCallback | None:
        """Return the callback for a phase, if defined."""
        return getattr(self, HookPhase(phase).value)

    @property
    def phases(self) -> list[HookPhase]:
        """Phases this hook set defines."""
        return [phase for phase in HookPhase if self.get(phase) is not None]

    @classmethod
    def from_mapping(cls, callbacks: Mapping[str, HookCallback]) -> HookSet:
        """Build a hook set from a phase-name mapping.

        Raises:
            HookRegistrationError: If a key is not a known phase.
        """
        known = {phase.value for phase in HookPhase}
        unknown = sorted(set(callbacks) - known)
        if unknown:
            raise HookRegistrationError(
                f"Unknown hook phase {unknown[0]!r}",
                phase=unknown[0],
                details={"known": sorted(known)},
            )
        return cls(**dict(callbacks))


@dataclass(frozen=True)
class BoundHook:
    """A callback resolved for a phase, tagged with the identifier that owns it."""

    hook_id: str
    phase: HookPhase
    fn: HookCallback

    def call_sync(self, *args: Any) -> Any:
        """Invoke a synchronous phase callback.

        Raises:
            HookRegistrationError: If the callback returned an awaitable.
        """
        result = self.fn(*args)
        if inspect.isawaitable(result):
            close = getattr(result, "close", None)
            if close is not None:
                close()
            raise HookRegistrationError(
                f"Hook {self.hook_id!r} returned an awaitable from synchronous phase",
                hook_id=self.hook_id,
                phase=self.phase.value,
            )
        return result

    async def call_async(self, *args: Any) -> Any:
        """Invoke an asynchronous phase callback, awaiting it when needed."""
        result = self.fn(*args)
        if inspect.isawaitable(result):
            result = await result
        return result


def lookup_hooks(
    hooks: Mapping[str, HookSet],
    phase: HookPhase | str,
    ids: Iterable[str],
) -> list[BoundHook]:
    """Resolve ordered callbacks for a phase from a hook mapping.

    Args:
        hooks: Hook sets keyed by identifier.
        phase: Phase to resolve.
        ids: Identifiers in contribution order. Repeats are ignored.

    Returns:
        Bound callbacks in identifier order, skipping identifiers with no
        hook set or no callback for the phase.
    """
    phase = HookPhase(phase)
    bound: list[BoundHook] = []
    seen: set[str] = set()
    for hook_id in ids:
        if hook_id in seen:
            continue
        seen.add(hook_id)
        hook_set = hooks.get(hook_id)
        if hook_set is None:
            continue
        fn = hook_set.get(phase)
        if fn is not None:
            bound.append(BoundHook(hook_id=hook_id, phase=phase, fn=fn))
    return bound


def run_isolated(bound: Iterable[BoundHook], *args: Any, **context: Any) -> list[BoundHook]:
    """Invoke synchronous actor hooks, logging and skipping any that fail.

    A failing hook never stops the hooks after it or the operation that
    called them.

    Args:
        bound: Hooks to invoke, in order.
        *args: Arguments passed to every hook.
        **context: Extra fields for the failure log entry.

    Returns:
        The hooks that raised.
    """
    failed: list[BoundHook] = []
    for hook in bound:
        try:
            hook.call_sync(*args)
        except Exception:
            logger.exception("Hook failed", hook_id=hook.hook_id, phase=hook.phase.value, **context)
            failed.append(hook)
    return failed


class HookRegistry:
    """Maps identifiers to hook sets.

    Registration happens at load time. Re-registering an identifier
    replaces its hook set; resolutions already in flight keep the
    snapshot they captured.
    """

    def __init__(self) -> None:
        self._hooks: dict[str, HookSet] = {}

    def __contains__(self, hook_id: object) -> bool:
        return hook_id in self._hooks

    def __len__(self) -> int:
        return len(self._hooks)

    def register(self, hook_id: str, hook_set: HookSet | Mapping[str, HookCallback]) -> None:
        """Register a hook set under an identifier.

        Args:
            hook_id: Action, talent, item or status identifier.
            hook_set: A HookSet or a mapping of phase name to callback.

        Raises:
            HookRegistrationError: If the identifier is empty or the hook set is invalid.
        """
        if not hook_id:
            raise HookRegistrationError("Hook identifier must not be empty")
        if isinstance(hook_set, Mapping):
            hook_set = HookSet.from_mapping(hook_set)
        elif not isinstance(hook_set, HookSet):
            raise HookRegistrationError(
                "Hooks must be registered as a HookSet or a mapping of phase callbacks",
                hook_id=hook_id,
                details={"type": type(hook_set).__name__},
            )

        if hook_id in self._hooks:
            logger.warning("Hook set replaced", hook_id=hook_id)
        self._hooks[hook_id] = hook_set
        logger.debug(
            "Hook set registered",
            hook_id=hook_id,
            phases=[p.value for p in hook_set.phases],
        )

    def unregister(self, hook_id: str) -> None:
        """Remove the hook set registered under an identifier, if any."""
        self._hooks.pop(hook_id, None)

    def get(self, hook_id: str) -> HookSet | None:
        return self._hooks.get(hook_id)

    def ids(self) -> list[str]:
        return list(self._hooks)

    def lookup(self, phase: HookPhase | str, ids: Iterable[str]) -> list[BoundHook]:
        """Resolve ordered callbacks for a phase against the live registry."""
        return lookup_hooks(self._hooks, phase, ids)

    def snapshot(self) -> Mapping[str, HookSet]:
        """Capture a read-only copy of the current registrations."""
        return MappingProxyType(dict(self._hooks))


__all__ = [
    "HookCallback",
    "HookPhase",
    "HookScope",
    "PhaseSpec",
    "PHASES",
    "HookSet",
    "BoundHook",
    "lookup_hooks",
    "run_isolated",
    "tag_hook_id",
    "TAG_PREFIX",
    "HookRegistry",
]
