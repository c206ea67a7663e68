"""Action definitions and the transient records of an action's resolution.

``ActionDefinition`` is declarative content: what an action costs, how far
it reaches, whether it rolls dice and against which defense. Resolving an
action creates an ``ActionState``, the mutable working copy that lifecycle
hooks adjust in order, and finally an ``ActionResult`` carrying one
``Outcome`` per affected actor.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from tactics_engine.core.constants import RESOURCE_HEALTH


if TYPE_CHECKING:
    from tactics_engine.core.exceptions import PostResolutionFault
    from tactics_engine.engine.dice import CheckResult, DiceBoon
    from tactics_engine.engine.hooks import HookSet
    from tactics_engine.engine.turn_manager import CombatRoundController
    from tactics_engine.models.actor import Actor


PromptCallback = Callable[..., Awaitable[Any]]


class TargetType(StrEnum):
    """How an action selects its targets."""

    NONE = "none"
    SELF = "self"
    SINGLE = "single"
    MULTIPLE = "multiple"


# =============================================================================
# Declarative Models
# =============================================================================


class ActionCost(BaseModel):
    """Resource cost of an action. Hooks may adjust any component."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    action: int = 0
    focus: int = 0
    health: int = 0
    heroism: int = 0
    hands: int = 0

    def as_deltas(self) -> dict[str, int]:
        """Return the resource deltas paying this cost.

        Negative cost components never grant resources.
        """
        deltas: dict[str, int] = {}
        for resource in ("action", "focus", "health", "heroism"):
            amount = max(getattr(self, resource), 0)
            if amount:
                deltas[resource] = -amount
        return deltas


class ActionRange(BaseModel):
    """Minimum and maximum reach of an action, in grid units."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    minimum: int | None = None
    maximum: int | None = None
    weapon: bool = False


class ActionDefinition(BaseModel):
    """Declarative description of an action type.

    Attributes:
        id: Action identifier; also the key of its own hook set.
        name: Display name.
        description: Rules text.
        tags: Descriptive tags such as ``strike`` or ``spell``.
        cost: Base resource cost.
        range: Base range.
        target_type: How targets are selected.
        target_number: Maximum number of targets.
        has_dice: Whether a standard check is rolled against each target.
        strikes: Independent checks rolled per target.
        ability: Ability added to the check.
        skill: Skill bonus added to the check.
        defense: Target defense used as the DC.
        dc: Fixed DC used when no defense applies.
        damage_base: Base damage dealt on a successful check.
        damage_type: Damage type matched against target resistances.
        damage_resource: Pool reduced (or restored) by damage.
        restoration: Damage restores the pool instead of reducing it.
        effects: Statuses applied to targets on a successful check.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1, description="Action identifier")
    name: str = Field(min_length=1, description="Display name")
    description: str = Field(default="", description="Rules text")
    tags: frozenset[str] = Field(default_factory=frozenset)
    cost: ActionCost = Field(default_factory=ActionCost)
    range: ActionRange = Field(default_factory=ActionRange)
    target_type: TargetType = TargetType.SINGLE
    target_number: int = Field(default=1, ge=0)
    has_dice: bool = False
    strikes: int = Field(default=1, ge=1)
    ability: str | None = None
    skill: int = Field(default=0, ge=0)
    defense: str | None = None
    dc: int | None = None
    damage_base: int = 0
    damage_type: str | None = None
    damage_resource: str = RESOURCE_HEALTH
    restoration: bool = False
    effects: tuple[str, ...] = ()


# =============================================================================
# Resolution Records
# =============================================================================


def _default_bonuses() -> dict[str, int]:
    return {"ability": 0, "skill": 0, "enchantment": 0, "damage_bonus": 0, "multiplier": 1}


@dataclass
class ActionState:
    """The mutable usage record of one action being resolved.

    Created by ``ActionLifecycleRunner.prepare`` and mutated only by
    lifecycle phases and their hooks, in order. Never persisted.

    Attributes:
        definition: The action being used.
        actor: The acting actor. Not owned.
        cost: Working copy of the cost.
        range: Working copy of the range.
        tags: Working copy of the tags.
        targets: Declared targets, in declaration order.
        bonuses: Open bag of numeric adjustments.
        boons: Named boon sources for the standard check.
        banes: Named bane sources for the standard check.
        dc: DC override applied to every target.
        defense: Target defense used as the DC.
        damage_type: Damage type of the action.
        actor_status: Lingering flags recorded on the actor at commit.
        pending_statuses: Statuses to apply per target id at commit.
        metadata: Free-form data exchanged between hooks.
        combat: The active combat round, if any. Not owned.
        prompt: Async callback used by hooks that need user input.
        hooks: Hook sets captured when the action was prepared.
    """

    definition: ActionDefinition
    actor: Actor
    cost: ActionCost
    range: ActionRange
    tags: set[str]
    targets: list[Actor] = field(default_factory=list)
    bonuses: dict[str, int] = field(default_factory=_default_bonuses)
    boons: dict[str, DiceBoon] = field(default_factory=dict)
    banes: dict[str, DiceBoon] = field(default_factory=dict)
    dc: int | None = None
    defense: str | None = None
    damage_type: str | None = None
    actor_status: dict[str, Any] = field(default_factory=dict)
    pending_statuses: dict[str, set[str]] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    combat: CombatRoundController | None = None
    prompt: PromptCallback | None = None
    hooks: Mapping[str, HookSet] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return self.definition.id

    @property
    def name(self) -> str:
        return self.definition.name

    async def ask(self, *args: Any, **kwargs: Any) -> Any:
        """Prompt the user for input.

        Returns:
            The response, or None when no prompt is available or the
            prompt was dismissed.
        """
        if self.prompt is None:
            return None
        return await self.prompt(*args, **kwargs)

    def queue_status(self, target: Actor, status: str) -> None:
        """Schedule a status to be applied to a target when the action commits."""
        self.pending_statuses.setdefault(target.id, set()).add(status)

    def describe(self) -> dict[str, str]:
        """Human-readable cost, range and target tags of the prepared action."""
        tags: dict[str, str] = {}
        cost_parts = []
        if self.cost.action:
            cost_parts.append(f"{self.cost.action}A")
        if self.cost.focus:
            cost_parts.append(f"{self.cost.focus}F")
        if self.cost.health:
            cost_parts.append(f"{self.cost.health}H")
        if self.cost.heroism:
            cost_parts.append(f"{self.cost.heroism}Heroism")
        tags["cost"] = " ".join(cost_parts) or "Free"
        if self.cost.hands:
            tags["hands"] = f"{self.cost.hands} Hands" if self.cost.hands > 1 else "1 Hand"
        if self.range.maximum is not None:
            if self.range.minimum:
                tags["range"] = f"Range {self.range.minimum}-{self.range.maximum}"
            else:
                tags["range"] = f"Range {self.range.maximum}"
        target_type = self.definition.target_type
        if target_type == TargetType.SELF:
            tags["target"] = "Self"
        elif target_type == TargetType.MULTIPLE:
            tags["target"] = f"{self.definition.target_number} Targets"
        elif target_type == TargetType.SINGLE:
            tags["target"] = "Single Target"
        return tags


@dataclass
class Outcome:
    """The resolved effect of an action on one actor.

    ``resources`` holds the requested deltas built up by rolls and hooks;
    ``applied`` holds what the ledger actually changed after clamping.
    """

    target: Actor
    is_self: bool = False
    rolls: list[CheckResult] = field(default_factory=list)
    resources: dict[str, float] = field(default_factory=dict)
    applied: dict[str, int] = field(default_factory=dict)
    statuses_applied: set[str] = field(default_factory=set)
    statuses_removed: set[str] = field(default_factory=set)
    status_text: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return any(r.is_success for r in self.rolls)

    @property
    def is_critical_success(self) -> bool:
        return any(r.is_critical_success for r in self.rolls)

    def add_resource(self, resource: str, amount: float) -> None:
        """Accumulate a requested delta on a resource."""
        self.resources[resource] = self.resources.get(resource, 0) + amount


@dataclass
class ActionResult:
    """The outcomes of a resolved action and any post-roll faults.

    Outcomes are ordered: declared targets first, then the actor's own
    outcome.
    """

    state: ActionState
    outcomes: list[Outcome] = field(default_factory=list)
    faults: list[PostResolutionFault] = field(default_factory=list)

    def __iter__(self) -> Iterator[Outcome]:
        return iter(self.outcomes)

    def __len__(self) -> int:
        return len(self.outcomes)

    @property
    def self_outcome(self) -> Outcome | None:
        return next((o for o in self.outcomes if o.is_self), None)

    @property
    def target_outcomes(self) -> list[Outcome]:
        return [o for o in self.outcomes if not o.is_self]

    @property
    def has_faults(self) -> bool:
        return bool(self.faults)

    def outcome_for(self, actor: Actor) -> Outcome | None:
        """Return the first outcome affecting the given actor."""
        return next((o for o in self.outcomes if o.target.id == actor.id), None)


__all__ = [
    "PromptCallback",
    "TargetType",
    "ActionCost",
    "ActionRange",
    "ActionDefinition",
    "ActionState",
    "Outcome",
    "ActionResult",
]
