"""Pydantic V2 schemas for actors participating in action resolution.

An Actor is the engine's view of a hero or adversary: its abilities,
its consumable resource pools, the talents, items and statuses which
contribute lifecycle hooks, and the lingering status flags recorded by
previous actions this round.
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from tactics_engine.core.constants import (
    HEROISM_MAX,
    RANGED_WEAPONS,
    RELOADING_WEAPONS,
    RESOURCE_ACTION,
    RESOURCE_FOCUS,
    RESOURCE_HEALTH,
    RESOURCE_HEROISM,
    RESOURCE_MADNESS,
    RESOURCE_MORALE,
    RESOURCE_WOUNDS,
    SHIELDS,
    STATUS_BROKEN,
    STATUS_INCAPACITATED,
    STATUS_UNAWARE,
    STATUS_WEAKENED,
)


# =============================================================================
# Enums
# =============================================================================


class ActorType(StrEnum):
    """Kinds of actors known to the engine."""

    HERO = "hero"
    ADVERSARY = "adversary"


class Ability(StrEnum):
    """The six core abilities."""

    STRENGTH = "strength"
    TOUGHNESS = "toughness"
    DEXTERITY = "dexterity"
    INTELLECT = "intellect"
    PRESENCE = "presence"
    WISDOM = "wisdom"


# =============================================================================
# Resource Pools
# =============================================================================


class ResourcePool(BaseModel):
    """A bounded numeric counter such as health or focus.

    Pools are only mutated through the resource ledger, which clamps
    every change to ``[minimum, maximum]``.

    Attributes:
        value: Current value of the pool.
        minimum: Lowest value the pool may hold.
        maximum: Highest value the pool may hold.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    value: int = Field(description="Current value")
    minimum: int = Field(default=0, description="Lower bound")
    maximum: int = Field(description="Upper bound")

    @model_validator(mode="after")
    def validate_bounds(self) -> ResourcePool:
        """Ensure the bounds are ordered."""
        if self.maximum < self.minimum:
            raise ValueError(f"maximum {self.maximum} is below minimum {self.minimum}")
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pct(self) -> float:
        """Fraction of the pool currently filled."""
        span = self.maximum - self.minimum
        if span <= 0:
            return 1.0
        return (self.value - self.minimum) / span

    @property
    def is_full(self) -> bool:
        return self.value >= self.maximum

    @property
    def is_empty(self) -> bool:
        return self.value <= self.minimum


def standard_resources(
    *,
    action: int = 3,
    focus: int = 3,
    health: int = 20,
    morale: int = 20,
    heroism: int = 0,
) -> dict[str, ResourcePool]:
    """Build the standard set of resource pools for an actor.

    Each pool starts full except heroism, which starts at the given value
    and is capped at ``HEROISM_MAX``. Wounds and madness start empty and
    may accumulate up to twice the pool that overflows into them.

    Args:
        action: Maximum action points.
        focus: Maximum focus.
        health: Maximum health.
        morale: Maximum morale.
        heroism: Starting heroism points.

    Returns:
        Mapping of pool name to ResourcePool.
    """
    return {
        RESOURCE_ACTION: ResourcePool(value=action, maximum=action),
        RESOURCE_FOCUS: ResourcePool(value=focus, maximum=focus),
        RESOURCE_HEALTH: ResourcePool(value=health, maximum=health),
        RESOURCE_MORALE: ResourcePool(value=morale, maximum=morale),
        RESOURCE_WOUNDS: ResourcePool(value=0, maximum=health * 2),
        RESOURCE_MADNESS: ResourcePool(value=0, maximum=morale * 2),
        RESOURCE_HEROISM: ResourcePool(value=min(heroism, HEROISM_MAX), maximum=HEROISM_MAX),
    }


# =============================================================================
# Abilities, Defenses & Equipment
# =============================================================================


AbilityScore = Annotated[int, Field(ge=0, le=12)]


class Abilities(BaseModel):
    """Ability scores of an actor, each in ``[0, 12]``."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    strength: AbilityScore = 0
    toughness: AbilityScore = 0
    dexterity: AbilityScore = 0
    intellect: AbilityScore = 0
    presence: AbilityScore = 0
    wisdom: AbilityScore = 0

    def get(self, ability: str | None) -> int:
        """Return the score of the named ability, or 0 for unknown names."""
        if not ability:
            return 0
        return int(getattr(self, ability, 0) or 0)


class DefenseValue(BaseModel):
    """A single defense split into a base and a bonus component."""

    model_config = ConfigDict(extra="forbid")

    base: int = 0
    bonus: int = 0

    @property
    def total(self) -> int:
        return self.base + self.bonus


class Defenses(BaseModel):
    """Physical and save defenses of an actor.

    Physical defense is the sum of armor, dodge, block and parry. The
    lifecycle runner hands a deep copy of this model to
    ``prepare_defenses`` hooks, which may shift value between components.
    """

    model_config = ConfigDict(extra="forbid")

    armor: DefenseValue = Field(default_factory=DefenseValue)
    dodge: DefenseValue = Field(default_factory=DefenseValue)
    block: DefenseValue = Field(default_factory=DefenseValue)
    parry: DefenseValue = Field(default_factory=DefenseValue)
    fortitude: DefenseValue = Field(default_factory=DefenseValue)
    reflex: DefenseValue = Field(default_factory=DefenseValue)
    willpower: DefenseValue = Field(default_factory=DefenseValue)

    @property
    def physical(self) -> int:
        return self.armor.total + self.dodge.total + self.block.total + self.parry.total

    def get(self, name: str) -> int:
        """Return the total of a named defense.

        Args:
            name: ``physical`` or the name of a single defense component.

        Returns:
            The defense total.

        Raises:
            KeyError: If the defense name is unknown.
        """
        if name == "physical":
            return self.physical
        value = getattr(self, name, None)
        if not isinstance(value, DefenseValue):
            raise KeyError(name)
        return value.total


class Equipment(BaseModel):
    """Equipped weapon and armor categories relevant to hooks."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    mainhand: str = Field(default="unarmed", description="Main hand weapon category")
    offhand: str | None = Field(default=None, description="Off hand weapon category")
    two_handed: bool = Field(default=False, description="Main hand weapon uses both hands")
    armor: str = Field(default="unarmored", description="Armor category")
    loaded: bool = Field(default=True, description="A reloading weapon is ready to fire")

    @property
    def is_unarmed(self) -> bool:
        return self.mainhand == "unarmed"

    @property
    def is_ranged(self) -> bool:
        return self.mainhand in RANGED_WEAPONS

    @property
    def is_melee(self) -> bool:
        return not self.is_ranged

    @property
    def has_shield(self) -> bool:
        return self.offhand in SHIELDS

    @property
    def needs_reload(self) -> bool:
        """Whether the main hand weapon reloads and is currently empty."""
        return self.mainhand in RELOADING_WEAPONS and not self.loaded


# =============================================================================
# Actor
# =============================================================================


class Actor(BaseModel):
    """A hero or adversary whose resources and statuses actions act upon.

    Attributes:
        id: Stable identifier of the actor.
        name: Display name.
        actor_type: Hero or adversary.
        level: Actor level.
        abilities: Ability scores.
        resources: Named resource pools.
        talents: Talent identifiers in possession order.
        items: Item identifiers in possession order.
        statuses: Active status effect identifiers.
        status: Lingering flags recorded by actions this round.
        flags: Persistent engine flags such as a pending turn delay.
        defenses: Defense components.
        resistances: Damage resistances keyed by damage type.
        equipment: Equipped weapon and armor categories.
        stride: Movement distance per move action.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: str = Field(min_length=1, description="Actor identifier")
    name: str = Field(min_length=1, max_length=100, description="Display name")
    actor_type: ActorType = Field(default=ActorType.HERO, description="Actor type")
    level: int = Field(default=1, ge=0, description="Actor level")
    abilities: Abilities = Field(default_factory=Abilities)
    resources: dict[str, ResourcePool] = Field(default_factory=standard_resources)
    talents: list[str] = Field(default_factory=list, description="Owned talent ids")
    items: list[str] = Field(default_factory=list, description="Owned item ids")
    statuses: set[str] = Field(default_factory=set, description="Active statuses")
    status: dict[str, Any] = Field(default_factory=dict, description="Lingering flags")
    flags: dict[str, Any] = Field(default_factory=dict, description="Engine flags")
    defenses: Defenses = Field(default_factory=Defenses)
    resistances: dict[str, int] = Field(default_factory=dict)
    equipment: Equipment = Field(default_factory=Equipment)
    stride: int = Field(default=4, ge=0, description="Movement per move action")

    @property
    def hook_ids(self) -> list[str]:
        """Hook identifiers contributed by this actor.

        Talents first, then items, both in possession order, then statuses
        sorted by name. Duplicates keep their first position.
        """
        ordered = [*self.talents, *self.items, *sorted(self.statuses)]
        return list(dict.fromkeys(ordered))

    @property
    def is_incapacitated(self) -> bool:
        return STATUS_INCAPACITATED in self.statuses

    @property
    def is_unaware(self) -> bool:
        return STATUS_UNAWARE in self.statuses

    @property
    def is_broken(self) -> bool:
        return STATUS_BROKEN in self.statuses

    @property
    def is_weakened(self) -> bool:
        return STATUS_WEAKENED in self.statuses

    @property
    def initiative_ability(self) -> int:
        """Initiative bonus: half of dexterity plus intellect, rounded up."""
        return math.ceil((self.abilities.dexterity + self.abilities.intellect) / 2)

    def has_status(self, status: str) -> bool:
        return status in self.statuses

    def has_talent(self, talent_id: str) -> bool:
        return talent_id in self.talents

    def get_pool(self, name: str) -> ResourcePool | None:
        """Return the named resource pool, if the actor has one."""
        return self.resources.get(name)

    def resource_value(self, name: str) -> int:
        """Return the current value of a pool, or 0 when the pool is absent."""
        pool = self.resources.get(name)
        return pool.value if pool is not None else 0


__all__ = [
    "ActorType",
    "Ability",
    "ResourcePool",
    "standard_resources",
    "Abilities",
    "DefenseValue",
    "Defenses",
    "Equipment",
    "Actor",
]
