"""Bundled action tag hooks.

A tag on an action is a hook source of its own. Tag hooks run ahead of
the action's hooks in every action-scoped phase, in tag name order. They
are registered under ``tag_hook_id(tag)``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from tactics_engine.core.constants import (
    RELOADING_WEAPONS,
    STATUS_RESTRAINED,
    STATUS_SLOWED,
)
from tactics_engine.core.exceptions import ValidationRejected
from tactics_engine.engine.dice import DiceBoon
from tactics_engine.engine.hooks import HookSet
from tactics_engine.models.action import ActionState, Outcome
from tactics_engine.models.actor import Actor


DAMAGE_TYPE_TAGS = ("acid", "fire", "frost", "lightning", "psychic", "radiant", "unholy")
DEFENSE_TAGS = ("fortitude", "reflex", "willpower")


def _reject(state: ActionState, reason: str) -> ValidationRejected:
    return ValidationRejected(reason, action_id=state.id, actor=state.actor.id)


# =============================================================================
# Required Equipment
# =============================================================================


def melee_can_use(state: ActionState, targets: Sequence[Actor]) -> bool:
    return state.actor.equipment.is_melee


def ranged_can_use(state: ActionState, targets: Sequence[Actor]) -> None:
    equipment = state.actor.equipment
    if not equipment.is_ranged:
        raise _reject(state, f"{state.name} requires a ranged weapon.")
    if equipment.needs_reload:
        raise _reject(state, "Your weapon must be reloaded first.")


async def ranged_post_activate(state: ActionState, outcome: Outcome) -> None:
    """Firing a reloading weapon empties it."""
    equipment = state.actor.equipment
    if outcome.is_self and equipment.mainhand in RELOADING_WEAPONS:
        equipment.loaded = False


def shield_can_use(state: ActionState, targets: Sequence[Actor]) -> bool:
    return state.actor.equipment.has_shield


def unarmed_can_use(state: ActionState, targets: Sequence[Actor]) -> bool:
    return state.actor.equipment.is_unarmed


def unarmored_can_use(state: ActionState, targets: Sequence[Actor]) -> bool:
    return state.actor.equipment.armor == "unarmored"


def reload_can_use(state: ActionState, targets: Sequence[Actor]) -> None:
    if not state.actor.equipment.needs_reload:
        raise _reject(state, "Your weapons do not require reloading.")


async def reload_post_activate(state: ActionState, outcome: Outcome) -> None:
    if outcome.is_self:
        state.actor.equipment.loaded = True


# =============================================================================
# Context Requirements
# =============================================================================


def movement_prepare(state: ActionState) -> None:
    """The first move of a turn costs one action less; slowed actors pay one more."""
    actor = state.actor
    if not actor.status.get("has_moved"):
        state.cost.action = max(state.cost.action - 1, 0)
    if STATUS_SLOWED in actor.statuses:
        state.cost.action += 1


def movement_can_use(state: ActionState, targets: Sequence[Actor]) -> None:
    if STATUS_RESTRAINED in state.actor.statuses:
        raise _reject(state, "You may not move while Restrained!")


async def movement_post_activate(state: ActionState, outcome: Outcome) -> None:
    state.actor_status["has_moved"] = True


def reaction_can_use(state: ActionState, targets: Sequence[Actor]) -> bool:
    """Reactions are only possible outside your own turn."""
    combat = state.combat
    current = combat.current if combat is not None else None
    return current is None or current.actor.id != state.actor.id


async def spell_post_activate(state: ActionState, outcome: Outcome) -> None:
    state.actor_status["has_cast"] = True


# =============================================================================
# Attack Modifiers
# =============================================================================


def deadly_prepare(state: ActionState) -> None:
    state.bonuses["multiplier"] = state.bonuses.get("multiplier", 1) + 1


def difficult_prepare(state: ActionState) -> None:
    state.banes["difficult"] = DiceBoon(label="Difficult", number=1)


def empowered_prepare(state: ActionState) -> None:
    state.bonuses["damage_bonus"] = state.bonuses.get("damage_bonus", 0) + 6


def exposing_prepare(state: ActionState) -> None:
    state.boons["exposing"] = DiceBoon(label="Exposing", number=2)


def harmless_prepare(state: ActionState) -> None:
    state.bonuses["multiplier"] = 0


def weakened_prepare(state: ActionState) -> None:
    state.bonuses["damage_bonus"] = state.bonuses.get("damage_bonus", 0) - 2


def _set_damage_type(damage_type: str) -> Callable[[ActionState], None]:
    def prepare(state: ActionState) -> None:
        state.damage_type = damage_type

    return prepare


def _set_defense(defense: str) -> Callable[[ActionState], None]:
    def prepare(state: ActionState) -> None:
        state.defense = defense

    return prepare


TAG_HOOKS: dict[str, HookSet] = {
    "deadly": HookSet(prepare=deadly_prepare),
    "difficult": HookSet(prepare=difficult_prepare),
    "empowered": HookSet(prepare=empowered_prepare),
    "exposing": HookSet(prepare=exposing_prepare),
    "harmless": HookSet(prepare=harmless_prepare),
    "melee": HookSet(can_use=melee_can_use),
    "movement": HookSet(
        prepare=movement_prepare,
        can_use=movement_can_use,
        post_activate=movement_post_activate,
    ),
    "ranged": HookSet(can_use=ranged_can_use, post_activate=ranged_post_activate),
    "reaction": HookSet(can_use=reaction_can_use),
    "reload": HookSet(can_use=reload_can_use, post_activate=reload_post_activate),
    "shield": HookSet(can_use=shield_can_use),
    "spell": HookSet(post_activate=spell_post_activate),
    "unarmed": HookSet(can_use=unarmed_can_use),
    "unarmored": HookSet(can_use=unarmored_can_use),
    "weakened": HookSet(prepare=weakened_prepare),
    **{tag: HookSet(prepare=_set_damage_type(tag)) for tag in DAMAGE_TYPE_TAGS},
    **{tag: HookSet(prepare=_set_defense(tag)) for tag in DEFENSE_TAGS},
}


__all__ = [
    "DAMAGE_TYPE_TAGS",
    "DEFENSE_TAGS",
    "TAG_HOOKS",
]
