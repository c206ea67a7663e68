"""Bundled talent hooks.

Talents participate in resolution by identifier: any actor possessing
the talent contributes its hooks to the relevant phases.
"""

from __future__ import annotations

import math
from typing import Any

from tactics_engine.core.constants import (
    RESOURCE_ACTION,
    RESOURCE_FOCUS,
    RESOURCE_HEALTH,
    RESOURCE_MORALE,
)
from tactics_engine.engine.dice import DiceBoon
from tactics_engine.engine.hooks import HookSet
from tactics_engine.models.action import ActionState, Outcome
from tactics_engine.models.actor import Actor, Defenses


def armored_shell_prepare_defenses(actor: Actor, defenses: Defenses) -> None:
    """While guarded with a heavy shield, half of base armor becomes block."""
    if not actor.has_talent("armored_shell") or "guarded" not in actor.statuses:
        return
    if actor.equipment.offhand != "shield_heavy":
        return
    half_armor = math.ceil(defenses.armor.base / 2)
    defenses.armor.base -= half_armor
    defenses.block.bonus += half_armor


def blood_magic_prepare(state: ActionState) -> None:
    """Spells cost ten health per point of focus instead of focus."""
    if "spell" not in state.tags:
        return
    state.cost.health = state.cost.focus * 10
    state.cost.focus = 0


async def blood_magic_confirm_action_outcome(actor: Actor, state: ActionState, outcome: Outcome) -> None:
    if not outcome.is_self or state.actor.id != actor.id:
        return
    current = outcome.resources.get(RESOURCE_HEALTH, 0)
    outcome.resources[RESOURCE_HEALTH] = min(current, -state.cost.health)


def conserve_effort_end_turn(actor: Actor, update: Any) -> None:
    if actor.resource_value(RESOURCE_ACTION):
        update.add_resource(RESOURCE_FOCUS, 1)
        update.status_text.append("Conserve Effort")


def irrepressible_spirit_start_turn(actor: Actor, update: Any) -> None:
    if not actor.is_broken:
        update.add_resource(RESOURCE_MORALE, 1)


def lesser_regeneration_start_turn(actor: Actor, update: Any) -> None:
    if not actor.is_weakened:
        update.add_resource(RESOURCE_HEALTH, 1)


def powerful_throw_prepare(state: ActionState) -> None:
    if "thrown" in state.tags and state.range.maximum is not None:
        state.range.maximum *= 2


def preternatural_instinct_prepare_initiative_check(actor: Actor, check: dict[str, Any]) -> None:
    check["boons"]["preternatural_instinct"] = DiceBoon(label="Preternatural Instinct", number=2)


def unarmed_blocking_prepare_defenses(actor: Actor, defenses: Defenses) -> None:
    if actor.has_talent("unarmed_blocking") and actor.equipment.is_unarmed:
        defenses.block.bonus += math.ceil(actor.abilities.toughness / 2)


def war_mage_prepare(state: ActionState) -> None:
    if state.id == "counterspell":
        state.boons["war_mage"] = DiceBoon(label="War Mage", number=2)


TALENT_HOOKS: dict[str, HookSet] = {
    "armored_shell": HookSet(prepare_defenses=armored_shell_prepare_defenses),
    "blood_magic": HookSet(
        prepare=blood_magic_prepare,
        confirm_action_outcome=blood_magic_confirm_action_outcome,
    ),
    "conserve_effort": HookSet(end_turn=conserve_effort_end_turn),
    "irrepressible_spirit": HookSet(start_turn=irrepressible_spirit_start_turn),
    "lesser_regeneration": HookSet(start_turn=lesser_regeneration_start_turn),
    "powerful_throw": HookSet(prepare=powerful_throw_prepare),
    "preternatural_instinct": HookSet(
        prepare_initiative_check=preternatural_instinct_prepare_initiative_check
    ),
    "unarmed_blocking": HookSet(prepare_defenses=unarmed_blocking_prepare_defenses),
    "war_mage": HookSet(prepare=war_mage_prepare),
}


__all__ = [
    "TALENT_HOOKS",
]
