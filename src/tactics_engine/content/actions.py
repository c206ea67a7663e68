"""Bundled action definitions and their action-type hooks.

Each action's hooks are registered under the action's own identifier,
so they run first in every action-scoped phase.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from tactics_engine.core.constants import (
    RESOURCE_ACTION,
    RESOURCE_FOCUS,
    RESOURCE_HEALTH,
    RESOURCE_MORALE,
)
from tactics_engine.core.exceptions import ValidationRejected
from tactics_engine.engine.hooks import HookSet
from tactics_engine.models.action import (
    ActionCost,
    ActionDefinition,
    ActionRange,
    ActionState,
    Outcome,
    TargetType,
)
from tactics_engine.models.actor import Actor


# =============================================================================
# Definitions
# =============================================================================

STRIKE = ActionDefinition(
    id="strike",
    name="Strike",
    description="Attack a single target with your equipped weapon.",
    tags={"strike", "melee"},
    cost=ActionCost(action=2),
    range=ActionRange(maximum=1, weapon=True),
    has_dice=True,
    ability="strength",
    defense="physical",
    damage_base=4,
    damage_type="slashing",
)

BERSERK_STRIKE = ActionDefinition(
    id="berserk_strike",
    name="Berserk Strike",
    description="A reckless strike which hits harder the more wounded you are.",
    tags={"strike", "melee"},
    cost=ActionCost(action=2, focus=1),
    range=ActionRange(maximum=1, weapon=True),
    has_dice=True,
    ability="strength",
    defense="physical",
    damage_base=4,
    damage_type="slashing",
)

REACTIVE_STRIKE = ActionDefinition(
    id="reactive_strike",
    name="Reactive Strike",
    description="Strike an enemy who leaves your reach.",
    tags={"strike", "reaction"},
    cost=ActionCost(action=1),
    range=ActionRange(maximum=1, weapon=True),
    has_dice=True,
    ability="dexterity",
    defense="physical",
    damage_base=4,
    damage_type="slashing",
)

THRASH = ActionDefinition(
    id="thrash",
    name="Thrash",
    description="Savage a target you have restrained.",
    tags={"strike", "melee"},
    cost=ActionCost(action=1),
    range=ActionRange(maximum=1),
    has_dice=True,
    ability="strength",
    defense="physical",
    damage_base=6,
    damage_type="piercing",
)

ACID_SPIT = ActionDefinition(
    id="acid_spit",
    name="Acid Spit",
    description="Spit caustic acid which corrodes on a critical hit.",
    tags={"acid"},
    cost=ActionCost(action=2),
    range=ActionRange(maximum=6),
    has_dice=True,
    ability="toughness",
    defense="reflex",
    damage_base=4,
)

DELAY = ActionDefinition(
    id="delay",
    name="Delay",
    description="Delay your turn to a lower initiative value this round.",
    tags={"combat"},
    target_type=TargetType.SELF,
)

RECOVER = ActionDefinition(
    id="recover",
    name="Recover",
    description="Rest outside of combat, restoring your resource pools.",
    target_type=TargetType.SELF,
)

RELOAD = ActionDefinition(
    id="reload",
    name="Reload",
    description="Reload a ranged weapon.",
    tags={"reload"},
    cost=ActionCost(action=1),
    target_type=TargetType.SELF,
)

RUTHLESS_MOMENTUM = ActionDefinition(
    id="ruthless_momentum",
    name="Ruthless Momentum",
    description="Move up to your stride after felling an enemy.",
    tags={"movement"},
    cost=ActionCost(action=1),
    target_type=TargetType.NONE,
)

STANDARD_ACTIONS: dict[str, ActionDefinition] = {
    action.id: action
    for action in (
        STRIKE,
        BERSERK_STRIKE,
        REACTIVE_STRIKE,
        THRASH,
        ACID_SPIT,
        DELAY,
        RECOVER,
        RELOAD,
        RUTHLESS_MOMENTUM,
    )
}


# =============================================================================
# Hooks
# =============================================================================


async def berserk_strike_pre_activate(state: ActionState, targets: Sequence[Actor]) -> None:
    """Add a damage bonus that grows as the actor's health falls."""
    health = state.actor.get_pool(RESOURCE_HEALTH)
    if health is None or health.maximum <= 0:
        return
    pct = health.value / health.maximum
    damage_bonus = 0
    if pct < 0.25:
        damage_bonus = 3
    elif pct < 0.5:
        damage_bonus = 2
    elif pct < 0.75:
        damage_bonus = 1
    if state.actor.equipment.two_handed:
        damage_bonus *= 2
    if damage_bonus:
        state.bonuses["damage_bonus"] = state.bonuses.get("damage_bonus", 0) + damage_bonus


def delay_can_use(state: ActionState, targets: Sequence[Actor]) -> None:
    combat = state.combat
    current = combat.current if combat is not None else None
    if current is None or current.actor.id != state.actor.id:
        raise ValidationRejected(
            "You may only use the Delay action on your own turn in combat.",
            action_id=state.id,
            actor=state.actor.id,
        )
    if combat is not None and combat.has_delayed(state.actor):
        raise ValidationRejected(
            "You may not delay your turn again this combat round.",
            action_id=state.id,
            actor=state.actor.id,
        )


def delay_display_on_sheet(state: ActionState, combatant: Any) -> bool:
    combat = state.combat
    if combatant is None or combat is None or combat.has_delayed(state.actor):
        return False
    if combat.current is not combatant:
        return False
    # Not already last
    return combat.turn < len(combat.combatants) - 1


async def delay_pre_activate(state: ActionState, targets: Sequence[Actor]) -> None:
    """Ask which initiative value to delay to. A dismissed prompt leaves the turn unchanged."""
    if state.combat is None:
        return
    maximum = state.combat.get_delay_maximum(state.actor)
    response = await state.ask("delay", minimum=1, maximum=maximum)
    if response:
        state.metadata["initiative_delay"] = int(response)


async def delay_confirm(state: ActionState, outcomes: Sequence[Outcome]) -> None:
    initiative = state.metadata.get("initiative_delay")
    if initiative is None or state.combat is None:
        return
    state.combat.delay(state.actor, initiative)


def reactive_strike_can_use(state: ActionState, targets: Sequence[Actor]) -> None:
    for status in ("unaware", "flanked"):
        if status in state.actor.statuses:
            raise ValidationRejected(
                f"You may not perform a Reactive Strike while {status}.",
                action_id=state.id,
                actor=state.actor.id,
            )


def recover_can_use(state: ActionState, targets: Sequence[Actor]) -> None:
    combat = state.combat
    if combat is not None and combat.get_combatant(state.actor) is not None:
        raise ValidationRejected(
            "You may not Recover during Combat.",
            action_id=state.id,
            actor=state.actor.id,
        )


def recover_display_on_sheet(state: ActionState, combatant: Any) -> bool:
    return combatant is None


async def recover_confirm(state: ActionState, outcomes: Sequence[Outcome]) -> None:
    """Fill every recoverable pool of the resting actor."""
    for outcome in outcomes:
        if not outcome.is_self:
            continue
        for resource in (RESOURCE_ACTION, RESOURCE_FOCUS, RESOURCE_HEALTH, RESOURCE_MORALE):
            outcome.resources[resource] = math.inf


def reload_prepare(state: ActionState) -> None:
    actor = state.actor
    if actor.has_talent("pistoleer") and not actor.status.get("reloaded"):
        state.cost.action = 0


async def reload_post_activate(state: ActionState, outcome: Outcome) -> None:
    state.actor_status["reloaded"] = True


def ruthless_momentum_prepare(state: ActionState) -> None:
    state.range.maximum = state.actor.stride


async def strike_post_activate(state: ActionState, outcome: Outcome) -> None:
    if any(not roll.is_critical_failure for roll in outcome.rolls):
        state.actor_status["basic_strike"] = True


async def thrash_pre_activate(state: ActionState, targets: Sequence[Actor]) -> None:
    if any("restrained" not in target.statuses for target in targets):
        raise ValidationRejected(
            "You can only perform Thrash against a target that you have Restrained.",
            action_id=state.id,
            actor=state.actor.id,
        )


async def acid_spit_post_activate(state: ActionState, outcome: Outcome) -> None:
    """Corrode targets struck by a critical hit."""
    if outcome.is_self:
        return
    if any(roll.is_critical_success for roll in outcome.rolls):
        state.queue_status(outcome.target, "corroding")
        outcome.metadata["corroding"] = state.actor.abilities.toughness


ACTION_HOOKS: dict[str, HookSet] = {
    "acid_spit": HookSet(post_activate=acid_spit_post_activate),
    "berserk_strike": HookSet(pre_activate=berserk_strike_pre_activate),
    "delay": HookSet(
        can_use=delay_can_use,
        display_on_sheet=delay_display_on_sheet,
        pre_activate=delay_pre_activate,
        confirm=delay_confirm,
    ),
    "reactive_strike": HookSet(can_use=reactive_strike_can_use),
    "recover": HookSet(
        can_use=recover_can_use,
        display_on_sheet=recover_display_on_sheet,
        confirm=recover_confirm,
    ),
    "reload": HookSet(prepare=reload_prepare, post_activate=reload_post_activate),
    "ruthless_momentum": HookSet(prepare=ruthless_momentum_prepare),
    "strike": HookSet(post_activate=strike_post_activate),
    "thrash": HookSet(pre_activate=thrash_pre_activate),
}


__all__ = [
    "STRIKE",
    "BERSERK_STRIKE",
    "REACTIVE_STRIKE",
    "THRASH",
    "ACID_SPIT",
    "DELAY",
    "RECOVER",
    "RELOAD",
    "RUTHLESS_MOMENTUM",
    "STANDARD_ACTIONS",
    "ACTION_HOOKS",
]
