"""Action resolution engine.

This module provides the rules-resolution core: dice pools, the hook
registry, the resource ledger, the action lifecycle runner and the
combat round controller.

Submodules:
    dice: Dice pool builder and check resolution (d20 library)
    hooks: Lifecycle phases, hook sets and the hook registry
    resources: Clamped resource ledger
    lifecycle: Action lifecycle runner
    turn_manager: Initiative, turns, delays and heroism
    runtime: Engine configuration object

Example:
    >>> from tactics_engine.engine import (
    ...     ActionLifecycleRunner, CombatRoundController, build_engine_config
    ... )
    >>>
    >>> config = build_engine_config()
    >>> combat = CombatRoundController(config)
    >>> combat.add_combatant(hero)
    >>> combat.add_combatant(goblin)
    >>> combat.start_combat()
    >>> result = await combat.perform(STRIKE, hero, [goblin])
"""

from __future__ import annotations

# =============================================================================
# Dice
# =============================================================================
from tactics_engine.engine.dice import (
    CheckResult,
    Damage,
    DiceBoon,
    DicePool,
    DiceRoller,
    build_standard_check,
    compute_damage,
    roll,
    total_boons,
)

# =============================================================================
# Hooks
# =============================================================================
from tactics_engine.engine.hooks import (
    PHASES,
    BoundHook,
    HookPhase,
    HookRegistry,
    HookScope,
    HookSet,
    PhaseSpec,
    lookup_hooks,
    run_isolated,
    tag_hook_id,
)

# =============================================================================
# Resources
# =============================================================================
from tactics_engine.engine.resources import LedgerEntry, ResourceLedger

# =============================================================================
# Lifecycle & Combat
# =============================================================================
from tactics_engine.engine.lifecycle import ActionLifecycleRunner
from tactics_engine.engine.runtime import EngineConfig, build_engine_config
from tactics_engine.engine.turn_manager import (
    Combatant,
    CombatRoundController,
    HeroismMeter,
    TurnUpdate,
)


__all__ = [
    # Dice
    "CheckResult",
    "Damage",
    "DiceBoon",
    "DicePool",
    "DiceRoller",
    "build_standard_check",
    "compute_damage",
    "roll",
    "total_boons",
    # Hooks
    "PHASES",
    "BoundHook",
    "HookPhase",
    "HookRegistry",
    "HookScope",
    "HookSet",
    "PhaseSpec",
    "lookup_hooks",
    "run_isolated",
    "tag_hook_id",
    # Resources
    "LedgerEntry",
    "ResourceLedger",
    # Lifecycle & Combat
    "ActionLifecycleRunner",
    "EngineConfig",
    "build_engine_config",
    "Combatant",
    "CombatRoundController",
    "HeroismMeter",
    "TurnUpdate",
]
