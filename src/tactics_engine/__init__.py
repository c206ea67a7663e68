"""Tactics Engine - action resolution for a tabletop combat game.

Turns a declared action into a resolved outcome: dice rolled, costs paid,
targets affected, state mutated. Talents, items and statuses inject
behavior at named lifecycle phases by registering hook sets under their
identifiers.

RESOLUTION PIPELINE:
- prepare -> can_use -> pre_activate -> roll -> confirm -> post_activate -> commit
- Failures before the dice are cast abort with nothing committed
- Failures after the dice are cast are collected as faults, never unwound

Example:
    >>> from tactics_engine import Actor, ActionLifecycleRunner, build_engine_config
    >>> from tactics_engine.content.actions import STRIKE
    >>>
    >>> config = build_engine_config()
    >>> runner = ActionLifecycleRunner(config)
    >>> hero = Actor(id="aldric", name="Aldric")
    >>> goblin = Actor(id="goblin", name="Goblin", actor_type="adversary")
    >>> result = await runner.use(STRIKE, hero, [goblin])

Modules:
    core: Configuration, logging, constants and exceptions.
    models: Actors, action definitions and resolution records.
    engine: Dice, hooks, ledger, lifecycle runner and combat controller.
    content: Bundled actions and talent hooks.
"""

from __future__ import annotations

# Core
from tactics_engine.core.config import Settings, get_settings
from tactics_engine.core.exceptions import (
    AbortedByUser,
    InsufficientResource,
    PostResolutionFault,
    TacticsEngineError,
    ValidationRejected,
)
from tactics_engine.core.logging import configure_logging, get_logger

# Models
from tactics_engine.models import (
    ActionDefinition,
    ActionResult,
    ActionState,
    Actor,
    ActorType,
    Outcome,
)

# Engine
from tactics_engine.engine import (
    ActionLifecycleRunner,
    CombatRoundController,
    EngineConfig,
    HookPhase,
    HookRegistry,
    HookSet,
    ResourceLedger,
    build_engine_config,
    build_standard_check,
)


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "TacticsEngineError",
    "ValidationRejected",
    "InsufficientResource",
    "AbortedByUser",
    "PostResolutionFault",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "ActionDefinition",
    "ActionResult",
    "ActionState",
    "Actor",
    "ActorType",
    "Outcome",
    # Engine
    "ActionLifecycleRunner",
    "CombatRoundController",
    "EngineConfig",
    "HookPhase",
    "HookRegistry",
    "HookSet",
    "ResourceLedger",
    "build_engine_config",
    "build_standard_check",
]
