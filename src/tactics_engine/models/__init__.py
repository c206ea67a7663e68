"""Pydantic V2 schemas and resolution records for the tactics engine.

Submodules:
    actor: Actors, resource pools, abilities and defenses.
    action: Action definitions and the ActionState / Outcome / ActionResult
        records produced while resolving an action.

Example:
    >>> from tactics_engine.models import Actor, ActionDefinition
    >>> hero = Actor(id="aldric", name="Aldric", talents=["powerful_throw"])
    >>> javelin = ActionDefinition(id="javelin", name="Javelin", tags={"thrown"})
"""

from __future__ import annotations

# =============================================================================
# Actors
# =============================================================================
from tactics_engine.models.actor import (
    Abilities,
    Ability,
    Actor,
    ActorType,
    Defenses,
    DefenseValue,
    Equipment,
    ResourcePool,
    standard_resources,
)

# =============================================================================
# Actions
# =============================================================================
from tactics_engine.models.action import (
    ActionCost,
    ActionDefinition,
    ActionRange,
    ActionResult,
    ActionState,
    Outcome,
    PromptCallback,
    TargetType,
)


__all__ = [
    # Actors
    "Ability",
    "Abilities",
    "Actor",
    "ActorType",
    "Defenses",
    "DefenseValue",
    "Equipment",
    "ResourcePool",
    "standard_resources",
    # Actions
    "ActionCost",
    "ActionDefinition",
    "ActionRange",
    "ActionResult",
    "ActionState",
    "Outcome",
    "PromptCallback",
    "TargetType",
]
