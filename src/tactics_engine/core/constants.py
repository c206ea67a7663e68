"""Rules constants for the tactics engine.

This module defines the fixed numeric rules of the dice pool, the standard
resource pools, and the lingering status names used throughout the engine.
"""

from __future__ import annotations

# =============================================================================
# Dice Pool Constants
# =============================================================================

POOL_SIZE = 3
"""Number of dice in a standard check pool."""

BASE_DIE = 8
"""Starting face count of every die in the pool."""

DIE_STEP = 2
"""Faces added or removed by a single boon or bane."""

MIN_DIE = 4
"""Smallest die a bane can reduce the pool to."""

MAX_DIE = 12
"""Largest die a boon can raise the pool to."""

DIE_SIZES = (4, 6, 8, 10, 12)
"""Every face count a pool die may take."""

MAX_BOONS = 6
"""Maximum number of boons counted on a single check."""

MAX_BANES = 6
"""Maximum number of banes counted on a single check."""

MAX_ABILITY = 12
"""Maximum ability bonus added to a check."""

MAX_SKILL = 12
"""Maximum skill bonus added to a check."""

MAX_ENCHANTMENT = 6
"""Maximum enchantment bonus added to a check."""

# =============================================================================
# Check Difficulty Constants
# =============================================================================

DEFAULT_DC = 20
"""Difficulty class used when an action defines neither a DC nor a defense."""

PASSIVE_CHECK = 10
"""Passive value of a check that is not rolled."""

CRITICAL_THRESHOLD = 6
"""Margin beyond the DC which makes a result critical."""

CHECK_DIFFICULTIES = {
    10: "Trivial",
    15: "Easy",
    20: "Moderate",
    25: "Challenging",
    30: "Difficult",
    35: "Formidable",
    45: "Impossible",
}
"""Named difficulty tiers keyed by DC."""

# =============================================================================
# Resources
# =============================================================================

RESOURCE_ACTION = "action"
RESOURCE_FOCUS = "focus"
RESOURCE_HEALTH = "health"
RESOURCE_MORALE = "morale"
RESOURCE_WOUNDS = "wounds"
RESOURCE_MADNESS = "madness"
RESOURCE_HEROISM = "heroism"

OVERFLOW_POOLS = {
    RESOURCE_HEALTH: RESOURCE_WOUNDS,
    RESOURCE_MORALE: RESOURCE_MADNESS,
}
"""Damage beyond zero in the key pool spills into the value pool."""

HEROISM_MAX = 3
"""Maximum heroism points an actor may hold."""

# =============================================================================
# Statuses
# =============================================================================

STATUS_INCAPACITATED = "incapacitated"
STATUS_UNAWARE = "unaware"
STATUS_BROKEN = "broken"
STATUS_ENRAGED = "enraged"
STATUS_DISEASED = "diseased"
STATUS_FRIGHTENED = "frightened"
STATUS_WEAKENED = "weakened"
STATUS_RESTRAINED = "restrained"
STATUS_SLOWED = "slowed"

FOCUS_BLOCKING_STATUSES = (STATUS_BROKEN, STATUS_ENRAGED)
"""Statuses which prevent an actor from spending focus."""

# =============================================================================
# Equipment
# =============================================================================

RANGED_WEAPONS = frozenset({"bow", "crossbow", "pistol", "sling"})
"""Weapon categories which attack at range."""

RELOADING_WEAPONS = frozenset({"crossbow", "pistol"})
"""Ranged weapon categories which must be reloaded after each attack."""

SHIELDS = frozenset({"shield_light", "shield_heavy"})
"""Off hand categories which count as a shield."""


__all__ = [
    "POOL_SIZE",
    "BASE_DIE",
    "DIE_STEP",
    "MIN_DIE",
    "MAX_DIE",
    "DIE_SIZES",
    "MAX_BOONS",
    "MAX_BANES",
    "MAX_ABILITY",
    "MAX_SKILL",
    "MAX_ENCHANTMENT",
    "DEFAULT_DC",
    "PASSIVE_CHECK",
    "CRITICAL_THRESHOLD",
    "CHECK_DIFFICULTIES",
    "RESOURCE_ACTION",
    "RESOURCE_FOCUS",
    "RESOURCE_HEALTH",
    "RESOURCE_MORALE",
    "RESOURCE_WOUNDS",
    "RESOURCE_MADNESS",
    "RESOURCE_HEROISM",
    "OVERFLOW_POOLS",
    "HEROISM_MAX",
    "STATUS_INCAPACITATED",
    "STATUS_UNAWARE",
    "STATUS_BROKEN",
    "STATUS_ENRAGED",
    "STATUS_DISEASED",
    "STATUS_FRIGHTENED",
    "STATUS_WEAKENED",
    "STATUS_RESTRAINED",
    "STATUS_SLOWED",
    "FOCUS_BLOCKING_STATUSES",
    "RANGED_WEAPONS",
    "RELOADING_WEAPONS",
    "SHIELDS",
]
