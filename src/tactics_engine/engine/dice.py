"""Dice pool construction and check resolution.

A standard check is three dice which start as d8. Boons step dice up and
banes step them down, producing a formula with named substitutions:

    >>> pool = build_standard_check(boons=2, ability=4, skill=2)
    >>> pool.formula
    '1d12 + 1d8 + 1d8 + @ability + @skill'
    >>> pool.bind()
    '1d12 + 1d8 + 1d8 + 4 + 2'

Building a pool performs no randomness. The ``DiceRoller`` evaluates the
bound expression with the d20 library and compares it with a DC.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from tactics_engine.core.constants import (
    BASE_DIE,
    CRITICAL_THRESHOLD,
    DIE_STEP,
    MAX_ABILITY,
    MAX_BANES,
    MAX_BOONS,
    MAX_DIE,
    MAX_ENCHANTMENT,
    MAX_SKILL,
    MIN_DIE,
    POOL_SIZE,
    RESOURCE_HEALTH,
)
from tactics_engine.core.exceptions import DiceRollError
from tactics_engine.core.logging import get_logger


logger = get_logger(__name__)

_SUBSTITUTION = re.compile(r"@(\w+)")


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(int(value), high))


# =============================================================================
# Dice Pool
# =============================================================================


@dataclass(frozen=True)
class DicePool:
    """A standard check pool with its clamped modifiers.

    Attributes:
        faces: Face counts of the three dice, each in {4, 6, 8, 10, 12}.
        boons: Clamped boon count.
        banes: Clamped bane count.
        ability: Clamped ability bonus.
        skill: Clamped skill bonus.
        enchantment: Clamped enchantment bonus.
    """

    faces: tuple[int, ...]
    boons: int = 0
    banes: int = 0
    ability: int = 0
    skill: int = 0
    enchantment: int = 0

    @property
    def formula(self) -> str:
        """The dice formula with named substitutions for the bonuses."""
        terms = [f"1d{f}" for f in self.faces]
        terms += ["@ability", "@skill"]
        if self.enchantment > 0:
            terms.append("@enchantment")
        return " + ".join(terms)

    @property
    def data(self) -> dict[str, int]:
        """Values bound to the named substitutions of the formula."""
        return {
            "ability": self.ability,
            "skill": self.skill,
            "enchantment": self.enchantment,
        }

    def bind(self, data: Mapping[str, Any] | None = None) -> str:
        """Substitute named values into the formula.

        Args:
            data: Optional overrides for the pool's own bound values.

        Returns:
            A concrete expression the d20 library can evaluate.

        Raises:
            DiceRollError: If the formula references an unbound name.
        """
        values = {**self.data, **(data or {})}

        def substitute(match: re.Match[str]) -> str:
            name = match.group(1)
            if name not in values:
                raise DiceRollError(f"Unbound dice term @{name}", expression=self.formula)
            return str(values[name])

        return _SUBSTITUTION.sub(substitute, self.formula)


def build_standard_check(
    boons: int = 0,
    banes: int = 0,
    ability: int = 0,
    skill: int = 0,
    enchantment: int = 0,
) -> DicePool:
    """Build the dice pool for a standard check.

    Boons walk the pool from the first die, stepping it up until it is a
    d12 before moving to the next. Banes walk from the last die, stepping
    it down until it is a d4 before moving to the previous one. Steps
    which would push the final die beyond its bound are absorbed.

    Args:
        boons: Number of boons, clamped to [0, 6].
        banes: Number of banes, clamped to [0, 6].
        ability: Ability bonus, clamped to [0, 12].
        skill: Skill bonus, clamped to [0, 12].
        enchantment: Enchantment bonus, clamped to [0, 6].

    Returns:
        The resulting DicePool.
    """
    boons = _clamp(boons, 0, MAX_BOONS)
    banes = _clamp(banes, 0, MAX_BANES)
    ability = _clamp(ability, 0, MAX_ABILITY)
    skill = _clamp(skill, 0, MAX_SKILL)
    enchantment = _clamp(enchantment, 0, MAX_ENCHANTMENT)

    dice = [BASE_DIE] * POOL_SIZE

    index = 0
    for _ in range(boons):
        if dice[index] >= MAX_DIE:
            break
        dice[index] += DIE_STEP
        if dice[index] == MAX_DIE and index < POOL_SIZE - 1:
            index += 1

    index = POOL_SIZE - 1
    for _ in range(banes):
        if dice[index] <= MIN_DIE:
            break
        dice[index] -= DIE_STEP
        if dice[index] == MIN_DIE and index > 0:
            index -= 1

    return DicePool(
        faces=tuple(dice),
        boons=boons,
        banes=banes,
        ability=ability,
        skill=skill,
        enchantment=enchantment,
    )


# =============================================================================
# Named Boons & Banes
# =============================================================================


@dataclass
class DiceBoon:
    """A named source of boons or banes.

    Attributes:
        label: Display label of the source.
        number: Boons or banes contributed.
    """

    label: str
    number: int = 1


def total_boons(sources: Mapping[str, DiceBoon], *, cap: int = MAX_BOONS) -> int:
    """Total named boon or bane sources with a running cap.

    Sources are counted in insertion order; a source which would carry the
    running total beyond the cap only contributes up to it. Negative
    sources are ignored.

    Args:
        sources: Boon or bane sources keyed by identifier.
        cap: Maximum total.

    Returns:
        The capped total.
    """
    total = 0
    for source in sources.values():
        number = max(int(source.number), 0)
        total = min(total + number, cap)
    return total


# =============================================================================
# Damage
# =============================================================================


def compute_damage(
    overflow: int = 1,
    *,
    multiplier: int = 1,
    base: int = 0,
    bonus: int = 0,
    resistance: int = 0,
    restoration: bool = False,
) -> int:
    """Compute the damage dealt by a check.

    Misses cannot benefit from a multiplier below 1. Damage before
    mitigation of 1 or less always deals exactly 1. Resistance does not
    apply to restoration, and the result is clamped to
    ``[1, 2 * pre-mitigation]``.

    Args:
        overflow: Margin of the check over the DC.
        multiplier: Overflow multiplier.
        base: Base damage of the action.
        bonus: Flat damage bonus.
        resistance: Target resistance; negative values are vulnerability.
        restoration: Whether the damage restores rather than harms.

    Returns:
        Total damage, at least 1.
    """
    if overflow < 0:
        multiplier = max(multiplier, 1)
    pre_mitigation = (overflow * multiplier) + base + bonus
    if pre_mitigation <= 1:
        return 1
    post_mitigation = pre_mitigation if restoration else pre_mitigation - resistance
    return max(1, min(post_mitigation, 2 * pre_mitigation))


@dataclass
class Damage:
    """Damage components of a successful check. Roll hooks may adjust them."""

    overflow: int
    multiplier: int = 1
    base: int = 0
    bonus: int = 0
    resistance: int = 0
    restoration: bool = False
    resource: str = RESOURCE_HEALTH
    damage_type: str | None = None

    @property
    def total(self) -> int:
        return compute_damage(
            self.overflow,
            multiplier=self.multiplier,
            base=self.base,
            bonus=self.bonus,
            resistance=self.resistance,
            restoration=self.restoration,
        )

    @property
    def delta(self) -> int:
        """Signed change to the damaged resource."""
        return self.total if self.restoration else -self.total


# =============================================================================
# Check Results
# =============================================================================


@dataclass(frozen=True)
class CheckResult:
    """The evaluated result of a check against a DC.

    Attributes:
        expression: The concrete expression that was rolled.
        dc: Difficulty class of the check.
        total: Total rolled.
        dice: Individual die results.
        pool: The pool that produced the expression, if any.
        critical_success_threshold: Margin above the DC for a critical success.
        critical_failure_threshold: Margin below the DC for a critical failure.
        damage: Damage dealt, when the check succeeded against a target.
    """

    expression: str
    dc: int
    total: int
    dice: tuple[int, ...] = ()
    pool: DicePool | None = None
    critical_success_threshold: int = CRITICAL_THRESHOLD
    critical_failure_threshold: int = CRITICAL_THRESHOLD
    damage: Damage | None = field(default=None, compare=False)

    @property
    def is_success(self) -> bool:
        return self.total > self.dc

    @property
    def is_critical_success(self) -> bool:
        return self.total > self.dc + self.critical_success_threshold

    @property
    def is_failure(self) -> bool:
        return not self.is_success

    @property
    def is_critical_failure(self) -> bool:
        return self.total <= self.dc - self.critical_failure_threshold

    @property
    def margin(self) -> int:
        return self.total - self.dc


# =============================================================================
# Dice Roller
# =============================================================================


class DiceRoller:
    """Evaluates bound dice expressions with the d20 library.

    Example:
        >>> roller = DiceRoller(seed=42)
        >>> pool = build_standard_check(boons=1, ability=3)
        >>> result = roller.roll_check(pool, dc=15)
        >>> result.is_success
    """

    def __init__(
        self,
        *,
        seed: int | None = None,
        critical_success_threshold: int = CRITICAL_THRESHOLD,
        critical_failure_threshold: int = CRITICAL_THRESHOLD,
    ) -> None:
        """Initialize the dice roller.

        Args:
            seed: Optional random seed for reproducible rolls.
            critical_success_threshold: Margin above the DC for a critical success.
            critical_failure_threshold: Margin below the DC for a critical failure.
        """
        self._seed = seed
        if seed is not None:
            import random

            random.seed(seed)
        self.critical_success_threshold = critical_success_threshold
        self.critical_failure_threshold = critical_failure_threshold
        logger.debug("DiceRoller initialized", seed=seed)

    def roll(self, expression: str) -> tuple[int, tuple[int, ...]]:
        """Roll a concrete dice expression.

        Args:
            expression: Dice expression (e.g., '1d10 + 1d8 + 1d8 + 3 + 2').

        Returns:
            Tuple of the total and the individual die results.

        Raises:
            DiceRollError: If the expression is invalid.
        """
        if not expression or not expression.strip():
            raise DiceRollError("Empty dice expression", expression=expression)

        try:
            import d20

            result = d20.roll(expression)
        except Exception as exc:
            raise DiceRollError(
                f"Invalid dice expression: {exc}",
                expression=expression,
            ) from exc

        dice = tuple(self._extract_dice_values(result.expr))
        logger.debug("Dice rolled", expression=expression, total=result.total, dice=dice)
        return int(result.total), dice

    def _extract_dice_values(self, expr: Any) -> list[int]:
        """Extract individual dice values from a d20 expression tree."""
        import d20

        values: list[int] = []

        def traverse(node: Any) -> None:
            if isinstance(node, d20.Dice):
                for die in node.values:
                    if die.kept:
                        values.append(die.number)
            elif hasattr(node, "children"):
                for child in node.children:
                    traverse(child)

        traverse(expr)
        return values

    def roll_check(
        self,
        pool: DicePool,
        *,
        dc: int,
        fixed_total: int | None = None,
    ) -> CheckResult:
        """Roll a standard check pool against a DC.

        Args:
            pool: The dice pool to roll.
            dc: Difficulty class of the check.
            fixed_total: Use this total instead of rolling.

        Returns:
            The CheckResult.
        """
        expression = pool.bind()
        if fixed_total is not None:
            total, dice = int(fixed_total), ()
        else:
            total, dice = self.roll(expression)

        result = CheckResult(
            expression=expression,
            dc=dc,
            total=total,
            dice=dice,
            pool=pool,
            critical_success_threshold=self.critical_success_threshold,
            critical_failure_threshold=self.critical_failure_threshold,
        )
        logger.debug(
            "Check resolved",
            formula=pool.formula,
            dc=dc,
            total=total,
            success=result.is_success,
        )
        return result


# Module-level convenience roller
_default_roller: DiceRoller | None = None


def roll(expression: str) -> int:
    """Convenience function to roll a concrete dice expression.

    Args:
        expression: Dice expression (e.g., '3d8 + 4').

    Returns:
        The rolled total.
    """
    global _default_roller  # noqa: PLW0603
    if _default_roller is None:
        _default_roller = DiceRoller()
    total, _ = _default_roller.roll(expression)
    return total


__all__ = [
    "DicePool",
    "build_standard_check",
    "DiceBoon",
    "total_boons",
    "compute_damage",
    "Damage",
    "CheckResult",
    "DiceRoller",
    "roll",
]
