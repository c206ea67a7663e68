"""Tests for dice pool construction and check resolution."""

from __future__ import annotations

import pytest

from tactics_engine.core.exceptions import DiceRollError
from tactics_engine.engine.dice import (
    CheckResult,
    Damage,
    DiceBoon,
    DiceRoller,
    build_standard_check,
    compute_damage,
    roll,
    total_boons,
)


class TestBuildStandardCheck:
    """Tests for the standard check pool builder."""

    def test_zero_pool(self) -> None:
        """Test the pool with no modifiers."""
        pool = build_standard_check()

        assert pool.faces == (8, 8, 8)
        assert pool.formula == "1d8 + 1d8 + 1d8 + @ability + @skill"
        assert pool.bind() == "1d8 + 1d8 + 1d8 + 0 + 0"

    @pytest.mark.parametrize(
        ("boons", "faces"),
        [
            (1, (10, 8, 8)),
            (2, (12, 8, 8)),
            (3, (12, 10, 8)),
            (4, (12, 12, 8)),
            (5, (12, 12, 10)),
            (6, (12, 12, 12)),
        ],
    )
    def test_boon_progression(self, boons: int, faces: tuple[int, ...]) -> None:
        """Test boons fill the first die before stepping the next."""
        assert build_standard_check(boons=boons).faces == faces

    @pytest.mark.parametrize(
        ("banes", "faces"),
        [
            (1, (8, 8, 6)),
            (2, (8, 8, 4)),
            (3, (8, 6, 4)),
            (4, (8, 4, 4)),
            (5, (6, 4, 4)),
            (6, (4, 4, 4)),
        ],
    )
    def test_bane_progression(self, banes: int, faces: tuple[int, ...]) -> None:
        """Test banes empty the last die before stepping the previous."""
        assert build_standard_check(banes=banes).faces == faces

    def test_boons_then_banes(self) -> None:
        """Test banes step down from the end after boons are applied."""
        pool = build_standard_check(boons=2, banes=2)

        assert pool.faces == (12, 8, 4)

    def test_inputs_are_clamped(self) -> None:
        """Test out-of-range inputs are clamped."""
        pool = build_standard_check(boons=9, banes=-2, ability=15, skill=-1, enchantment=8)

        assert pool.faces == (12, 12, 12)
        assert pool.boons == 6
        assert pool.banes == 0
        assert pool.ability == 12
        assert pool.skill == 0
        assert pool.enchantment == 6

    def test_face_weight_tracks_boons_and_banes(self) -> None:
        """Test every boon adds and every bane removes one step of faces."""
        for boons in range(7):
            for banes in range(7):
                pool = build_standard_check(boons=boons, banes=banes)

                assert sum(pool.faces) == 24 + 2 * boons - 2 * banes
                assert all(face in (4, 6, 8, 10, 12) for face in pool.faces)
                assert len(pool.faces) == 3

    def test_formula_with_bonuses(self) -> None:
        """Test named substitutions for the bonuses."""
        pool = build_standard_check(boons=2, ability=4, skill=2)

        assert pool.formula == "1d12 + 1d8 + 1d8 + @ability + @skill"
        assert pool.bind() == "1d12 + 1d8 + 1d8 + 4 + 2"

    def test_enchantment_term(self) -> None:
        """Test enchantment only appears when positive."""
        pool = build_standard_check(enchantment=2)

        assert pool.formula.endswith("+ @enchantment")
        assert pool.bind().endswith("+ 0 + 0 + 2")

    def test_bind_override(self) -> None:
        """Test bound values may be overridden."""
        pool = build_standard_check(ability=1)

        assert pool.bind({"ability": 7}) == "1d8 + 1d8 + 1d8 + 7 + 0"

    def test_building_is_deterministic(self) -> None:
        """Test the builder is pure and independent of any roller."""
        assert build_standard_check(boons=3) == build_standard_check(boons=3)


class TestTotalBoons:
    """Tests for named boon totals."""

    def test_running_cap(self) -> None:
        """Test the running total stops at the cap."""
        sources = {"flank": DiceBoon("Flanking", 4), "aim": DiceBoon("Aim", 4)}

        assert total_boons(sources, cap=6) == 6

    def test_negative_sources_ignored(self) -> None:
        """Test negative sources contribute nothing."""
        sources = {"curse": DiceBoon("Curse", -2), "aim": DiceBoon("Aim", 1)}

        assert total_boons(sources) == 1

    def test_empty(self) -> None:
        """Test no sources yields zero."""
        assert total_boons({}) == 0


class TestComputeDamage:
    """Tests for the damage formula."""

    def test_basic_damage(self) -> None:
        """Test overflow plus base damage."""
        assert compute_damage(5, base=4) == 9

    def test_multiplier(self) -> None:
        """Test overflow is multiplied before adding base."""
        assert compute_damage(4, multiplier=2, base=1) == 9

    def test_minimum_one(self) -> None:
        """Test damage before mitigation of 1 or less deals exactly 1."""
        assert compute_damage(0) == 1
        assert compute_damage(1, resistance=-10) == 1

    def test_miss_multiplier_floor(self) -> None:
        """Test misses cannot use a multiplier below 1."""
        assert compute_damage(-3, multiplier=0, base=10) == 7

    def test_resistance_floor(self) -> None:
        """Test resistance cannot reduce damage below 1."""
        assert compute_damage(5, base=5, resistance=20) == 1

    def test_vulnerability_cap(self) -> None:
        """Test vulnerability at most doubles damage."""
        assert compute_damage(5, base=5, resistance=-15) == 20

    def test_restoration_ignores_resistance(self) -> None:
        """Test resistance does not apply to restoration."""
        assert compute_damage(5, base=5, resistance=3, restoration=True) == 10

    def test_damage_delta_sign(self) -> None:
        """Test damage reduces and restoration increases its resource."""
        assert Damage(overflow=5, base=4).delta == -9
        assert Damage(overflow=5, base=4, restoration=True).delta == 9


class TestCheckResult:
    """Tests for check outcome thresholds."""

    def _result(self, total: int, dc: int = 10) -> CheckResult:
        return CheckResult(expression="", dc=dc, total=total)

    def test_success_requires_exceeding_dc(self) -> None:
        """Test meeting the DC is a failure."""
        assert self._result(11).is_success
        assert self._result(10).is_failure

    def test_critical_success(self) -> None:
        """Test critical success beyond the threshold."""
        assert self._result(17).is_critical_success
        assert not self._result(16).is_critical_success

    def test_critical_failure(self) -> None:
        """Test critical failure at or below the threshold."""
        assert self._result(4).is_critical_failure
        assert not self._result(5).is_critical_failure

    def test_margin(self) -> None:
        """Test margin relative to the DC."""
        assert self._result(14).margin == 4
        assert self._result(7).margin == -3


class TestDiceRoller:
    """Tests for the DiceRoller class."""

    def test_roll_standard_pool(self, dice_roller: DiceRoller) -> None:
        """Test rolling a bound pool expression."""
        total, dice = dice_roller.roll("1d8 + 1d8 + 1d8 + 2 + 0")

        assert 5 <= total <= 26
        assert len(dice) == 3
        assert all(1 <= d <= 8 for d in dice)

    def test_roll_check(self, dice_roller: DiceRoller) -> None:
        """Test a check carries its pool and DC."""
        pool = build_standard_check(boons=1, ability=3)

        result = dice_roller.roll_check(pool, dc=15)

        assert result.pool is pool
        assert result.dc == 15
        assert result.expression == "1d10 + 1d8 + 1d8 + 3 + 0"
        assert 6 <= result.total <= 29

    def test_fixed_total(self, dice_roller: DiceRoller) -> None:
        """Test a fixed total skips rolling."""
        result = dice_roller.roll_check(build_standard_check(), dc=0, fixed_total=1)

        assert result.total == 1
        assert result.dice == ()
        assert result.is_success

    def test_custom_thresholds(self) -> None:
        """Test thresholds configured on the roller reach the result."""
        roller = DiceRoller(seed=1, critical_success_threshold=2, critical_failure_threshold=3)

        result = roller.roll_check(build_standard_check(), dc=5, fixed_total=8)

        assert result.is_critical_success

    def test_seeded_rolls_repeat(self) -> None:
        """Test the same seed reproduces the same rolls."""
        first = DiceRoller(seed=7).roll("3d12")
        second = DiceRoller(seed=7).roll("3d12")

        assert first == second

    def test_empty_expression(self, dice_roller: DiceRoller) -> None:
        """Test empty expressions are rejected."""
        with pytest.raises(DiceRollError):
            dice_roller.roll("  ")

    def test_invalid_expression(self, dice_roller: DiceRoller) -> None:
        """Test invalid expressions are rejected."""
        with pytest.raises(DiceRollError):
            dice_roller.roll("1d + banana")

    def test_module_roll(self) -> None:
        """Test the convenience roll function."""
        assert 3 <= roll("3d6") <= 18
