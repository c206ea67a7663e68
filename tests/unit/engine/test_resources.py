"""Tests for the resource ledger."""

from __future__ import annotations

import math

from tactics_engine.engine.resources import ResourceLedger
from tactics_engine.models.actor import Actor, ResourcePool


class TestApplyDelta:
    """Tests for clamped pool changes."""

    def test_clamped_to_maximum(self) -> None:
        """Test gains stop at the maximum."""
        pool = ResourcePool(value=5, maximum=10)

        applied = ResourceLedger().apply_delta(pool, 10)

        assert applied == 5
        assert pool.value == 10

    def test_clamped_to_minimum(self) -> None:
        """Test losses stop at the minimum."""
        pool = ResourcePool(value=3, maximum=10)

        assert ResourceLedger().apply_delta(pool, -8) == -3
        assert pool.value == 0

    def test_infinite_deltas(self) -> None:
        """Test infinities fill and empty the pool."""
        ledger = ResourceLedger()
        pool = ResourcePool(value=3, maximum=10)

        assert ledger.apply_delta(pool, math.inf) == 7
        assert ledger.apply_delta(pool, -math.inf) == -10
        assert pool.value == 0

    def test_nan_ignored(self) -> None:
        """Test NaN changes nothing."""
        pool = ResourcePool(value=3, maximum=10)

        assert ResourceLedger().apply_delta(pool, math.nan) == 0
        assert pool.value == 3


class TestAlterResources:
    """Tests for applying deltas to an actor."""

    def test_applied_reflects_clamping(self, hero: Actor) -> None:
        """Test the returned changes are what was actually applied."""
        ledger = ResourceLedger()

        applied = ledger.alter_resources(hero, {"focus": -1, "action": 5})

        assert applied == {"focus": -1}
        assert hero.resource_value("focus") == 2
        assert hero.resource_value("action") == 3

    def test_health_overflow_spills_into_wounds(self, hero: Actor) -> None:
        """Test damage beyond zero health becomes wounds."""
        applied = ResourceLedger().alter_resources(hero, {"health": -25})

        assert applied == {"health": -20, "wounds": 5}
        assert hero.resource_value("health") == 0
        assert hero.resource_value("wounds") == 5

    def test_morale_overflow_spills_into_madness(self, hero: Actor) -> None:
        """Test morale damage beyond zero becomes madness."""
        hero.resources["morale"].value = 2

        applied = ResourceLedger().alter_resources(hero, {"morale": -5})

        assert applied == {"morale": -2, "madness": 3}

    def test_recovery_blocked_by_status(self, hero: Actor) -> None:
        """Test diseased actors cannot regain health."""
        hero.resources["health"].value = 10
        hero.statuses.add("diseased")

        applied = ResourceLedger().alter_resources(hero, {"health": 5})

        assert applied == {}
        assert hero.resource_value("health") == 10

    def test_infinite_recovery_ignores_blocking_status(self, hero: Actor) -> None:
        """Test an infinite delta fills the pool regardless of status."""
        hero.resources["action"].value = 0
        hero.statuses.add("incapacitated")

        applied = ResourceLedger().alter_resources(hero, {"action": math.inf})

        assert applied == {"action": 3}

    def test_losses_not_blocked(self, hero: Actor) -> None:
        """Test blocking statuses only prevent gains."""
        hero.statuses.add("frightened")

        assert ResourceLedger().alter_resources(hero, {"morale": -4}) == {"morale": -4}

    def test_reverse(self, hero: Actor) -> None:
        """Test reversing negates each delta."""
        hero.resources["focus"].value = 1

        applied = ResourceLedger().alter_resources(hero, {"focus": -2}, reverse=True)

        assert applied == {"focus": 2}

    def test_unknown_resource_skipped(self, hero: Actor) -> None:
        """Test pools the actor does not have are skipped."""
        assert ResourceLedger().alter_resources(hero, {"mana": -3}) == {}

    def test_entries_recorded(self, hero: Actor) -> None:
        """Test each change is recorded with requested and applied amounts."""
        ledger = ResourceLedger()

        ledger.alter_resources(hero, {"action": -5})

        entries = ledger.entries_for(hero)
        assert len(entries) == 1
        assert entries[0].resource == "action"
        assert entries[0].requested == -5
        assert entries[0].applied == -3
        assert entries[0].value == 0


class TestSnapshot:
    """Tests for pool snapshots."""

    def test_snapshot_and_restore(self, hero: Actor) -> None:
        """Test restoring a snapshot resets pool values."""
        ledger = ResourceLedger()
        snapshot = ledger.snapshot(hero)

        ledger.alter_resources(hero, {"health": -7, "focus": -3})
        ledger.restore(hero, snapshot)

        assert hero.resource_value("health") == 20
        assert hero.resource_value("focus") == 3
        assert len(ledger.entries) == 2
