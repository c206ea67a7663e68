"""Resource ledger.

Every change to an actor's resource pools passes through the ledger,
which clamps it to the pool's bounds and records what was requested
against what was actually applied. Callers should always use the
applied amount.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field

from tactics_engine.core.constants import (
    OVERFLOW_POOLS,
    RESOURCE_ACTION,
    RESOURCE_HEALTH,
    RESOURCE_MORALE,
    STATUS_DISEASED,
    STATUS_FRIGHTENED,
    STATUS_INCAPACITATED,
)
from tactics_engine.core.logging import get_logger
from tactics_engine.models.actor import Actor, ResourcePool


logger = get_logger(__name__)

# Statuses which prevent a pool from being restored
RECOVERY_BLOCKERS: Mapping[str, str] = {
    RESOURCE_ACTION: STATUS_INCAPACITATED,
    RESOURCE_HEALTH: STATUS_DISEASED,
    RESOURCE_MORALE: STATUS_FRIGHTENED,
}


@dataclass(frozen=True)
class LedgerEntry:
    """One recorded change to a resource pool."""

    actor_id: str
    resource: str
    requested: float
    applied: int
    value: int


@dataclass
class ResourceLedger:
    """Applies clamped deltas to resource pools and keeps a history of them."""

    entries: list[LedgerEntry] = field(default_factory=list)

    def apply_delta(self, pool: ResourcePool, amount: float) -> int:
        """Apply a delta to a pool, clamped to its bounds.

        Positive infinity fills the pool and negative infinity empties it.

        Args:
            pool: The pool to change.
            amount: Requested change.

        Returns:
            The change actually applied.
        """
        if math.isnan(amount):
            return 0
        if math.isinf(amount):
            target = pool.maximum if amount > 0 else pool.minimum
        else:
            target = pool.value + int(amount)
        target = max(pool.minimum, min(target, pool.maximum))
        applied = target - pool.value
        if applied:
            pool.value = target
        return applied

    def alter_resources(
        self,
        actor: Actor,
        deltas: Mapping[str, float],
        *,
        reverse: bool = False,
    ) -> dict[str, int]:
        """Apply a set of resource deltas to an actor.

        Incapacitated actors cannot regain action, diseased actors cannot
        regain health and frightened actors cannot regain morale, except
        through an infinite delta which always fills the pool. Health
        damage beyond zero spills into wounds and morale damage into
        madness. Unknown pools are skipped.

        Args:
            actor: The actor whose pools change.
            deltas: Requested change per pool name.
            reverse: Negate every delta before applying it.

        Returns:
            Applied change per pool name, including overflow pools.
        """
        applied: dict[str, int] = {}
        for resource, requested in deltas.items():
            amount = -requested if reverse else requested
            if not amount:
                continue
            pool = actor.get_pool(resource)
            if pool is None:
                logger.debug("Skipping unknown resource", actor=actor.id, resource=resource)
                continue

            # Infinite deltas fill or empty the pool regardless of status
            blocker = RECOVERY_BLOCKERS.get(resource)
            if 0 < amount < math.inf and blocker and blocker in actor.statuses:
                logger.debug(
                    "Resource recovery blocked",
                    actor=actor.id,
                    resource=resource,
                    status=blocker,
                )
                continue

            overflow = 0
            overflow_pool = OVERFLOW_POOLS.get(resource)
            if overflow_pool and amount < 0 and not math.isinf(amount):
                overflow = max(-(pool.value + int(amount) - pool.minimum), 0)

            change = self.apply_delta(pool, amount)
            self._record(actor, resource, amount, change, pool.value)
            if change:
                applied[resource] = applied.get(resource, 0) + change

            if overflow and overflow_pool:
                spill = actor.get_pool(overflow_pool)
                if spill is not None:
                    spill_change = self.apply_delta(spill, overflow)
                    self._record(actor, overflow_pool, overflow, spill_change, spill.value)
                    if spill_change:
                        applied[overflow_pool] = applied.get(overflow_pool, 0) + spill_change

        if applied:
            logger.info("Resources altered", actor=actor.id, applied=applied)
        return applied

    def snapshot(self, actor: Actor) -> dict[str, int]:
        """Capture the current value of every pool of an actor."""
        return {name: pool.value for name, pool in actor.resources.items()}

    def restore(self, actor: Actor, snapshot: Mapping[str, int]) -> None:
        """Restore pool values previously captured with ``snapshot``.

        Restoration is not recorded as ledger entries.
        """
        for name, value in snapshot.items():
            pool = actor.get_pool(name)
            if pool is not None:
                pool.value = max(pool.minimum, min(value, pool.maximum))

    def entries_for(self, actor: Actor) -> list[LedgerEntry]:
        return [e for e in self.entries if e.actor_id == actor.id]

    def _record(self, actor: Actor, resource: str, requested: float, applied: int, value: int) -> None:
        self.entries.append(
            LedgerEntry(
                actor_id=actor.id,
                resource=resource,
                requested=requested,
                applied=applied,
                value=value,
            )
        )


__all__ = [
    "RECOVERY_BLOCKERS",
    "LedgerEntry",
    "ResourceLedger",
]
