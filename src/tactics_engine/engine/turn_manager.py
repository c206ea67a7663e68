"""Combat round control: initiative, turns, delays and heroism.

A round proceeds as

    start of round -> start_turn -> (actions) -> end_turn -> next combatant -> end of round

Initiative is a standard check per combatant, adjusted by each actor's
``prepare_initiative_check`` hooks. Turn starts recover action points and
run ``start_turn`` hooks; turn ends run ``end_turn`` hooks. Resource
changes go through the same ledger the lifecycle runner uses. A failing
actor hook is logged and skipped; the turn still advances.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from tactics_engine.core.constants import RESOURCE_ACTION, RESOURCE_HEROISM
from tactics_engine.core.exceptions import TurnManagementError
from tactics_engine.core.logging import get_logger
from tactics_engine.engine.dice import (
    CheckResult,
    DiceBoon,
    DiceRoller,
    build_standard_check,
    total_boons,
)
from tactics_engine.engine.hooks import HookPhase, run_isolated
from tactics_engine.engine.resources import ResourceLedger
from tactics_engine.models.actor import Actor, ActorType


if TYPE_CHECKING:
    from tactics_engine.engine.lifecycle import ActionLifecycleRunner
    from tactics_engine.engine.runtime import EngineConfig
    from tactics_engine.models.action import ActionDefinition, ActionResult, PromptCallback


logger = get_logger(__name__)


@dataclass
class Combatant:
    """An actor's place in the turn order.

    Attributes:
        actor: The participating actor.
        order: Insertion position, used to break initiative ties.
        initiative: Current initiative value, or None before the first roll.
        check: The most recent initiative check.
    """

    actor: Actor
    order: int
    initiative: int | None = None
    check: CheckResult | None = None

    @property
    def name(self) -> str:
        return self.actor.name


@dataclass
class HeroismMeter:
    """Heroism accrued by a combat encounter.

    ``required``, ``previous``, ``next`` and ``pct`` are derived from
    ``actions`` and the participant count and are recomputed from scratch
    whenever either changes.
    """

    actions: int = 0
    awarded: int = 0
    participants: int = 0
    actions_per_participant: int = 12
    required: int = 0
    previous: int = 0
    next: int = 0
    pct: float = 0.0

    def recompute(self) -> HeroismMeter:
        """Recompute the derived thresholds from ``actions``."""
        self.required = max(self.participants, 1) * self.actions_per_participant
        self.previous = (self.actions // self.required) * self.required
        self.next = self.previous + self.required
        self.pct = (self.actions - self.previous) / self.required
        return self

    def set_actions(self, actions: int) -> HeroismMeter:
        self.actions = max(int(actions), 0)
        return self.recompute()

    @property
    def earned(self) -> int:
        """Heroism points earned over the whole encounter."""
        if not self.required:
            return 0
        return self.actions // self.required

    @property
    def to_award(self) -> int:
        return max(self.earned - self.awarded, 0)


@dataclass
class TurnUpdate:
    """Changes planned by the start or end of a turn.

    Hooks add resource deltas and status text; the controller applies the
    resources through the ledger and stores the result in ``applied``.
    """

    resources: dict[str, float] = field(default_factory=dict)
    status_text: list[str] = field(default_factory=list)
    applied: dict[str, int] = field(default_factory=dict)

    def add_resource(self, resource: str, amount: float) -> None:
        self.resources[resource] = self.resources.get(resource, 0) + amount


class CombatRoundController:
    """Drive initiative, turn order and turn-scoped resource accrual.

    Example:
        >>> combat = CombatRoundController(config)
        >>> combat.add_combatant(hero)
        >>> combat.add_combatant(goblin)
        >>> combat.start_combat()
        >>> await combat.perform(STRIKE, hero, [goblin])
        >>> combat.next_turn()
    """

    def __init__(
        self,
        config: EngineConfig,
        *,
        ledger: ResourceLedger | None = None,
        roller: DiceRoller | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            config: Engine configuration shared with the lifecycle runner.
            ledger: Resource ledger; a new one by default.
            roller: Dice roller for initiative; created from the configuration by default.
        """
        self.config = config
        self.ledger = ledger if ledger is not None else ResourceLedger()
        self.roller = roller if roller is not None else config.create_roller()
        self.combatants: list[Combatant] = []
        self.round = 0
        self.turn = 0
        self.heroism = HeroismMeter(
            actions_per_participant=config.combat.heroism_actions_per_participant
        ).recompute()
        self._delayed: set[str] = set()
        self._runner: ActionLifecycleRunner | None = None
        self._sequence = 0
        logger.info("CombatRoundController initialized")

    # =========================================================================
    # Combatants
    # =========================================================================

    @property
    def started(self) -> bool:
        return self.round > 0

    @property
    def current(self) -> Combatant | None:
        """The combatant whose turn it is."""
        if not self.started or not self.combatants:
            return None
        return self.combatants[self.turn]

    @property
    def turn_order(self) -> list[Combatant]:
        return list(self.combatants)

    def get_combatant(self, actor: Actor) -> Combatant | None:
        return next((c for c in self.combatants if c.actor.id == actor.id), None)

    def add_combatant(self, actor: Actor, *, initiative: int | None = None) -> Combatant:
        """Add an actor to the encounter.

        Args:
            actor: The actor joining combat.
            initiative: Optional initiative value to start with.

        Returns:
            The created Combatant.

        Raises:
            TurnManagementError: If the actor is already a combatant.
        """
        if self.get_combatant(actor) is not None:
            raise TurnManagementError(
                f"{actor.name} is already in combat",
                combatant=actor.id,
                round_number=self.round,
            )
        combatant = Combatant(actor=actor, order=self._sequence, initiative=initiative)
        self._sequence += 1
        self.combatants.append(combatant)
        self._update_participants()
        logger.info("Combatant added", combatant=actor.id, initiative=initiative)
        return combatant

    def remove_combatant(self, actor: Actor) -> None:
        """Remove an actor from the encounter.

        Raises:
            TurnManagementError: If the actor is not a combatant.
        """
        combatant = self.get_combatant(actor)
        if combatant is None:
            raise TurnManagementError(
                f"{actor.name} is not in combat",
                combatant=actor.id,
                round_number=self.round,
            )
        index = self.combatants.index(combatant)
        self.combatants.remove(combatant)
        if index < self.turn:
            self.turn -= 1
        if self.combatants:
            self.turn = min(self.turn, len(self.combatants) - 1)
        else:
            self.turn = 0
        self._update_participants()
        logger.info("Combatant removed", combatant=actor.id)

    def _update_participants(self) -> None:
        self.heroism.participants = len(self.combatants)
        self.heroism.recompute()

    # =========================================================================
    # Initiative
    # =========================================================================

    def roll_initiative_check(self, actor: Actor) -> CheckResult:
        """Roll a single initiative check for an actor.

        Incapacitated actors always roll 0 and unaware actors always roll 1.
        """
        check: dict[str, Any] = {
            "boons": {},
            "banes": {},
            "ability": actor.initiative_ability,
            "skill": 0,
            "enchantment": 0,
        }
        hooks = self.config.registry.lookup(HookPhase.PREPARE_INITIATIVE_CHECK, actor.hook_ids)
        run_isolated(hooks, actor, check, actor=actor.id)

        fixed_total: int | None = None
        if actor.is_incapacitated:
            fixed_total = 0
        elif actor.is_unaware:
            fixed_total = 1

        boons: dict[str, DiceBoon] = check["boons"]
        banes: dict[str, DiceBoon] = check["banes"]
        pool = build_standard_check(
            boons=total_boons(boons, cap=self.config.dice.max_boons),
            banes=total_boons(banes, cap=self.config.dice.max_banes),
            ability=check["ability"],
            skill=check["skill"],
            enchantment=check["enchantment"],
        )
        return self.roller.roll_check(pool, dc=0, fixed_total=fixed_total)

    def roll_initiative(self) -> list[Combatant]:
        """Roll initiative for every combatant and sort the turn order.

        Ties keep insertion order. The turn pointer returns to the first
        combatant.

        Returns:
            Combatants in the new turn order.
        """
        for combatant in self.combatants:
            combatant.check = self.roll_initiative_check(combatant.actor)
            combatant.initiative = combatant.check.total
        self._sort()
        self.turn = 0
        logger.info(
            "Initiative rolled",
            round=self.round,
            order=[(c.actor.id, c.initiative) for c in self.combatants],
        )
        return self.turn_order

    def _sort(self) -> None:
        self.combatants.sort(key=lambda c: (-(c.initiative or 0), c.order))

    # =========================================================================
    # Rounds & Turns
    # =========================================================================

    def start_combat(self) -> Combatant:
        """Begin the first round and start the first combatant's turn.

        Raises:
            TurnManagementError: If there are no combatants.
        """
        if not self.combatants:
            raise TurnManagementError("Cannot start combat: no combatants")
        self.round = 1
        self._delayed.clear()
        self.roll_initiative()
        logger.info("Combat started", round=self.round)
        self.start_turn()
        return self.combatants[self.turn]

    def next_round(self) -> list[Combatant]:
        """Begin a new round, re-rolling initiative."""
        self.round += 1
        self._delayed.clear()
        logger.info("New round started", round=self.round)
        return self.roll_initiative()

    def next_turn(self) -> Combatant:
        """End the current turn and start the next one.

        Returns:
            The combatant whose turn begins.

        Raises:
            TurnManagementError: If combat has not started.
        """
        if not self.started or not self.combatants:
            raise TurnManagementError("Combat hasn't started yet", round_number=self.round)
        self.end_turn()
        if self.turn + 1 >= len(self.combatants):
            self.next_round()
        else:
            self.turn += 1
        self.start_turn()
        return self.combatants[self.turn]

    def start_turn(self, combatant: Combatant | None = None) -> TurnUpdate | None:
        """Start a combatant's turn.

        Recovers action points, runs ``start_turn`` hooks and clears the
        actor's lingering status flags. A combatant resuming a turn it
        delayed this round is skipped.

        Returns:
            The applied TurnUpdate, or None when the turn start was skipped.
        """
        combatant = combatant or self.current
        if combatant is None:
            return None
        actor = combatant.actor

        delay = actor.flags.get("delay")
        if delay and delay.get("round") == self.round and combatant.initiative == delay.get("to"):
            logger.debug("Turn start skipped after delay", combatant=actor.id)
            return None

        update = TurnUpdate()
        if self.config.combat.recover_actions_on_turn_start:
            update.resources[RESOURCE_ACTION] = math.inf
        if actor.is_unaware:
            update.status_text.append("Unaware")

        hooks = self.config.registry.lookup(HookPhase.START_TURN, actor.hook_ids)
        run_isolated(hooks, actor, update, actor=actor.id, round=self.round)

        actor.status.clear()
        update.applied = self.ledger.alter_resources(actor, update.resources)
        logger.info(
            "Turn started",
            combatant=actor.id,
            round=self.round,
            applied=update.applied,
            status_text=update.status_text,
        )
        return update

    def end_turn(self, combatant: Combatant | None = None) -> TurnUpdate | None:
        """End a combatant's turn, running ``end_turn`` hooks and clearing any delay."""
        combatant = combatant or self.current
        if combatant is None:
            return None
        actor = combatant.actor

        update = TurnUpdate()
        hooks = self.config.registry.lookup(HookPhase.END_TURN, actor.hook_ids)
        run_isolated(hooks, actor, update, actor=actor.id, round=self.round)

        actor.flags.pop("delay", None)
        update.applied = self.ledger.alter_resources(actor, update.resources)
        logger.info(
            "Turn ended",
            combatant=actor.id,
            round=self.round,
            applied=update.applied,
            status_text=update.status_text,
        )
        return update

    # =========================================================================
    # Delay
    # =========================================================================

    def has_delayed(self, actor: Actor) -> bool:
        """Whether the actor already delayed this round."""
        return actor.id in self._delayed or bool(actor.flags.get("delay"))

    def get_delay_maximum(self, actor: Actor) -> int:
        """Highest initiative an actor may delay to."""
        combatant = self.get_combatant(actor)
        if combatant is None or combatant.initiative is None:
            return 0
        return combatant.initiative - 1

    def delay(self, actor: Actor, initiative: int) -> Combatant | None:
        """Delay an actor's turn to a lower initiative value.

        The turn order is re-sorted while the turn pointer stays in place,
        so the next combatant in order begins their turn.

        Args:
            actor: The delaying actor.
            initiative: Target initiative in ``[1, initiative - 1]``.

        Returns:
            The combatant whose turn begins after the delay.

        Raises:
            TurnManagementError: If the actor is not in combat, already
                delayed this round, or the initiative is out of range.
        """
        combatant = self.get_combatant(actor)
        if combatant is None:
            raise TurnManagementError(
                f"{actor.name} is not in combat",
                combatant=actor.id,
                round_number=self.round,
            )
        if self.has_delayed(actor):
            raise TurnManagementError(
                f"{actor.name} may not delay again this round",
                combatant=actor.id,
                round_number=self.round,
            )
        maximum = self.get_delay_maximum(actor)
        if isinstance(initiative, bool) or not isinstance(initiative, int) or not 1 <= initiative <= maximum:
            raise TurnManagementError(
                f"You may only delay to an initiative value between 1 and {maximum}",
                combatant=actor.id,
                round_number=self.round,
                details={"initiative": initiative, "maximum": maximum},
            )

        actor.flags["delay"] = {"round": self.round, "from": combatant.initiative, "to": initiative}
        self._delayed.add(actor.id)
        combatant.initiative = initiative
        self._sort()
        logger.info("Turn delayed", combatant=actor.id, initiative=initiative)

        current = self.current
        if current is not None and current is not combatant:
            self.start_turn(current)
        return current

    # =========================================================================
    # Heroism
    # =========================================================================

    def record_action(self, actor: Actor, spent: int) -> int:
        """Accrue heroism from action points spent by an actor.

        Args:
            actor: The actor who spent action points.
            spent: Action points spent.

        Returns:
            Heroism points awarded as a result.
        """
        if spent <= 0 or actor.actor_type.value not in self.config.combat.heroism_actor_types:
            return 0
        self.heroism.set_actions(self.heroism.actions + spent)
        logger.debug("Heroism accrued", actor=actor.id, actions=self.heroism.actions, pct=self.heroism.pct)
        return self.award_heroism()

    def award_heroism(self) -> int:
        """Award newly earned heroism points to every hero in combat.

        Returns:
            Heroism points awarded to each hero.
        """
        to_award = self.heroism.to_award
        if to_award <= 0:
            return 0
        for combatant in self.combatants:
            if combatant.actor.actor_type == ActorType.HERO:
                self.ledger.alter_resources(combatant.actor, {RESOURCE_HEROISM: to_award})
        self.heroism.awarded = self.heroism.earned
        logger.info("Heroism awarded", amount=to_award, awarded=self.heroism.awarded)
        return to_award

    # =========================================================================
    # Actions
    # =========================================================================

    @property
    def runner(self) -> ActionLifecycleRunner:
        """Lifecycle runner sharing this controller's ledger and roller."""
        if self._runner is None:
            from tactics_engine.engine.lifecycle import ActionLifecycleRunner

            self._runner = ActionLifecycleRunner(self.config, ledger=self.ledger, roller=self.roller)
        return self._runner

    async def perform(
        self,
        definition: ActionDefinition,
        actor: Actor,
        targets: Sequence[Actor] = (),
        *,
        prompt: PromptCallback | None = None,
    ) -> ActionResult:
        """Use an action within this combat."""
        return await self.runner.use(definition, actor, targets, combat=self, prompt=prompt)


__all__ = [
    "Combatant",
    "HeroismMeter",
    "TurnUpdate",
    "CombatRoundController",
]
