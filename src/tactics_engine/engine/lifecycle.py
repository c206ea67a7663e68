"""Action lifecycle runner.

Resolves one action through a fixed sequence of phases:

    prepare -> can_use -> pre_activate -> roll -> confirm -> post_activate -> commit

Hooks for each phase come from the registry snapshot captured when the
action was prepared, in the order action tags, action id, then the actor's
talents, items and statuses. Outcome and defense hooks add the receiving
actor's identifiers last. Within a phase hooks run one after another and
each observes the mutations made by those before it.

Failures up to and including the roll phase abort the action before
anything is committed. Failures in confirm and post_activate happen after
the dice were cast: they are collected as ``PostResolutionFault`` on the
result and the remaining hooks and targets still run.

Example:
    >>> runner = ActionLifecycleRunner(build_engine_config())
    >>> result = await runner.use(STRIKE, hero, [goblin])
    >>> result.outcome_for(goblin).applied
    {'health': -7}
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

from tactics_engine.core.constants import FOCUS_BLOCKING_STATUSES, RESOURCE_ACTION
from tactics_engine.core.exceptions import (
    ActionError,
    InsufficientResource,
    PostResolutionFault,
    TacticsEngineError,
    ValidationRejected,
)
from tactics_engine.core.logging import bind_context, get_logger, unbind_context
from tactics_engine.engine.dice import (
    CheckResult,
    Damage,
    DiceRoller,
    build_standard_check,
    total_boons,
)
from tactics_engine.engine.hooks import (
    BoundHook,
    HookPhase,
    HookSet,
    lookup_hooks,
    run_isolated,
    tag_hook_id,
)
from tactics_engine.engine.resources import ResourceLedger
from tactics_engine.models.action import (
    ActionDefinition,
    ActionResult,
    ActionState,
    Outcome,
    PromptCallback,
    TargetType,
)
from tactics_engine.models.actor import Actor, Defenses


if TYPE_CHECKING:
    from collections.abc import Mapping

    from tactics_engine.engine.runtime import EngineConfig
    from tactics_engine.engine.turn_manager import CombatRoundController


logger = get_logger(__name__)

AFFORDABLE_RESOURCES = ("action", "focus", "health", "heroism")


class ActionLifecycleRunner:
    """Resolves actions through the hook-composable lifecycle.

    Attributes:
        config: Engine configuration shared with the combat controller.
        ledger: Resource ledger used to commit outcomes.
        roller: Dice roller used for standard checks.
    """

    def __init__(
        self,
        config: EngineConfig,
        *,
        ledger: ResourceLedger | None = None,
        roller: DiceRoller | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            config: Engine configuration.
            ledger: Ledger to commit outcomes through; a new one by default.
            roller: Dice roller; created from the configuration by default.
        """
        self.config = config
        self.ledger = ledger if ledger is not None else ResourceLedger()
        self.roller = roller if roller is not None else config.create_roller()

    # =========================================================================
    # Hook Resolution
    # =========================================================================

    @staticmethod
    def action_hook_ids(state: ActionState) -> list[str]:
        """Identifiers contributing action-scoped hooks, in order."""
        tags = [tag_hook_id(tag) for tag in sorted(state.tags)]
        return [*tags, state.id, *state.actor.hook_ids]

    @classmethod
    def target_hook_ids(cls, state: ActionState, target: Actor) -> list[str]:
        """Identifiers contributing target-scoped hooks for one target, in order."""
        return [*cls.action_hook_ids(state), *target.hook_ids]

    def _hooks(
        self,
        state: ActionState,
        phase: HookPhase,
        ids: Iterable[str] | None = None,
    ) -> list[BoundHook]:
        if ids is None:
            ids = self.action_hook_ids(state)
        return lookup_hooks(state.hooks, phase, ids)

    def _trace(self, hook: BoundHook, **context: Any) -> None:
        if self.config.debug_hooks:
            logger.debug("Hook invoked", hook_id=hook.hook_id, phase=hook.phase.value, **context)

    def _rejection(
        self,
        state: ActionState,
        hook: BoundHook,
        exc: Exception,
    ) -> ValidationRejected:
        reason = str(exc) or type(exc).__name__
        return ValidationRejected(
            reason,
            action_id=state.id,
            actor=state.actor.id,
            phase=hook.phase.value,
            details={"hook_id": hook.hook_id},
        )

    def _call_sync(self, state: ActionState, hook: BoundHook, *args: Any) -> Any:
        """Invoke a synchronous hook before the dice are cast."""
        self._trace(hook)
        try:
            return hook.call_sync(*args)
        except TacticsEngineError:
            raise
        except Exception as exc:
            raise self._rejection(state, hook, exc) from exc

    async def _call_async(self, state: ActionState, hook: BoundHook, *args: Any) -> Any:
        """Invoke an asynchronous hook before the dice are cast."""
        self._trace(hook)
        try:
            return await hook.call_async(*args)
        except TacticsEngineError:
            raise
        except Exception as exc:
            raise self._rejection(state, hook, exc) from exc

    async def _call_isolated(
        self,
        state: ActionState,
        result: ActionResult,
        hook: BoundHook,
        *args: Any,
        target: Actor | None = None,
    ) -> None:
        """Invoke a hook after the dice are cast, collecting any failure as a fault."""
        self._trace(hook, target=target.id if target else None)
        try:
            await hook.call_async(*args)
        except Exception as exc:
            reason = exc.reason if isinstance(exc, ActionError) else (str(exc) or type(exc).__name__)
            fault = PostResolutionFault(
                reason,
                hook_id=hook.hook_id,
                phase=hook.phase.value,
                target=target.id if target else None,
                action_id=state.id,
            )
            fault.__cause__ = exc
            result.faults.append(fault)
            logger.warning(
                "Hook failed after roll",
                hook_id=hook.hook_id,
                phase=hook.phase.value,
                target=target.id if target else None,
                reason=reason,
            )

    # =========================================================================
    # Prepare
    # =========================================================================

    def prepare(
        self,
        definition: ActionDefinition,
        actor: Actor,
        *,
        targets: Sequence[Actor] = (),
        combat: CombatRoundController | None = None,
        prompt: PromptCallback | None = None,
        hooks: Mapping[str, HookSet] | None = None,
    ) -> ActionState:
        """Create the working state of an action and run its prepare hooks.

        Args:
            definition: The action being used.
            actor: The acting actor.
            targets: Declared targets.
            combat: Active combat round, if any.
            prompt: Async callback for hooks needing user input.
            hooks: Hook snapshot to use instead of the registry's current one.

        Returns:
            The prepared ActionState.
        """
        state = ActionState(
            definition=definition,
            actor=actor,
            cost=definition.cost.model_copy(),
            range=definition.range.model_copy(),
            tags=set(definition.tags),
            targets=list(targets),
            dc=definition.dc,
            defense=definition.defense,
            damage_type=definition.damage_type,
            combat=combat,
            prompt=prompt,
            hooks=hooks if hooks is not None else self.config.registry.snapshot(),
        )
        state.bonuses["ability"] = actor.abilities.get(definition.ability)
        state.bonuses["skill"] = definition.skill

        for hook in self._hooks(state, HookPhase.PREPARE):
            self._call_sync(state, hook, state)

        logger.debug(
            "Action prepared",
            action=state.id,
            actor=actor.id,
            cost=state.cost.model_dump(),
            tags=sorted(state.tags),
        )
        return state

    def display_on_sheet(self, state: ActionState, combatant: Any = None) -> bool:
        """Whether the prepared action should be offered to the user.

        Returns:
            False if any hook returns False, True otherwise.
        """
        for hook in self._hooks(state, HookPhase.DISPLAY_ON_SHEET):
            if self._call_sync(state, hook, state, combatant) is False:
                return False
        return True

    # =========================================================================
    # Validate
    # =========================================================================

    def can_use(self, state: ActionState, targets: Sequence[Actor] | None = None) -> None:
        """Validate that the actor may use the prepared action.

        Args:
            state: The prepared action.
            targets: Declared targets; defaults to the state's targets.

        Raises:
            InsufficientResource: If a cost component cannot be afforded.
            ValidationRejected: If a rule or hook vetoes the action.
        """
        if targets is None:
            targets = state.targets
        actor = state.actor
        cost = state.cost

        if cost.action > 0 and actor.is_incapacitated:
            raise ValidationRejected(
                f"{actor.name} cannot spend action points while incapacitated",
                action_id=state.id,
                actor=actor.id,
                phase=HookPhase.CAN_USE.value,
            )

        for resource in AFFORDABLE_RESOURCES:
            required = getattr(cost, resource)
            if required <= 0:
                continue
            available = actor.resource_value(resource)
            if required > available:
                raise InsufficientResource(
                    f"{actor.name} cannot afford the {resource} cost of {state.name}",
                    resource=resource,
                    required=required,
                    available=available,
                    action_id=state.id,
                    actor=actor.id,
                )

        if cost.focus > 0:
            blocking = next((s for s in FOCUS_BLOCKING_STATUSES if s in actor.statuses), None)
            if blocking:
                raise ValidationRejected(
                    f"{actor.name} cannot spend focus while {blocking}",
                    action_id=state.id,
                    actor=actor.id,
                    phase=HookPhase.CAN_USE.value,
                )

        target_type = state.definition.target_type
        limit = state.definition.target_number
        if target_type in (TargetType.SINGLE, TargetType.MULTIPLE) and len(targets) > limit:
            raise ValidationRejected(
                f"{state.name} may affect at most {limit} target(s)",
                action_id=state.id,
                actor=actor.id,
                phase=HookPhase.CAN_USE.value,
                details={"targets": len(targets)},
            )

        for hook in self._hooks(state, HookPhase.CAN_USE):
            if self._call_sync(state, hook, state, targets) is False:
                raise ValidationRejected(
                    f"{actor.name} cannot use {state.name}",
                    action_id=state.id,
                    actor=actor.id,
                    phase=HookPhase.CAN_USE.value,
                    details={"hook_id": hook.hook_id},
                )

    # =========================================================================
    # Use
    # =========================================================================

    async def use(
        self,
        definition: ActionDefinition,
        actor: Actor,
        targets: Sequence[Actor] = (),
        *,
        combat: CombatRoundController | None = None,
        prompt: PromptCallback | None = None,
    ) -> ActionResult:
        """Prepare and resolve an action in one call.

        Returns:
            The ActionResult.
        """
        state = self.prepare(definition, actor, targets=targets, combat=combat, prompt=prompt)
        return await self.resolve(state)

    async def resolve(
        self,
        state: ActionState,
        targets: Sequence[Actor] | None = None,
    ) -> ActionResult:
        """Resolve a prepared action against its targets.

        Args:
            state: The prepared action.
            targets: Targets to use instead of the state's declared ones.

        Returns:
            The ActionResult with one outcome per target then the actor.

        Raises:
            ValidationRejected: If validation or pre-activation vetoes the action.
            AbortedByUser: If a required prompt was dismissed.
            ActionError: If a roll hook fails.
        """
        if targets is not None:
            state.targets = list(targets)
        if state.definition.target_type in (TargetType.NONE, TargetType.SELF):
            state.targets = []

        bind_context(action=state.id, actor=state.actor.id)
        try:
            try:
                self.can_use(state)
                await self._pre_activate(state)
                outcomes = [await self._roll_target(state, target) for target in state.targets]
            except ActionError as exc:
                logger.warning("Action rejected", reason=exc.reason, details=exc.details)
                raise

            result = ActionResult(state=state, outcomes=outcomes)
            self._add_self_outcome(state, result)
            await self._confirm(state, result)
            await self._post_activate(state, result)
            self._commit(state, result)
        finally:
            unbind_context("action", "actor")

        return result

    async def _pre_activate(self, state: ActionState) -> None:
        for hook in self._hooks(state, HookPhase.PRE_ACTIVATE):
            await self._call_async(state, hook, state, state.targets)

    # =========================================================================
    # Roll
    # =========================================================================

    def prepare_defenses(
        self,
        target: Actor,
        hooks: Mapping[str, HookSet] | None = None,
        *,
        state: ActionState | None = None,
    ) -> Defenses:
        """Return a copy of a target's defenses adjusted by hooks.

        Without an action only the target's own hooks apply. Against an
        action the action's tags, the action and the attacker contribute
        first. A failing hook is logged and skipped.

        Args:
            target: The defending actor.
            hooks: Hook snapshot; the state's or the registry's current one by default.
            state: The action being defended against, if any.

        Returns:
            The prepared Defenses. The target itself is not modified.
        """
        if hooks is None:
            hooks = state.hooks if state is not None else self.config.registry.snapshot()
        ids = self.target_hook_ids(state, target) if state is not None else target.hook_ids
        defenses = target.defenses.model_copy(deep=True)
        bound = lookup_hooks(hooks, HookPhase.PREPARE_DEFENSES, ids)
        for hook in bound:
            self._trace(hook, target=target.id)
        run_isolated(bound, target, defenses, actor=target.id)
        return defenses

    def _resolve_dc(self, state: ActionState, target: Actor) -> int:
        if state.defense:
            return self.prepare_defenses(target, state=state).get(state.defense)
        if state.dc is not None:
            return state.dc
        return self.config.dice.default_dc

    def _standard_check_data(self, state: ActionState, target: Actor, dc: int) -> dict[str, Any]:
        """Build the roll data of one check and let attacker and defender adjust it."""
        check: dict[str, Any] = {
            "boons": dict(state.boons),
            "banes": dict(state.banes),
            "ability": state.bonuses.get("ability", 0),
            "skill": state.bonuses.get("skill", 0),
            "enchantment": state.bonuses.get("enchantment", 0),
            "dc": dc,
        }
        actor = state.actor
        run_isolated(
            lookup_hooks(state.hooks, HookPhase.PREPARE_STANDARD_CHECK, actor.hook_ids),
            actor,
            state,
            check,
            actor=actor.id,
        )
        if target.id != actor.id:
            run_isolated(
                lookup_hooks(state.hooks, HookPhase.DEFEND_ATTACK, target.hook_ids),
                target,
                state,
                check,
                actor=target.id,
            )
        return check

    def _roll_check(self, state: ActionState, target: Actor, dc: int) -> CheckResult:
        dice = self.config.dice
        check = self._standard_check_data(state, target, dc)
        pool = build_standard_check(
            boons=total_boons(check["boons"], cap=dice.max_boons),
            banes=total_boons(check["banes"], cap=dice.max_banes),
            ability=check["ability"],
            skill=check["skill"],
            enchantment=check["enchantment"],
        )
        result = self.roller.roll_check(pool, dc=check["dc"])

        definition = state.definition
        if result.is_success and definition.damage_base > 0:
            damage_type = state.damage_type
            damage = Damage(
                overflow=result.margin,
                multiplier=state.bonuses.get("multiplier", 1),
                base=definition.damage_base,
                bonus=state.bonuses.get("damage_bonus", 0),
                resistance=target.resistances.get(damage_type, 0) if damage_type else 0,
                restoration=definition.restoration,
                resource=definition.damage_resource,
                damage_type=damage_type,
            )
            result = dataclasses.replace(result, damage=damage)
        return result

    async def _roll_target(self, state: ActionState, target: Actor) -> Outcome:
        outcome = Outcome(target=target)
        try:
            if state.definition.has_dice:
                dc = self._resolve_dc(state, target)
                for _ in range(state.definition.strikes):
                    outcome.rolls.append(self._roll_check(state, target, dc))
        except TacticsEngineError:
            raise
        except Exception as exc:
            raise ActionError(
                str(exc) or type(exc).__name__,
                action_id=state.id,
                actor=state.actor.id,
                phase=HookPhase.ROLL.value,
                details={"target": target.id},
            ) from exc

        for hook in self._hooks(state, HookPhase.ROLL):
            await self._call_async(state, hook, state, target, outcome)

        for roll in outcome.rolls:
            if roll.damage is not None:
                outcome.add_resource(roll.damage.resource, roll.damage.delta)
        if outcome.is_success:
            for effect in state.definition.effects:
                state.queue_status(target, effect)

        logger.info(
            "Target rolled",
            target=target.id,
            totals=[r.total for r in outcome.rolls],
            success=outcome.is_success,
            resources=dict(outcome.resources),
        )
        return outcome

    def _add_self_outcome(self, state: ActionState, result: ActionResult) -> None:
        """Attach the actor's own outcome, paying the action cost.

        If the actor is also a target, its target outcome doubles as the
        self outcome.
        """
        outcome = result.outcome_for(state.actor)
        if outcome is None:
            outcome = Outcome(target=state.actor)
            result.outcomes.append(outcome)
        outcome.is_self = True
        for resource, amount in state.cost.as_deltas().items():
            outcome.add_resource(resource, amount)

    # =========================================================================
    # Confirm & Post-Activate
    # =========================================================================

    async def _confirm(self, state: ActionState, result: ActionResult) -> None:
        for hook in self._hooks(state, HookPhase.CONFIRM):
            await self._call_isolated(state, result, hook, state, result.outcomes)

        for outcome in result.outcomes:
            target = outcome.target
            ids = self.target_hook_ids(state, target)
            for hook in lookup_hooks(state.hooks, HookPhase.CONFIRM_ACTION_OUTCOME, ids):
                await self._call_isolated(state, result, hook, target, state, outcome, target=target)

    async def _post_activate(self, state: ActionState, result: ActionResult) -> None:
        hooks = self._hooks(state, HookPhase.POST_ACTIVATE)
        for outcome in result.outcomes:
            for hook in hooks:
                await self._call_isolated(
                    state, result, hook, state, outcome, target=outcome.target
                )

    # =========================================================================
    # Commit
    # =========================================================================

    def _commit(self, state: ActionState, result: ActionResult) -> None:
        """Apply outcomes to the ledger and record lingering actor state."""
        for outcome in result.outcomes:
            target = outcome.target
            outcome.applied = self.ledger.alter_resources(target, outcome.resources)

            pending = state.pending_statuses.get(target.id, set())
            outcome.statuses_applied |= pending - target.statuses
            target.statuses.update(pending)
            for status in outcome.statuses_removed:
                target.statuses.discard(status)

        actor = state.actor
        actor.status.update(state.actor_status)
        actor.status["last_action"] = state.id

        if state.combat is not None:
            self_outcome = result.self_outcome
            spent = -self_outcome.applied.get(RESOURCE_ACTION, 0) if self_outcome else 0
            if spent > 0:
                state.combat.record_action(actor, spent)

        logger.info(
            "Action resolved",
            outcomes=len(result.outcomes),
            faults=len(result.faults),
        )


__all__ = [
    "AFFORDABLE_RESOURCES",
    "ActionLifecycleRunner",
]
