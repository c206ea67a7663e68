"""Custom exception hierarchy for the tactics engine.

This module defines the exception hierarchy used across action resolution,
dice evaluation, hook registration, and combat round management. All
exceptions inherit from TacticsEngineError, enabling unified error handling
at the boundary with the UI or chat layer while preserving domain context.

Example:
    >>> from tactics_engine.core.exceptions import InsufficientResource
    >>> raise InsufficientResource("Not enough focus", resource="focus", required=2, available=1)
"""

from __future__ import annotations

from typing import Any


class TacticsEngineError(Exception):
    """Base exception for all tactics engine errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration & Registration Exceptions
# =============================================================================


class ConfigurationError(TacticsEngineError):
    """Raised when engine configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class HookRegistrationError(TacticsEngineError):
    """Raised when a hook set is malformed or invoked incorrectly.

    This covers non-callable phase members, unknown phase names, and
    synchronous phases whose callback returned an awaitable.
    """

    def __init__(
        self,
        message: str,
        *,
        hook_id: str | None = None,
        phase: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if hook_id:
            combined_details["hook_id"] = hook_id
        if phase:
            combined_details["phase"] = phase
        super().__init__(message, details=combined_details)


# =============================================================================
# Game Engine Domain Exceptions
# =============================================================================


class GameEngineError(TacticsEngineError):
    """Base exception for all rules-resolution errors."""


class DiceRollError(GameEngineError):
    """Raised when a dice expression cannot be bound or evaluated."""

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize dice roll error with expression context.

        Args:
            message: Human-readable error description.
            expression: The dice expression that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if expression:
            combined_details["expression"] = expression
        super().__init__(message, details=combined_details)


class ActionError(GameEngineError):
    """Base exception for failures raised while resolving an action.

    Attributes:
        reason: Short user-facing explanation of the failure.
    """

    def __init__(
        self,
        reason: str,
        *,
        action_id: str | None = None,
        actor: str | None = None,
        phase: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize action error with action context.

        Args:
            reason: Short user-facing explanation of the failure.
            action_id: Identifier of the action being resolved.
            actor: Name of the acting actor.
            phase: Lifecycle phase in which the failure occurred.
            details: Optional dictionary containing additional error context.
        """
        self.reason = reason
        combined_details = details or {}
        if action_id:
            combined_details["action_id"] = action_id
        if actor:
            combined_details["actor"] = actor
        if phase:
            combined_details["phase"] = phase
        super().__init__(reason, details=combined_details)


class ValidationRejected(ActionError):
    """Raised when a validation check or hook vetoes an action.

    Raised before any roll happens, so no resource or status change has
    been committed when it propagates.
    """


ActionRejected = ValidationRejected


class InsufficientResource(ValidationRejected):
    """Raised when the actor cannot afford the cost of an action."""

    def __init__(
        self,
        reason: str,
        *,
        resource: str,
        required: int,
        available: int,
        action_id: str | None = None,
        actor: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize insufficient resource error with pool context.

        Args:
            reason: Short user-facing explanation of the failure.
            resource: Name of the resource pool which is too low.
            required: Amount required by the action cost.
            available: Amount currently available in the pool.
            action_id: Identifier of the action being resolved.
            actor: Name of the acting actor.
            details: Optional dictionary containing additional error context.
        """
        self.resource = resource
        self.required = required
        self.available = available
        combined_details = details or {}
        combined_details.update(resource=resource, required=required, available=available)
        super().__init__(
            reason,
            action_id=action_id,
            actor=actor,
            phase="can_use",
            details=combined_details,
        )


class AbortedByUser(ActionError):
    """Raised when a required user prompt was dismissed during pre-activation."""


class PostResolutionFault(ActionError):
    """A hook failure that occurred after dice were already rolled.

    These faults are collected on the action result and logged as warnings
    rather than propagated; already-applied outcomes are never unwound.
    """

    def __init__(
        self,
        reason: str,
        *,
        hook_id: str,
        phase: str,
        target: str | None = None,
        action_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.hook_id = hook_id
        self.target = target
        combined_details = details or {}
        combined_details["hook_id"] = hook_id
        if target:
            combined_details["target"] = target
        super().__init__(reason, action_id=action_id, phase=phase, details=combined_details)


class CombatError(GameEngineError):
    """Raised when combat round management encounters an error."""

    def __init__(
        self,
        message: str,
        *,
        combatant: str | None = None,
        round_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize combat error with combat context.

        Args:
            message: Human-readable error description.
            combatant: Name of the combatant involved.
            round_number: Current combat round when error occurred.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if combatant:
            combined_details["combatant"] = combatant
        if round_number is not None:
            combined_details["round_number"] = round_number
        super().__init__(message, details=combined_details)


class TurnManagementError(CombatError):
    """Raised when turn order or initiative management fails.

    This includes starting a round without combatants and invalid delay
    requests.
    """


__all__ = [
    "TacticsEngineError",
    "ConfigurationError",
    "HookRegistrationError",
    "GameEngineError",
    "DiceRollError",
    "ActionError",
    "ValidationRejected",
    "ActionRejected",
    "InsufficientResource",
    "AbortedByUser",
    "PostResolutionFault",
    "CombatError",
    "TurnManagementError",
]
