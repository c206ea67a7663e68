"""Core module providing configuration, logging, constants, and exceptions.

Exports:
    Exceptions:
        TacticsEngineError: Base exception for all engine errors.
        ValidationRejected / InsufficientResource: Pre-roll action vetoes.
        AbortedByUser: A required prompt was dismissed.
        PostResolutionFault: A hook failed after dice were rolled.

    Configuration:
        Settings: Main engine settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up engine logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from tactics_engine.core.config import (
    CombatSettings,
    DiceSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from tactics_engine.core.exceptions import (
    AbortedByUser,
    ActionError,
    ActionRejected,
    CombatError,
    ConfigurationError,
    DiceRollError,
    GameEngineError,
    HookRegistrationError,
    InsufficientResource,
    PostResolutionFault,
    TacticsEngineError,
    TurnManagementError,
    ValidationRejected,
)
from tactics_engine.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


__all__ = [
    # Exceptions
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
    # Configuration
    "Settings",
    "DiceSettings",
    "CombatSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
]
