"""Configuration management for the tactics engine.

This module provides centralized configuration using pydantic-settings,
supporting environment variables, .env files, and runtime overrides.
The settings are loaded once and then handed to the runtime
``EngineConfig`` (see ``tactics_engine.engine.runtime``), which is passed
explicitly to the lifecycle runner and combat controller.

Example:
    >>> from tactics_engine.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.dice.critical_success_threshold
    6

Environment Variables:
    TACTICS_ENGINE_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    TACTICS_ENGINE_DEBUG_HOOKS: Log every hook invocation at debug level
    TACTICS_ENGINE_DICE_SEED: Seed for reproducible dice rolls
    TACTICS_ENGINE_DICE_DEFAULT_DC: DC used when an action defines none
    TACTICS_ENGINE_COMBAT_HEROISM_ACTIONS_PER_PARTICIPANT: Heroism threshold scale
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tactics_engine.core.constants import (
    CRITICAL_THRESHOLD,
    DEFAULT_DC,
    MAX_BANES,
    MAX_BOONS,
)
from tactics_engine.core.exceptions import ConfigurationError


class DiceSettings(BaseSettings):
    """Configuration for dice pool checks.

    Attributes:
        max_boons: Maximum boons counted on one check.
        max_banes: Maximum banes counted on one check.
        default_dc: DC used when an action defines neither a DC nor a defense.
        critical_success_threshold: Margin above the DC for a critical success.
        critical_failure_threshold: Margin below the DC for a critical failure.
        seed: Optional random seed for reproducible rolls.
    """

    model_config = SettingsConfigDict(
        env_prefix="TACTICS_ENGINE_DICE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_boons: int = Field(
        default=MAX_BOONS,
        ge=0,
        le=MAX_BOONS,
        description="Maximum boons per check",
    )
    max_banes: int = Field(
        default=MAX_BANES,
        ge=0,
        le=MAX_BANES,
        description="Maximum banes per check",
    )
    default_dc: int = Field(
        default=DEFAULT_DC,
        ge=0,
        description="DC used when an action has none",
    )
    critical_success_threshold: int = Field(
        default=CRITICAL_THRESHOLD,
        ge=0,
        description="Margin above the DC for a critical success",
    )
    critical_failure_threshold: int = Field(
        default=CRITICAL_THRESHOLD,
        ge=0,
        description="Margin below the DC for a critical failure",
    )
    seed: int | None = Field(
        default=None,
        description="Random seed for reproducible rolls",
    )


class CombatSettings(BaseSettings):
    """Configuration for combat rounds and heroism accrual.

    Attributes:
        heroism_actions_per_participant: Action points required per
            participant to reach the next heroism threshold.
        heroism_actor_types: Actor types whose spent action points accrue heroism.
        recover_actions_on_turn_start: Refill the action pool when a turn starts.
    """

    model_config = SettingsConfigDict(
        env_prefix="TACTICS_ENGINE_COMBAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    heroism_actions_per_participant: int = Field(
        default=12,
        ge=1,
        description="Actions required per participant for a heroism threshold",
    )
    heroism_actor_types: list[str] = Field(
        default_factory=lambda: ["hero"],
        description="Actor types whose actions accrue heroism",
    )
    recover_actions_on_turn_start: bool = Field(
        default=True,
        description="Refill action points at the start of each turn",
    )

    @model_validator(mode="after")
    def validate_heroism_actor_types(self) -> "CombatSettings":
        """Ensure at least one actor type accrues heroism.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If no actor types are configured.
        """
        if not self.heroism_actor_types:
            raise ConfigurationError(
                "At least one actor type must accrue heroism",
                config_key="heroism_actor_types",
            )
        return self


class Settings(BaseSettings):
    """Main engine settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Engine logging level.
        json_logs: Render logs as JSON.
        debug_hooks: Log every hook invocation.
        dice: Dice pool settings.
        combat: Combat round settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="TACTICS_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="Tactics Engine",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=False,
        description="Render logs as JSON",
    )
    debug_hooks: bool = Field(
        default=False,
        description="Log every hook invocation",
    )

    dice: DiceSettings = Field(default_factory=DiceSettings)
    combat: CombatSettings = Field(default_factory=CombatSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode.

        Returns:
            True if not in debug mode.
        """
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the engine settings singleton.

    Returns:
        The engine Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load engine settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access.

    Example:
        >>> clear_settings_cache()
        >>> settings = get_settings()  # Reloads from environment
    """
    get_settings.cache_clear()


__all__ = [
    "DiceSettings",
    "CombatSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
