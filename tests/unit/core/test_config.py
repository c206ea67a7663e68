"""Tests for configuration management."""

from __future__ import annotations

import pytest

from tactics_engine.core.config import (
    CombatSettings,
    DiceSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from tactics_engine.core.exceptions import ConfigurationError


class TestDiceSettings:
    """Tests for DiceSettings configuration."""

    def test_default_values(self) -> None:
        """Test default dice settings."""
        settings = DiceSettings()

        assert settings.max_boons == 6
        assert settings.max_banes == 6
        assert settings.default_dc == 20
        assert settings.critical_success_threshold == 6
        assert settings.critical_failure_threshold == 6
        assert settings.seed is None

    def test_boon_cap_validation(self) -> None:
        """Test that the boon cap cannot exceed the pool limit."""
        with pytest.raises(ValueError):
            DiceSettings(max_boons=7)

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test dice settings read their own prefix."""
        monkeypatch.setenv("TACTICS_ENGINE_DICE_DEFAULT_DC", "25")

        settings = DiceSettings()

        assert settings.default_dc == 25


class TestCombatSettings:
    """Tests for CombatSettings configuration."""

    def test_default_values(self) -> None:
        """Test default combat settings."""
        settings = CombatSettings()

        assert settings.heroism_actions_per_participant == 12
        assert settings.heroism_actor_types == ["hero"]
        assert settings.recover_actions_on_turn_start is True

    def test_empty_heroism_actor_types(self) -> None:
        """Test that at least one actor type must accrue heroism."""
        with pytest.raises((ConfigurationError, ValueError)):
            CombatSettings(heroism_actor_types=[])


class TestSettings:
    """Tests for main Settings configuration."""

    def test_default_values(self) -> None:
        """Test default settings values."""
        settings = Settings()

        assert settings.app_name == "Tactics Engine"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.debug_hooks is False
        assert settings.is_production is True

    def test_env_override(self, mock_env_vars: dict[str, str]) -> None:
        """Test environment variable override."""
        settings = Settings()

        assert settings.debug is True
        assert settings.log_level == "DEBUG"
        assert settings.debug_hooks is True
        assert settings.is_production is False
        assert settings.dice.seed == 42
        assert settings.dice.default_dc == 15

    def test_invalid_log_level(self) -> None:
        """Test invalid log level is rejected."""
        with pytest.raises(ValueError):
            Settings(log_level="VERBOSE")


class TestGetSettings:
    """Tests for the settings singleton."""

    def test_settings_are_cached(self) -> None:
        """Test get_settings returns the same instance."""
        assert get_settings() is get_settings()

    def test_clear_settings_cache(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test clearing the cache reloads from the environment."""
        first = get_settings()
        monkeypatch.setenv("TACTICS_ENGINE_LOG_LEVEL", "WARNING")
        clear_settings_cache()

        second = get_settings()

        assert second is not first
        assert second.log_level == "WARNING"

    def test_invalid_environment_wrapped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test invalid environment values surface as ConfigurationError."""
        monkeypatch.setenv("TACTICS_ENGINE_LOG_LEVEL", "VERBOSE")

        with pytest.raises(ConfigurationError):
            get_settings()
