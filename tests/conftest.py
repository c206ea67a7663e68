"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Tactics Engine test suite.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import pytest

from tactics_engine.engine.dice import DiceRoller


if TYPE_CHECKING:
    from collections.abc import Generator


class ScriptedRoller(DiceRoller):
    """A DiceRoller returning scripted totals instead of rolling.

    Totals are consumed in order; once exhausted, ``default`` is returned.
    Every expression passed to ``roll`` is recorded in ``expressions``.
    """

    def __init__(self, totals: Iterable[int] = (), *, default: int = 10, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.totals = list(totals)
        self.default = default
        self.expressions: list[str] = []

    def roll(self, expression: str) -> tuple[int, tuple[int, ...]]:
        self.expressions.append(expression)
        total = self.totals.pop(0) if self.totals else self.default
        return total, ()


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from tactics_engine.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "TACTICS_ENGINE_DEBUG": "true",
        "TACTICS_ENGINE_LOG_LEVEL": "DEBUG",
        "TACTICS_ENGINE_DEBUG_HOOKS": "true",
        "TACTICS_ENGINE_DICE_SEED": "42",
        "TACTICS_ENGINE_DICE_DEFAULT_DC": "15",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def settings() -> Any:
    """Create default engine settings with a fixed dice seed.

    Returns:
        Settings instance.
    """
    from tactics_engine.core.config import DiceSettings, Settings

    return Settings(dice=DiceSettings(seed=42))


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def registry() -> Any:
    """Create a hook registry populated with the bundled content hooks.

    Returns:
        HookRegistry instance.
    """
    from tactics_engine.content import build_default_registry

    return build_default_registry()


@pytest.fixture
def engine_config(settings: Any, registry: Any) -> Any:
    """Create an engine configuration with the bundled content.

    Returns:
        EngineConfig instance.
    """
    from tactics_engine.engine.runtime import build_engine_config

    return build_engine_config(settings, registry)


@pytest.fixture
def bare_config(settings: Any) -> Any:
    """Create an engine configuration with an empty hook registry.

    Returns:
        EngineConfig instance.
    """
    from tactics_engine.engine.hooks import HookRegistry
    from tactics_engine.engine.runtime import build_engine_config

    return build_engine_config(settings, HookRegistry())


@pytest.fixture
def dice_roller() -> DiceRoller:
    """Create a DiceRoller with a fixed seed for reproducible tests.

    Returns:
        DiceRoller instance with fixed seed.
    """
    return DiceRoller(seed=42)


@pytest.fixture
def scripted_roller() -> type[ScriptedRoller]:
    """Provide the scripted roller class for deterministic checks.

    Returns:
        The ScriptedRoller class.
    """
    return ScriptedRoller


# =============================================================================
# Actor Fixtures
# =============================================================================


@pytest.fixture
def hero() -> Any:
    """Create a hero with strength 4 and full standard resources.

    Returns:
        Actor instance.
    """
    from tactics_engine.models.actor import Abilities, Actor, ActorType

    return Actor(
        id="aldric",
        name="Aldric",
        actor_type=ActorType.HERO,
        abilities=Abilities(strength=4, toughness=3, dexterity=3, intellect=2),
    )


@pytest.fixture
def goblin() -> Any:
    """Create an adversary with 12 health and 10 physical defense.

    Returns:
        Actor instance.
    """
    from tactics_engine.models.actor import (
        Abilities,
        Actor,
        ActorType,
        DefenseValue,
        Defenses,
        standard_resources,
    )

    return Actor(
        id="goblin",
        name="Goblin",
        actor_type=ActorType.ADVERSARY,
        abilities=Abilities(dexterity=2),
        resources=standard_resources(health=12, morale=8),
        defenses=Defenses(armor=DefenseValue(base=6), dodge=DefenseValue(base=4), reflex=DefenseValue(base=8)),
    )
