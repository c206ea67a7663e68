"""Runtime configuration object shared by the engine components.

``EngineConfig`` is built once at startup and passed by reference to the
lifecycle runner and the combat round controller. Neither component reads
settings or hook tables from module globals.
"""

from __future__ import annotations

from dataclasses import dataclass

from tactics_engine.core.config import CombatSettings, DiceSettings, Settings, get_settings
from tactics_engine.core.logging import configure_logging, get_logger
from tactics_engine.engine.dice import DiceRoller
from tactics_engine.engine.hooks import HookRegistry


logger = get_logger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    """Settings and hook registry for one engine instance.

    Attributes:
        settings: Loaded engine settings.
        registry: Hook registry populated with content hooks.
    """

    settings: Settings
    registry: HookRegistry

    @property
    def dice(self) -> DiceSettings:
        return self.settings.dice

    @property
    def combat(self) -> CombatSettings:
        return self.settings.combat

    @property
    def debug_hooks(self) -> bool:
        return self.settings.debug_hooks

    def create_roller(self) -> DiceRoller:
        """Create a dice roller using the configured seed and thresholds."""
        return DiceRoller(
            seed=self.dice.seed,
            critical_success_threshold=self.dice.critical_success_threshold,
            critical_failure_threshold=self.dice.critical_failure_threshold,
        )


def build_engine_config(
    settings: Settings | None = None,
    registry: HookRegistry | None = None,
    *,
    include_content: bool = True,
    configure_logs: bool = False,
) -> EngineConfig:
    """Build the engine configuration.

    Args:
        settings: Settings to use; loaded with ``get_settings`` when omitted.
        registry: Hook registry to use; a new one is created when omitted.
        include_content: Register the bundled action, tag and talent hooks into
            a newly created registry.
        configure_logs: Apply the configured log level and format through
            ``configure_logging`` before anything is logged.

    Returns:
        The EngineConfig.
    """
    if settings is None:
        settings = get_settings()
    if configure_logs:
        configure_logging(level=settings.log_level, json_format=settings.json_logs)
    if registry is None:
        if include_content:
            from tactics_engine.content import build_default_registry

            registry = build_default_registry()
        else:
            registry = HookRegistry()

    logger.info(
        "Engine configured",
        hook_sets=len(registry),
        default_dc=settings.dice.default_dc,
        seed=settings.dice.seed,
    )
    return EngineConfig(settings=settings, registry=registry)


__all__ = [
    "EngineConfig",
    "build_engine_config",
]
