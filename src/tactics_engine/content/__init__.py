"""Bundled game content: standard actions, action tags and talent hooks.

Example:
    >>> from tactics_engine.content import build_default_registry
    >>> registry = build_default_registry()
    >>> "blood_magic" in registry
    True
"""

from __future__ import annotations

from tactics_engine.content.actions import ACTION_HOOKS, STANDARD_ACTIONS
from tactics_engine.content.tags import TAG_HOOKS
from tactics_engine.content.talents import TALENT_HOOKS
from tactics_engine.engine.hooks import HookRegistry, tag_hook_id


def build_default_registry(registry: HookRegistry | None = None) -> HookRegistry:
    """Register the bundled action, tag and talent hooks.

    Args:
        registry: Registry to populate; a new one is created when omitted.

    Returns:
        The populated registry.
    """
    if registry is None:
        registry = HookRegistry()
    for tag, hook_set in TAG_HOOKS.items():
        registry.register(tag_hook_id(tag), hook_set)
    for hook_id, hook_set in ACTION_HOOKS.items():
        registry.register(hook_id, hook_set)
    for hook_id, hook_set in TALENT_HOOKS.items():
        registry.register(hook_id, hook_set)
    return registry


__all__ = [
    "ACTION_HOOKS",
    "STANDARD_ACTIONS",
    "TAG_HOOKS",
    "TALENT_HOOKS",
    "build_default_registry",
]
