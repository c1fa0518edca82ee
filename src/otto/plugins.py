"""Action plugin loading."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import pluggy
from loguru import logger

from otto.actions.registry import ActionRegistry
from otto.hookspecs import OTTO_HOOK_NAMESPACE, OttoHookSpecs


def build_plugin_manager(plugins: Iterable[Any] = (), *, entry_points: bool = True) -> pluggy.PluginManager:
    manager = pluggy.PluginManager(OTTO_HOOK_NAMESPACE)
    manager.add_hookspecs(OttoHookSpecs)
    for plugin in plugins:
        manager.register(plugin)
    if entry_points:
        manager.load_setuptools_entrypoints(OTTO_HOOK_NAMESPACE)
    return manager


def load_actions(
    registry: ActionRegistry,
    plugins: Iterable[Any] = (),
    *,
    entry_points: bool = True,
) -> dict[str, str]:
    """Let every plugin register its actions; returns failures keyed by plugin name."""
    manager = build_plugin_manager(plugins, entry_points=entry_points)
    failed: dict[str, str] = {}
    # Run in registration order so later plugins override earlier actions
    for impl in manager.hook.register_actions.get_hookimpls():
        try:
            impl.function(registry=registry)
        except Exception as exc:
            failed[impl.plugin_name] = str(exc)
            logger.opt(exception=True).warning("plugin.load_failed plugin={}", impl.plugin_name)
    logger.info("plugin.loaded actions={}", len(registry.descriptors()))
    return failed
