"""Pluggy hook namespace and action plugin specifications."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from otto.actions.registry import ActionRegistry

OTTO_HOOK_NAMESPACE = "otto"
hookspec = pluggy.HookspecMarker(OTTO_HOOK_NAMESPACE)
hookimpl = pluggy.HookimplMarker(OTTO_HOOK_NAMESPACE)


class OttoHookSpecs:
    """Hook contract for action packages."""

    @hookspec
    def register_actions(self, registry: ActionRegistry) -> None:
        """Register action handlers onto the registry."""
