"""Action registry and resolution."""

from otto.actions.registry import ActionDescriptor, ActionRegistry, split_action_name

__all__ = ["ActionDescriptor", "ActionRegistry", "split_action_name"]
