"""Application-level exception types for Otto."""

from __future__ import annotations

from typing import Any


class OttoError(Exception):
    """Base exception for Otto."""


class ConfigurationError(OttoError):
    """Raised when a required collaborator or setting is missing."""


class InvalidInputError(OttoError, ValueError):
    """Raised when an input carries no variant, or more than one."""


class ActionError(OttoError):
    """Error raised by an action handler.

    ``message`` doubles as the lookup key for localized error templates declared
    on the matched intent, so handlers should use short snake_case codes.
    """

    def __init__(self, message: str, *, data: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.data = data or {}


class UnknownActionError(ActionError):
    """Raised when no handler is registered for an action name."""

    def __init__(self, action_name: str) -> None:
        super().__init__("unknown_action", data={"action": action_name})


class AuthorizationError(ActionError):
    """Raised when the session lacks a capability the action requires."""

    def __init__(self, capability: str) -> None:
        super().__init__("missing_authorization", data={"authorization": capability})


class ProgramNotFoundError(OttoError):
    """Raised when a job names a scheduler program that does not exist."""


class SessionNotFoundError(OttoError):
    """Raised when a job's owning session cannot be loaded."""


def message_of(error: BaseException) -> str:
    if isinstance(error, ActionError):
        return error.message
    return str(error)


def error_payload(error: BaseException) -> dict[str, Any]:
    """Render an error as the JSON-friendly mapping stored under ``payload.error``."""
    payload: dict[str, Any] = {"message": message_of(error), "type": type(error).__name__}
    data = getattr(error, "data", None)
    if data:
        payload["data"] = data
    return payload
