"""Explicit registry of action handlers."""

from __future__ import annotations

import inspect
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeAlias

from loguru import logger

from otto.errors import AuthorizationError, UnknownActionError
from otto.nlu import Body
from otto.session import Session
from otto.types import ActionResult

DEFAULT_ACTION = "index"

ActionHandler: TypeAlias = Callable[[Body, Session, dict[str, Any] | None], Any]


def split_action_name(name: str) -> tuple[str, str]:
    """Split ``package.action`` on the first dot; the action defaults to ``index``."""
    package, _, action = name.partition(".")
    return package, action or DEFAULT_ACTION


@dataclass(frozen=True)
class ActionDescriptor:
    """Action metadata and runtime handle."""

    package: str
    action: str
    handler: ActionHandler
    authorizations: frozenset[str] = frozenset()
    description: str = ""
    source: str = "builtin"

    @property
    def name(self) -> str:
        return f"{self.package}.{self.action}"


class ActionRegistry:
    """Registry mapping ``(package, action)`` to a handler and its required capabilities."""

    def __init__(self) -> None:
        self._actions: dict[tuple[str, str], ActionDescriptor] = {}

    def add(self, descriptor: ActionDescriptor) -> None:
        key = (descriptor.package, descriptor.action)
        if key in self._actions:
            logger.warning("action.replaced name={} source={}", descriptor.name, descriptor.source)
        self._actions[key] = descriptor

    def register(
        self,
        name: str,
        *,
        authorizations: Iterable[str] = (),
        description: str = "",
        source: str = "builtin",
    ) -> Callable[[ActionHandler], ActionHandler]:
        package, action = split_action_name(name)

        def decorator(handler: ActionHandler) -> ActionHandler:
            self.add(
                ActionDescriptor(
                    package=package,
                    action=action,
                    handler=handler,
                    authorizations=frozenset(authorizations),
                    description=description or (inspect.getdoc(handler) or "").split("\n", 1)[0],
                    source=source,
                )
            )
            return handler

        return decorator

    def has(self, name: str) -> bool:
        return split_action_name(name) in self._actions

    def get(self, name: str) -> ActionDescriptor | None:
        return self._actions.get(split_action_name(name))

    def descriptors(self) -> list[ActionDescriptor]:
        return sorted(self._actions.values(), key=lambda item: item.name)

    def resolve(self, name: str) -> ActionDescriptor:
        descriptor = self.get(name)
        if descriptor is None:
            raise UnknownActionError(name)
        return descriptor

    @staticmethod
    def authorize(descriptor: ActionDescriptor, session: Session) -> None:
        granted = session.authorizations or set()
        for capability in sorted(descriptor.authorizations):
            if capability not in granted:
                logger.warning("action.unauthorized name={} missing={}", descriptor.name, capability)
                raise AuthorizationError(capability)

    async def invoke(
        self,
        descriptor: ActionDescriptor,
        body: Body,
        session: Session,
        bag: dict[str, Any] | None = None,
    ) -> ActionResult:
        logger.info("action.call.start name={} session={}", descriptor.name, session.id)
        start = time.monotonic()
        try:
            result = descriptor.handler(body, session, bag)
            if inspect.isawaitable(result):
                result = await result
            return result
        finally:
            duration = time.monotonic() - start
            logger.info("action.call.end name={} duration={:.3f}ms", descriptor.name, duration * 1000)
