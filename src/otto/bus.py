"""Signal-based input bus between channel adapters and the orchestrator."""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any

from blinker import Signal

from otto.session import Session
from otto.types import InputParams


@dataclass(frozen=True)
class InboundInput:
    """Input received from an external channel."""

    session: Session
    params: InputParams


InputHandler = Callable[[InboundInput], Coroutine[Any, Any, Any]]


class InputBus:
    """In-process input bus backed by a blinker signal."""

    def __init__(self) -> None:
        self._input = Signal("otto.input")

    async def publish(self, session: Session, params: InputParams) -> None:
        await self._input.send_async(self, message=InboundInput(session=session, params=params))

    def on_input(self, handler: InputHandler) -> Callable[[], None]:
        async def _receiver(sender: Any, *, message: InboundInput) -> None:
            await handler(message)

        self._input.connect(_receiver, weak=False)
        return lambda: self._input.disconnect(_receiver)
