"""Ordered async channel for streamed action results."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import AsyncIterator, Iterator
from typing import Any

from otto.types import ActionItem, Fulfillment

_CLOSED = object()


def is_stream(result: Any) -> bool:
    """True for lazy action results: sync or async generators and iterators."""
    if isinstance(result, (str, bytes, dict, Fulfillment)):
        return False
    return (
        inspect.isasyncgen(result)
        or inspect.isgenerator(result)
        or isinstance(result, (AsyncIterator, Iterator))
    )


class FulfillmentChannel:
    """Single-producer, single-consumer channel of fulfillments.

    The producer either closes the channel or pushes exactly one terminal error;
    the consumer receives items in the order they were sent.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._done = False

    async def send(self, item: Fulfillment) -> None:
        if self._done:
            raise RuntimeError("channel is closed")
        await self._queue.put(item)

    async def fail(self, error: Exception) -> None:
        if self._done:
            raise RuntimeError("channel is closed")
        self._done = True
        await self._queue.put(error)
        await self._queue.put(_CLOSED)

    async def close(self) -> None:
        if self._done:
            return
        self._done = True
        await self._queue.put(_CLOSED)

    async def __aiter__(self) -> AsyncIterator[Fulfillment | Exception]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item


async def pump(source: Iterator[ActionItem] | AsyncIterator[ActionItem], channel: FulfillmentChannel) -> None:
    """Drain an action result stream into ``channel``."""
    try:
        if isinstance(source, AsyncIterator):
            async for item in source:
                await channel.send(Fulfillment.from_result(item))
        else:
            for item in source:
                await channel.send(Fulfillment.from_result(item))
                # let the consumer deliver between synchronous items
                await asyncio.sleep(0)
    except Exception as exc:
        await channel.fail(exc)
    else:
        await channel.close()
