from __future__ import annotations

import asyncio

import pytest

from otto.utils.tasks import BackgroundTasks


@pytest.mark.asyncio
async def test_join_waits_for_nested_tasks() -> None:
    tasks = BackgroundTasks()
    done: list[str] = []

    async def _inner() -> None:
        await asyncio.sleep(0)
        done.append("inner")

    async def _outer() -> None:
        tasks.spawn(_inner(), name="inner")
        done.append("outer")

    tasks.spawn(_outer(), name="outer")
    await tasks.join()

    assert done == ["outer", "inner"]
    assert len(tasks) == 0


@pytest.mark.asyncio
async def test_failed_task_is_logged(monkeypatch: pytest.MonkeyPatch) -> None:
    logged: list[str] = []

    class _Opt:
        def error(self, message: str, *args: object) -> None:
            logged.append(message.format(*args))

    monkeypatch.setattr("otto.utils.tasks.logger.opt", lambda **kwargs: _Opt())
    tasks = BackgroundTasks()

    async def _boom() -> None:
        raise RuntimeError("boom")

    tasks.spawn(_boom(), name="boom")
    await tasks.join()

    assert logged == ["task.failed name=boom"]
