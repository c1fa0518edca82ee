from __future__ import annotations

import pytest

from otto.actions.registry import ActionRegistry, split_action_name
from otto.errors import AuthorizationError, UnknownActionError
from otto.nlu import DetectIntentResponse
from otto.session import Session


def test_split_action_name_defaults_to_index() -> None:
    assert split_action_name("weather") == ("weather", "index")
    assert split_action_name("weather.today") == ("weather", "today")
    assert split_action_name("a.b.c") == ("a", "b.c")


def test_register_uses_docstring_as_description() -> None:
    registry = ActionRegistry()

    @registry.register("greet", authorizations=["chat"])
    def greet(body, session, bag):
        """Say hello.

        Longer text.
        """
        return "hi"

    descriptor = registry.get("greet.index")
    assert descriptor is not None
    assert descriptor.description == "Say hello."
    assert descriptor.authorizations == frozenset({"chat"})
    assert registry.has("greet")


def test_resolve_unknown_action_raises() -> None:
    with pytest.raises(UnknownActionError) as exc_info:
        ActionRegistry().resolve("missing.action")

    assert exc_info.value.message == "unknown_action"
    assert exc_info.value.data == {"action": "missing.action"}


def test_authorize_reports_first_missing_capability() -> None:
    registry = ActionRegistry()

    @registry.register("door.open", authorizations=["home", "admin"])
    def open_door(body, session, bag):
        return "opened"

    descriptor = registry.resolve("door.open")
    with pytest.raises(AuthorizationError) as exc_info:
        registry.authorize(descriptor, Session(id="s1", authorizations={"home"}))
    assert exc_info.value.data == {"authorization": "admin"}

    registry.authorize(descriptor, Session(id="s2", authorizations={"home", "admin"}))


@pytest.mark.asyncio
async def test_invoke_awaits_async_handlers_and_logs(monkeypatch) -> None:
    logs: list[str] = []

    def _capture(message: str, *args: object) -> None:
        logs.append(message)

    monkeypatch.setattr("otto.actions.registry.logger.info", _capture)

    registry = ActionRegistry()

    @registry.register("echo")
    async def echo(body, session, bag):
        return body.query_result.query_text

    body = DetectIntentResponse.model_validate({"queryResult": {"queryText": "ping"}})
    result = await registry.invoke(registry.resolve("echo"), body, Session(id="s1"))

    assert result == "ping"
    assert logs.count("action.call.start name={} session={}") == 1
    assert logs.count("action.call.end name={} duration={:.3f}ms") == 1


def test_add_replaces_existing_action() -> None:
    registry = ActionRegistry()

    @registry.register("dup")
    def first(body, session, bag):
        return 1

    @registry.register("dup", source="plugin")
    def second(body, session, bag):
        return 2

    descriptor = registry.resolve("dup")
    assert descriptor.handler is second
    assert descriptor.source == "plugin"
    assert [item.name for item in registry.descriptors()] == ["dup.index"]
