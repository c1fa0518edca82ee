from __future__ import annotations

import pytest

from otto.session import Session
from otto.webhook import ERR_EMPTY_BODY, ERR_INVALID_BODY, WEBHOOK_CHANNEL, WebhookEndpoint


def _webhook_body(**query_result) -> dict:
    return {
        "session": "projects/project/agent/sessions/web-1",
        "responseId": "r-1",
        "queryResult": {
            "queryText": "what time is it",
            "outputContexts": [{"name": "projects/project/agent/sessions/web-1/contexts/clock", "lifespanCount": 2}],
            **query_result,
        },
        "originalDetectIntentRequest": {"source": "otto", "payload": {"device": "kitchen"}},
    }


@pytest.mark.asyncio
async def test_empty_body_is_rejected(orchestrator) -> None:
    status, body = await WebhookEndpoint(orchestrator).handle({})

    assert status == 400
    assert body == {"error": ERR_EMPTY_BODY}


@pytest.mark.asyncio
async def test_invalid_body_is_rejected(orchestrator) -> None:
    status, body = await WebhookEndpoint(orchestrator).handle({"queryResult": {}})

    assert status == 400
    assert body == {"error": ERR_INVALID_BODY}


@pytest.mark.asyncio
async def test_webhook_resolves_action_for_new_session(orchestrator, registry, sessions) -> None:
    seen: dict = {}

    @registry.register("clock.now")
    def now(body, session, bag):
        seen["session"] = session
        seen["bag"] = bag
        return "It is noon"

    status, body = await WebhookEndpoint(orchestrator).handle(_webhook_body(action="clock.now"))

    assert status == 200
    assert body["fulfillmentText"] == "It is noon"
    assert body["payload"]["transformerUid"] == "otto-test"
    assert body["outputContexts"] == [
        {"name": "projects/project/agent/sessions/web-1/contexts/clock", "lifespanCount": 2, "parameters": {}}
    ]
    assert seen["bag"] == {"device": "kitchen"}
    assert seen["session"].channel == WEBHOOK_CHANNEL
    assert await sessions.get_session("web-1") is seen["session"]


@pytest.mark.asyncio
async def test_webhook_uses_existing_session_language(orchestrator, registry, sessions) -> None:
    sessions.add(Session(id="web-1", translate_to="it"))

    @registry.register("clock.now")
    def now(body, session, bag):
        return "It is noon"

    status, body = await WebhookEndpoint(orchestrator).handle(_webhook_body(action="clock.now"))

    assert status == 200
    assert body["fulfillmentText"] == "[en->it] It is noon"
    assert body["payload"]["translatedTo"] == "it"


@pytest.mark.asyncio
async def test_webhook_reports_action_errors(orchestrator, registry) -> None:
    @registry.register("door.open", authorizations=["admin"])
    def open_door(body, session, bag):
        raise AssertionError("must not run")

    status, body = await WebhookEndpoint(orchestrator).handle(
        _webhook_body(
            action="door.open",
            fulfillmentMessages=[{"payload": {"error": {"missing_authorization": "Only $authorization can"}}}],
        )
    )

    assert status == 200
    assert body["fulfillmentText"] == "Only admin can"
    assert body["payload"]["error"]["message"] == "missing_authorization"


@pytest.mark.asyncio
async def test_translation_failure_still_answers(orchestrator, registry, sessions, translator, monkeypatch) -> None:
    sessions.add(Session(id="web-1", translate_to="it"))

    async def _broken(text: str, to_language: str, from_language: str) -> str:
        raise ConnectionError("translator down")

    monkeypatch.setattr(translator, "translate", _broken)

    @registry.register("clock.now")
    def now(body, session, bag):
        return "It is noon"

    status, body = await WebhookEndpoint(orchestrator).handle(_webhook_body(action="clock.now"))

    assert status == 200
    assert body["fulfillmentText"] == "translator down"
    assert body["payload"]["error"] == {"message": "translator down", "type": "ConnectionError"}
    assert body["outputContexts"][0]["lifespanCount"] == 2
