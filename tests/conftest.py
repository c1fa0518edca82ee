from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from otto.actions.registry import ActionRegistry
from otto.config import Settings
from otto.nlu import DetectIntentRequest, DetectIntentResponse, TrainingIntent
from otto.orchestrator import Orchestrator
from otto.services import Language
from otto.session import InMemorySessionStore, Session
from otto.types import Fulfillment


class FakeBackend:
    def __init__(self, *responses: DetectIntentResponse | dict[str, Any]) -> None:
        self.responses = [
            item if isinstance(item, DetectIntentResponse) else DetectIntentResponse.model_validate(item)
            for item in responses
        ]
        self.requests: list[DetectIntentRequest] = []
        self.intents: list[TrainingIntent] = []

    def queue(self, response: DetectIntentResponse | dict[str, Any]) -> None:
        if not isinstance(response, DetectIntentResponse):
            response = DetectIntentResponse.model_validate(response)
        self.responses.append(response)

    async def detect_intent(self, request: DetectIntentRequest) -> DetectIntentResponse:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"unexpected detect_intent: {request.query_input}")
        return self.responses.pop(0)

    async def create_intent(self, intent: TrainingIntent) -> Any:
        self.intents.append(intent)
        return {"name": intent.display_name}


class FakeTranslator:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str]] = []

    async def translate(self, text: str, to_language: str, from_language: str) -> str:
        self.calls.append((text, to_language, from_language))
        return f"[{from_language}->{to_language}] {text}"

    async def get_languages(self, target: str) -> list[Language]:
        return [Language(code="it", name="Italian"), Language(code="de", name="German")]


class RecordingOutput:
    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.delivered: list[tuple[Fulfillment, Session, dict[str, Any] | None]] = []

    async def output(self, fulfillment: Fulfillment, session: Session, bag: dict[str, Any] | None = None) -> bool:
        self.delivered.append((fulfillment, session, bag))
        return self.result

    @property
    def texts(self) -> list[str | None]:
        return [fulfillment.fulfillment_text for fulfillment, _, _ in self.delivered]


class RecordingInputLog:
    def __init__(self) -> None:
        self.records: list[tuple[Session, Any]] = []

    async def write(self, session: Session, params: Any) -> None:
        self.records.append((session, params))


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        uid="otto-test",
        language="en",
        nlu_project_id="project",
        home=tmp_path,
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def translator() -> FakeTranslator:
    return FakeTranslator()


@pytest.fixture
def output() -> RecordingOutput:
    return RecordingOutput()


@pytest.fixture
def sessions() -> InMemorySessionStore:
    return InMemorySessionStore("en")


@pytest.fixture
def session(sessions: InMemorySessionStore) -> Session:
    return sessions.add(Session(id="s1", channel="test"))


@pytest.fixture
def registry() -> ActionRegistry:
    return ActionRegistry()


@pytest.fixture
def orchestrator(
    settings: Settings,
    backend: FakeBackend,
    registry: ActionRegistry,
    sessions: InMemorySessionStore,
    output: RecordingOutput,
    translator: FakeTranslator,
) -> Orchestrator:
    return Orchestrator(
        settings,
        backend=backend,
        actions=registry,
        sessions=sessions,
        output=output,
        translator=translator,
    )


@pytest.fixture
def input_log() -> RecordingInputLog:
    return RecordingInputLog()
