"""NLU backend wire models and contract."""

from __future__ import annotations

from typing import Any, Protocol, TypeAlias

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from otto.session import Session
from otto.types import EventInput, WireModel

TRAINING_DISPLAY_NAME_LIMIT = 100


class NLUModel(WireModel):
    """Lenient model for backend payloads: unknown keys are kept."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class Intent(NLUModel):
    name: str | None = None
    display_name: str | None = None
    is_fallback: bool = False


class OutputContext(NLUModel):
    name: str
    lifespan_count: int | None = None
    parameters: dict[str, Any] = {}


class QueryResult(NLUModel):
    query_text: str = ""
    language_code: str | None = None
    action: str | None = None
    parameters: dict[str, Any] = {}
    fulfillment_text: str | None = None
    fulfillment_messages: list[dict[str, Any]] = []
    webhook_payload: dict[str, Any] | None = None
    output_contexts: list[OutputContext] = []
    intent: Intent | None = None
    intent_detection_confidence: float | None = None


class WebhookStatus(NLUModel):
    code: int = 0
    message: str = ""


class DetectIntentResponse(NLUModel):
    """Response of a detect-intent round-trip."""

    response_id: str | None = None
    query_result: QueryResult = Field(default_factory=QueryResult)
    webhook_status: WebhookStatus | None = None
    output_audio: bytes | None = None

    @property
    def parsed_from_webhook(self) -> bool:
        return self.webhook_status is not None and self.webhook_status.code == 0


class OriginalDetectIntentRequest(NLUModel):
    source: str | None = None
    payload: dict[str, Any] = {}


class WebhookRequest(NLUModel):
    """Body posted by the backend to the fulfillment webhook."""

    session: str
    response_id: str | None = None
    query_result: QueryResult
    original_detect_intent_request: OriginalDetectIntentRequest | None = None

    @property
    def session_id(self) -> str:
        return self.session.rsplit("/", 1)[-1]


Body: TypeAlias = DetectIntentResponse | WebhookRequest


class TextInput(NLUModel):
    text: str
    language_code: str


class QueryInput(NLUModel):
    text: TextInput | None = None
    event: EventInput | None = None


class QueryParams(NLUModel):
    payload: dict[str, Any] = {}
    analyze_query_text_sentiment: bool = True


class DetectIntentRequest(NLUModel):
    session: str
    query_input: QueryInput
    query_params: QueryParams = Field(default_factory=QueryParams)
    output_audio_encoding: str | None = None


class TrainingIntent(NLUModel):
    """New intent teaching the backend one query/answer pair."""

    display_name: str
    language_code: str
    training_phrases: list[str]
    messages: list[str]
    webhook_enabled: bool = True

    @classmethod
    def for_pair(cls, query_text: str, answer: str, language_code: str) -> TrainingIntent:
        return cls(
            display_name=f"M-TRAIN: {query_text}"[:TRAINING_DISPLAY_NAME_LIMIT],
            language_code=language_code,
            training_phrases=[query_text],
            messages=[answer],
        )


class NLUBackend(Protocol):
    async def detect_intent(self, request: DetectIntentRequest) -> DetectIntentResponse: ...

    async def create_intent(self, intent: TrainingIntent) -> Any: ...


def session_path(project_id: str, session: Session, environment: str | None = None) -> str:
    """Backend resource path for a session."""
    session_id = session.id.replace("/", "_")
    if not environment:
        return f"projects/{project_id}/agent/sessions/{session_id}"
    return f"projects/{project_id}/agent/environments/{environment}/users/-/sessions/{session_id}"
