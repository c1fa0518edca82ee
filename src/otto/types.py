"""Core data types shared by the orchestration pipeline."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from otto.errors import InvalidInputError

# Payload keys written by the pipeline
TRANSFORMER_UID = "transformerUid"
TRANSFORMED_AT = "transformedAt"
TRANSLATED_TO = "translatedTo"
TRANSLATE_FROM = "translateFrom"
HANDLED_BY_GENERATOR = "handledByGenerator"
ERROR = "error"


class WireModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class EventInput(WireModel):
    name: str
    parameters: dict[str, Any] = {}
    language_code: str | None = None


class AudioBuffer(WireModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, ser_json_bytes="base64", val_json_bytes="base64"
    )

    buffer: bytes
    extension: str


class Fulfillment(WireModel):
    """Normalized response handed to an output channel."""

    fulfillment_text: str | None = None
    audio: AudioBuffer | None = None
    payload: dict[str, Any] | None = None
    followup_event_input: EventInput | None = None
    output_contexts: list[dict[str, Any]] | None = None

    @property
    def transformed(self) -> bool:
        return bool(self.payload and self.payload.get(TRANSFORMER_UID))

    @property
    def handled_by_generator(self) -> bool:
        return bool(self.payload and self.payload.get(HANDLED_BY_GENERATOR))

    @property
    def error(self) -> dict[str, Any] | None:
        if not self.payload:
            return None
        return self.payload.get(ERROR)

    @classmethod
    def from_result(cls, result: str | Fulfillment | Mapping[str, Any] | None) -> Fulfillment:
        """Normalize a single action result."""
        if result is None:
            return cls()
        if isinstance(result, Fulfillment):
            return result
        if isinstance(result, str):
            return cls(fulfillment_text=result)
        return cls.model_validate(dict(result))


ActionItem: TypeAlias = str | Fulfillment | Mapping[str, Any]
ActionResult: TypeAlias = ActionItem | Iterator[ActionItem] | AsyncIterator[ActionItem] | None


@dataclass(frozen=True)
class InputParams:
    """One input from a channel: exactly one of text, event, audio or answer."""

    text: str | None = None
    event: str | EventInput | None = None
    audio: Path | bytes | None = None
    answer: str | None = None
    bag: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        populated = [name for name in ("text", "event", "audio", "answer") if getattr(self, name)]
        if len(populated) > 1:
            raise InvalidInputError(f"only one input variant allowed, got: {', '.join(populated)}")

    @property
    def variant(self) -> str | None:
        for name in ("text", "event", "audio", "answer"):
            if getattr(self, name):
                return name
        return None
