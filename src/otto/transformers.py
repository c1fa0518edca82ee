"""Fulfillment and error transformers."""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping
from string import Template
from typing import Any

from loguru import logger

from otto.config import Settings
from otto.errors import error_payload, message_of
from otto.nlu import Body
from otto.services import Translator
from otto.session import Session
from otto.types import ERROR, TRANSFORMED_AT, TRANSFORMER_UID, TRANSLATE_FROM, TRANSLATED_TO, Fulfillment


def find_error_template(messages: Iterable[Mapping[str, Any]], code: str) -> str | None:
    """Find the localized template declared for an error code.

    Intents declare templates as custom payload messages shaped like
    ``{"payload": {"error": {"<code>": "<template>"}}}``.
    """
    for message in messages:
        payload = message.get("payload")
        if not isinstance(payload, Mapping):
            continue
        templates = payload.get(ERROR)
        if isinstance(templates, Mapping) and templates.get(code):
            return str(templates[code])
    return None


def render_template(template: str, data: Mapping[str, Any]) -> str:
    return Template(template).safe_substitute({key: str(value) for key, value in data.items()})


def humanize(message: str) -> str:
    return message.replace("_", " ")


class FulfillmentTransformer:
    """Translate a fulfillment into the session language and stamp its provenance."""

    def __init__(self, settings: Settings, translator: Translator) -> None:
        self.settings = settings
        self.translator = translator

    async def transform(self, fulfillment: Fulfillment, session: Session) -> Fulfillment:
        if fulfillment.transformed:
            return fulfillment

        fulfillment = fulfillment.model_copy(deep=True)
        payload = fulfillment.payload = dict(fulfillment.payload or {})

        if fulfillment.fulfillment_text:
            if session.translate_to != self.settings.language:
                fulfillment.fulfillment_text = await self.translator.translate(
                    fulfillment.fulfillment_text,
                    to_language=session.translate_to,
                    from_language=self.settings.language,
                )
                payload[TRANSLATED_TO] = session.translate_to
            elif payload.get(TRANSLATE_FROM):
                fulfillment.fulfillment_text = await self.translator.translate(
                    fulfillment.fulfillment_text,
                    to_language=session.translate_to,
                    from_language=payload[TRANSLATE_FROM],
                )
                payload[TRANSLATED_TO] = session.translate_to

        payload[TRANSFORMER_UID] = self.settings.uid
        payload[TRANSFORMED_AT] = int(time.time() * 1000)
        return fulfillment


class ErrorTransformer:
    """Turn an exception into a fulfillment, preferring a localized template."""

    def transform(self, body: Body | None, error: BaseException) -> Fulfillment:
        message = message_of(error)
        text: str | None = None
        if message:
            template = None
            if body is not None:
                template = find_error_template(body.query_result.fulfillment_messages, message)
            if template is not None:
                data = getattr(error, "data", None)
                text = render_template(template, data) if data else template
            else:
                text = humanize(message)
        logger.debug("error_transformer.transform type={} message={}", type(error).__name__, message)
        return Fulfillment(fulfillment_text=text, payload={ERROR: error_payload(error)})
