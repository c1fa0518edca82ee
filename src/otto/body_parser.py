"""Decide how a backend response turns into a fulfillment."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeAlias

from loguru import logger

from otto.actions.resolver import ActionResolver
from otto.config import Settings
from otto.nlu import Body, DetectIntentResponse, QueryResult
from otto.session import Session, SessionStore
from otto.types import ERROR, AudioBuffer, EventInput, Fulfillment, InputParams
from otto.utils.tasks import BackgroundTasks

UNHANDLED_EVENT = "ai_unhandled"
TRAINING_EVENT = "training"

Reenter: TypeAlias = Callable[[InputParams, Session], Awaitable[bool]]


def declared_payload(query_result: QueryResult) -> dict[str, Any] | None:
    """Merge the custom payloads declared on the matched intent, minus error templates."""
    merged: dict[str, Any] = dict(query_result.webhook_payload or {})
    for message in query_result.fulfillment_messages:
        payload = message.get("payload")
        if isinstance(payload, dict):
            merged.update({key: value for key, value in payload.items() if key != ERROR})
    return merged or None


class BodyParser:
    """Handle both webhook-enriched responses and raw intent matches."""

    def __init__(
        self,
        settings: Settings,
        *,
        resolver: ActionResolver,
        sessions: SessionStore,
        reenter: Reenter,
        tasks: BackgroundTasks,
    ) -> None:
        self.settings = settings
        self.resolver = resolver
        self.sessions = sessions
        self._reenter = reenter
        self._tasks = tasks

    def output_audio(self, body: Body) -> AudioBuffer | None:
        if not isinstance(body, DetectIntentResponse) or not body.output_audio:
            return None

        payload_language = (body.query_result.webhook_payload or {}).get("language")
        if payload_language and payload_language != self.settings.language:
            logger.warning("body_parser.audio_dropped voice_language={}", payload_language)
            return None

        return AudioBuffer(buffer=body.output_audio, extension=self.settings.audio_extension)

    def webhook_response_to_fulfillment(self, body: DetectIntentResponse) -> Fulfillment:
        status = body.webhook_status
        if status is not None and status.code > 0:
            return Fulfillment(payload={ERROR: {"message": status.message, "code": status.code}})

        return Fulfillment(
            fulfillment_text=body.query_result.fulfillment_text,
            audio=self.output_audio(body),
            payload=body.query_result.webhook_payload,
        )

    async def parse(self, body: Body, session: Session, bag: dict[str, Any] | None = None) -> Fulfillment:
        parsed_from_webhook = isinstance(body, DetectIntentResponse) and body.parsed_from_webhook

        if self.settings.mimic_offline_server:
            logger.warning("body_parser.mimic_offline_server enabled, ignoring webhook response")
        elif isinstance(body, DetectIntentResponse) and body.webhook_status is not None:
            logger.debug("body_parser.webhook code={}", body.webhook_status.code)
            return self.webhook_response_to_fulfillment(body)

        query_result = body.query_result
        logger.debug("body_parser.raw action={} intent={}", query_result.action, query_result.intent)

        if query_result.action:
            return await self.resolver.resolve(query_result.action, body, session, bag)

        if query_result.intent is not None:
            if query_result.intent.is_fallback:
                self._tasks.spawn(self.request_training(query_result.query_text), name="body_parser.training")

            return Fulfillment(
                fulfillment_text=query_result.fulfillment_text,
                audio=self.output_audio(body) if parsed_from_webhook else None,
                payload=declared_payload(query_result),
            )

        logger.info("body_parser.unhandled using {} follow-up event", UNHANDLED_EVENT)
        return Fulfillment(followup_event_input=EventInput(name=UNHANDLED_EVENT))

    async def request_training(self, query_text: str) -> bool:
        """Ask the training session how the unmatched query should be answered."""
        if not self.settings.training_session_id:
            logger.debug("body_parser.training skipped: no training session configured")
            return False

        training_session = await self.sessions.get_session(self.settings.training_session_id)
        if training_session is None:
            logger.warning("body_parser.training skipped: session {} not found", self.settings.training_session_id)
            return False

        logger.info("body_parser.training query={}", query_text)
        return await self._reenter(
            InputParams(event=EventInput(name=TRAINING_EVENT, parameters={"queryText": query_text})),
            training_session,
        )
