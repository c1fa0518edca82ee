"""Framework-neutral handler for the backend fulfillment webhook."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import ValidationError

from otto.nlu import WebhookRequest
from otto.orchestrator import Orchestrator

ERR_EMPTY_BODY = "ERR_EMPTY_BODY"
ERR_INVALID_BODY = "ERR_INVALID_BODY"
WEBHOOK_CHANNEL = "webhook"


class WebhookEndpoint:
    """Resolve ``POST /fulfillment`` bodies; mount ``handle`` on any HTTP router."""

    def __init__(self, orchestrator: Orchestrator) -> None:
        self.orchestrator = orchestrator

    async def handle(self, body: Mapping[str, Any] | None) -> tuple[int, dict[str, Any]]:
        logger.info("webhook.request received")
        if not body:
            return 400, {"error": ERR_EMPTY_BODY}

        try:
            request = WebhookRequest.model_validate(dict(body))
        except ValidationError as exc:
            logger.warning("webhook.invalid_body errors={}", exc.error_count())
            return 400, {"error": ERR_INVALID_BODY}

        sessions = self.orchestrator.sessions
        session = await sessions.get_session(request.session_id)
        if session is None:
            session = await sessions.register_session(WEBHOOK_CHANNEL, request.session_id)

        bag = request.original_detect_intent_request.payload if request.original_detect_intent_request else None
        with logger.contextualize(session=session.id):
            try:
                fulfillment = await self.orchestrator.body_parser.parse(request, session, bag)
                fulfillment = await self.orchestrator.transformer.transform(fulfillment, session)
            except Exception as exc:
                logger.opt(exception=exc).error("webhook.error session={}", session.id)
                fulfillment = self.orchestrator.error_transformer.transform(request, exc)
            fulfillment.output_contexts = [context.to_json() for context in request.query_result.output_contexts]
            logger.info("webhook.response text={}", fulfillment.fulfillment_text)

        return 200, fulfillment.to_json()
