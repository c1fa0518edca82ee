"""Action resolution: authorization, invocation and streamed results."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from typing import Any, TypeAlias

from loguru import logger

from otto.actions.registry import ActionRegistry, split_action_name
from otto.config import Settings
from otto.errors import ActionError
from otto.nlu import Body, NLUBackend, TrainingIntent
from otto.session import Session
from otto.streaming import FulfillmentChannel, is_stream, pump
from otto.transformers import ErrorTransformer
from otto.types import HANDLED_BY_GENERATOR, ActionItem, Fulfillment
from otto.utils.tasks import BackgroundTasks

TRAIN_PACKAGE = "train"

Deliver: TypeAlias = Callable[[Fulfillment, Session, dict[str, Any] | None], Awaitable[bool]]


class ActionResolver:
    """Resolve an action name found in a backend response into a fulfillment."""

    def __init__(
        self,
        settings: Settings,
        registry: ActionRegistry,
        *,
        backend: NLUBackend,
        error_transformer: ErrorTransformer,
        deliver: Deliver,
        tasks: BackgroundTasks,
    ) -> None:
        self.settings = settings
        self.registry = registry
        self.backend = backend
        self.error_transformer = error_transformer
        self._deliver = deliver
        self._tasks = tasks

    async def resolve(
        self,
        action_name: str,
        body: Body,
        session: Session,
        bag: dict[str, Any] | None = None,
    ) -> Fulfillment:
        logger.info("action.resolve name={}", action_name)
        try:
            package, _ = split_action_name(action_name)
            if package == TRAIN_PACKAGE:
                return self.train(body)

            descriptor = self.registry.resolve(action_name)
            self.registry.authorize(descriptor, session)
            result = await self.registry.invoke(descriptor, body, session, bag)

            if is_stream(result):
                self._tasks.spawn(
                    self.stream_resolver(body, result, session, bag),
                    name=f"action.stream:{descriptor.name}",
                )
                return Fulfillment(payload={HANDLED_BY_GENERATOR: True})
            return Fulfillment.from_result(result)
        except Exception as exc:
            logger.opt(exception=exc).error("action.resolve.error name={}", action_name)
            return self.error_transformer.transform(body, exc)

    def train(self, body: Body) -> Fulfillment:
        """Teach the backend the answer the user just gave to a previously unknown query."""
        query_result = body.query_result
        if not query_result.output_contexts or "queryText" not in query_result.output_contexts[0].parameters:
            raise ActionError("missing_training_context")

        intent = TrainingIntent.for_pair(
            query_text=str(query_result.output_contexts[0].parameters["queryText"]),
            answer=query_result.query_text,
            language_code=self.settings.language,
        )
        logger.debug("action.train intent={}", intent.display_name)
        self._tasks.spawn(self.backend.create_intent(intent), name="action.train")
        return Fulfillment(
            fulfillment_text=query_result.fulfillment_text,
            payload=query_result.webhook_payload,
        )

    async def stream_resolver(
        self,
        body: Body,
        source: Iterator[ActionItem] | AsyncIterator[ActionItem],
        session: Session,
        bag: dict[str, Any] | None = None,
    ) -> None:
        """Deliver every streamed item in generation order."""
        logger.info("action.stream.start session={}", session.id)
        channel = FulfillmentChannel()
        self._tasks.spawn(pump(source, channel), name="action.stream.pump")

        delivered = 0
        async for item in channel:
            if isinstance(item, Exception):
                logger.opt(exception=item).error("action.stream.error session={}", session.id)
                fulfillment = self.error_transformer.transform(body, item)
            else:
                fulfillment = item

            try:
                await self._deliver(fulfillment, session, bag)
            except Exception as exc:
                logger.opt(exception=exc).error("action.stream.deliver_error session={}", session.id)
                fulfillment = self.error_transformer.transform(body, exc)
                await self._deliver(fulfillment, session, bag)
            delivered += 1

        logger.info("action.stream.end session={} items={}", session.id, delivered)
