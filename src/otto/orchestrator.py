"""Request/response orchestration for every input channel."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

from loguru import logger

from otto.actions.registry import ActionRegistry
from otto.actions.resolver import ActionResolver
from otto.body_parser import BodyParser
from otto.bus import InboundInput, InputBus
from otto.channels import InputLog, OutputSink
from otto.config import Settings
from otto.errors import ConfigurationError, InvalidInputError
from otto.nlu import DetectIntentRequest, DetectIntentResponse, NLUBackend, QueryInput, QueryParams, TextInput, session_path
from otto.services import SpeechRecognizer, Translator
from otto.session import Session, SessionStore, get_locale
from otto.transformers import ErrorTransformer, FulfillmentTransformer
from otto.types import EventInput, Fulfillment, InputParams
from otto.utils.tasks import BackgroundTasks


class Orchestrator:
    """Resolve inputs into fulfillments and deliver them to the originating session."""

    def __init__(
        self,
        settings: Settings,
        *,
        backend: NLUBackend,
        actions: ActionRegistry,
        sessions: SessionStore,
        output: OutputSink,
        translator: Translator,
        recognizer: SpeechRecognizer | None = None,
        input_log: InputLog | None = None,
    ) -> None:
        self.settings = settings
        self.backend = backend
        self.sessions = sessions
        self.output = output
        self.translator = translator
        self.recognizer = recognizer
        self.input_log = input_log
        self.tasks = BackgroundTasks()
        self.transformer = FulfillmentTransformer(settings, translator)
        self.error_transformer = ErrorTransformer()
        self.resolver = ActionResolver(
            settings,
            actions,
            backend=backend,
            error_transformer=self.error_transformer,
            deliver=self.deliver,
            tasks=self.tasks,
        )
        self.body_parser = BodyParser(
            settings,
            resolver=self.resolver,
            sessions=sessions,
            reenter=self.process_input,
            tasks=self.tasks,
        )

    async def text_request_transformer(self, text: str, session: Session) -> TextInput:
        """Bring user text into the language the backend is trained in."""
        if session.translate_to != self.settings.language:
            text = await self.translator.translate(
                text,
                to_language=self.settings.language,
                from_language=session.translate_to,
            )
        return TextInput(text=text, language_code=self.settings.language)

    async def event_request_transformer(self, event: str | EventInput, session: Session) -> EventInput:
        if isinstance(event, str):
            return EventInput(name=event, language_code=self.settings.language)
        return EventInput(name=event.name, parameters=dict(event.parameters), language_code=self.settings.language)

    async def request(
        self,
        query_input: QueryInput,
        session: Session,
        bag: dict[str, Any] | None = None,
    ) -> DetectIntentResponse:
        request = DetectIntentRequest(
            session=session_path(self.settings.nlu_project_id, session, self.settings.nlu_environment),
            query_input=query_input,
            query_params=QueryParams(payload=dict((bag or {}).get("encodable") or {})),
            output_audio_encoding=f"OUTPUT_AUDIO_ENCODING_{self.settings.audio_encoding}",
        )
        response = await self.backend.detect_intent(request)
        logger.debug("orchestrator.detect_intent session={} response_id={}", request.session, response.response_id)
        return response

    async def text_request(self, text: str, session: Session, bag: dict[str, Any] | None = None) -> Fulfillment:
        logger.info("orchestrator.text_request text={}", text)
        query_input = QueryInput(text=await self.text_request_transformer(text, session))
        response = await self.request(query_input, session, bag)
        return await self.body_parser.parse(response, session, bag)

    async def event_request(
        self,
        event: str | EventInput,
        session: Session,
        bag: dict[str, Any] | None = None,
    ) -> Fulfillment:
        logger.info("orchestrator.event_request event={}", event)
        query_input = QueryInput(event=await self.event_request_transformer(event, session))
        response = await self.request(query_input, session, bag)
        return await self.body_parser.parse(response, session, bag)

    async def audio_request(
        self,
        audio: Path | bytes,
        session: Session,
        bag: dict[str, Any] | None = None,
    ) -> Fulfillment:
        if self.recognizer is None:
            raise ConfigurationError("audio input received but no speech recognizer is configured")
        text = await self.recognizer.recognize(audio, get_locale(session.translate_from))
        logger.info("orchestrator.audio_request recognized={}", text)
        return await self.text_request(text, session, bag)

    async def deliver(self, fulfillment: Fulfillment, session: Session, bag: dict[str, Any] | None = None) -> bool:
        """Transform a fulfillment for ``session`` and hand it to the output sink."""
        fulfillment = await self.transformer.transform(fulfillment, session)
        return await self.output.output(fulfillment, session, bag)

    async def follow_up(self, fulfillment: Fulfillment, session: Session, bag: dict[str, Any] | None = None) -> Fulfillment:
        """Issue the follow-up event of a textless fulfillment, once."""
        if fulfillment.fulfillment_text or fulfillment.followup_event_input is None:
            return fulfillment

        followed = await self.event_request(fulfillment.followup_event_input, session, bag)
        if followed.followup_event_input is not None:
            logger.warning(
                "orchestrator.follow_up dropped nested follow-up event={}", followed.followup_event_input.name
            )
            followed = followed.model_copy(update={"followup_event_input": None})
        return followed

    async def process_input(self, params: InputParams, session: Session) -> bool:
        with logger.contextualize(session=session.id):
            logger.info("orchestrator.process_input variant={}", params.variant)

            if session.repeat_mode_session is not None and params.text:
                target = session.repeat_mode_session
                logger.info("orchestrator.repeat_mode target={}", target.id)
                return await self.deliver(Fulfillment(fulfillment_text=params.text), target, params.bag)

            if params.variant is None:
                logger.warning("orchestrator.process_input none of text, event, audio, answer is set")
                fulfillment = self.error_transformer.transform(None, InvalidInputError("invalid_input"))
                return await self.deliver(fulfillment, session, params.bag)

            if self.input_log is not None:
                self.tasks.spawn(self.input_log.write(session, params), name="orchestrator.input_log")

            if params.text:
                fulfillment = await self.text_request(params.text, session, params.bag)
            elif params.event:
                fulfillment = await self.event_request(params.event, session, params.bag)
            elif params.audio:
                fulfillment = await self.audio_request(params.audio, session, params.bag)
            else:
                fulfillment = Fulfillment(fulfillment_text=params.answer)

            fulfillment = await self.follow_up(fulfillment, session, params.bag)
            if fulfillment.handled_by_generator:
                # streamed items are delivered one by one as they are produced
                return True
            return await self.deliver(fulfillment, session, params.bag)

    def attach(self, bus: InputBus) -> Callable[[], None]:
        """Process every input published on ``bus``."""

        async def _handle(message: InboundInput) -> None:
            await self.process_input(message.params, message.session)

        return bus.on_input(_handle)

    async def join(self) -> None:
        await self.tasks.join()
