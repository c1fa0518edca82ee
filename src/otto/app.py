"""Runtime wiring."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from otto.actions.builtin import BuiltinActions
from otto.actions.registry import ActionRegistry
from otto.bus import InputBus
from otto.channels import InputLog, JSONLInputLog, OutputSink
from otto.config import Settings, load_settings
from otto.nlu import NLUBackend
from otto.orchestrator import Orchestrator
from otto.plugins import load_actions
from otto.scheduler import JobStore, JSONJobStore, Scheduler
from otto.services import SpeechRecognizer, Translator
from otto.session import InMemorySessionStore, SessionStore
from otto.webhook import WebhookEndpoint


@dataclass
class Runtime:
    """Every long-lived component of one Otto instance."""

    settings: Settings
    actions: ActionRegistry
    orchestrator: Orchestrator
    scheduler: Scheduler
    webhook: WebhookEndpoint
    bus: InputBus

    async def start(self) -> None:
        self.scheduler.start()

    async def stop(self) -> None:
        self.scheduler.shutdown()
        await self.scheduler.join()
        await self.orchestrator.join()


def build_runtime(
    *,
    backend: NLUBackend,
    translator: Translator,
    output: OutputSink,
    settings: Settings | None = None,
    sessions: SessionStore | None = None,
    recognizer: SpeechRecognizer | None = None,
    input_log: InputLog | None = None,
    job_store: JobStore | None = None,
    plugins: Iterable[Any] = (),
    entry_points: bool = True,
) -> Runtime:
    """Build a runtime, filling unspecified collaborators with the local defaults."""
    settings = settings or load_settings()
    sessions = sessions or InMemorySessionStore(settings.language)

    actions = ActionRegistry()
    load_actions(actions, [BuiltinActions(settings, translator), *plugins], entry_points=entry_points)

    orchestrator = Orchestrator(
        settings,
        backend=backend,
        actions=actions,
        sessions=sessions,
        output=output,
        translator=translator,
        recognizer=recognizer,
        input_log=input_log or JSONLInputLog(settings.resolve_input_log_path()),
    )
    scheduler = Scheduler(
        settings,
        store=job_store or JSONJobStore(settings.resolve_jobs_path()),
        sessions=sessions,
        target=orchestrator,
    )
    bus = InputBus()
    orchestrator.attach(bus)
    return Runtime(
        settings=settings,
        actions=actions,
        orchestrator=orchestrator,
        scheduler=scheduler,
        webhook=WebhookEndpoint(orchestrator),
        bus=bus,
    )
