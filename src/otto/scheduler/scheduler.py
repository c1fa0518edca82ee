"""Time-predicate job scheduler."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from contextlib import suppress
from datetime import datetime
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.schedulers.base import BaseScheduler
from loguru import logger

from otto.config import Settings
from otto.errors import SessionNotFoundError
from otto.scheduler.jobs import Clause, Job, time_clauses
from otto.scheduler.programs import ProgramTarget, parse_program, run_program
from otto.scheduler.store import JobStore
from otto.session import SessionStore
from otto.utils.tasks import BackgroundTasks

TICK_JOB_ID = "otto.scheduler.tick"
BOOT_JOB_ID = "otto.scheduler.boot"
BOOT_CONDITIONS: tuple[Clause, ...] = (("on_boot", True),)
# ticks may overlap when the store answers slowly
MAX_OVERLAPPING_TICKS = 10


class Scheduler:
    """Poll the job store on a fixed interval and run every matching job."""

    def __init__(
        self,
        settings: Settings,
        *,
        store: JobStore,
        sessions: SessionStore,
        target: ProgramTarget,
        scheduler: BaseScheduler | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.settings = settings
        self.store = store
        self.sessions = sessions
        self.target = target
        self.scheduler = scheduler or AsyncIOScheduler()
        self.started = False
        self._clock = clock
        self._tasks = BackgroundTasks()

    async def get_jobs(self, conditions: Sequence[Clause] = ()) -> list[Job]:
        clauses = [*time_clauses(self._clock()), *conditions]
        return await self.store.find(self.settings.uid, clauses)

    async def run_job(self, job: Job) -> Any:
        logger.info(
            "scheduler.job.run id={} program={} args={} session={}",
            job.id,
            job.program_name,
            job.program_args,
            job.session_id,
        )
        try:
            program = parse_program(job)
            session = await self.sessions.get_session(job.session_id)
            if session is None:
                raise SessionNotFoundError(f"Session <{job.session_id}> not found")
            result = await run_program(program, session, self.target)
        except Exception:
            logger.exception("scheduler.job.error id={} program={}", job.id, job.program_name)
            return None
        logger.debug("scheduler.job.processed id={} result={}", job.id, result)
        return result

    async def tick(self, conditions: Sequence[Clause] = ()) -> list[asyncio.Task[Any]]:
        """Spawn every matching job; returns the spawned tasks without awaiting them."""
        try:
            jobs = await self.get_jobs(conditions)
        except Exception:
            logger.exception("scheduler.tick.error")
            return []

        logger.debug("scheduler.tick jobs={}", len(jobs))
        return [self._tasks.spawn(self.run_job(job), name=f"scheduler.job:{job.id}") for job in jobs]

    def start(self) -> None:
        """Start polling; must be called from within the running event loop."""
        if self.started:
            logger.warning("scheduler.start attempted to start an already started instance")
            return

        self.started = True
        self.scheduler.add_job(self.tick, kwargs={"conditions": BOOT_CONDITIONS}, id=BOOT_JOB_ID)
        self.scheduler.add_job(
            self.tick,
            "interval",
            seconds=self.settings.scheduler_interval_seconds,
            id=TICK_JOB_ID,
            max_instances=MAX_OVERLAPPING_TICKS,
            coalesce=False,
        )
        if not self.scheduler.running:
            self.scheduler.start()
        logger.info("scheduler.polling.started interval={}s", self.settings.scheduler_interval_seconds)

    def shutdown(self) -> None:
        if self.scheduler.running:
            with suppress(Exception):
                self.scheduler.shutdown(wait=False)
        self.started = False

    async def join(self) -> None:
        await self._tasks.join()
