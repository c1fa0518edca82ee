"""Job persistence consumed by the scheduler."""

from __future__ import annotations

import asyncio
import json
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from loguru import logger
from pydantic import ValidationError

from otto.scheduler.jobs import Clause, Job, matches


class JobStore(Protocol):
    async def find(self, manager_uid: str, clauses: Sequence[Clause]) -> list[Job]:
        """Jobs owned by ``manager_uid`` matching at least one clause."""
        ...


class JSONJobStore:
    """
    A read-only JSON job store.

    Jobs are kept as a JSON array of camelCase records. The file is re-read
    whenever its modification time changes, so external tooling can edit it
    while the scheduler runs.
    """

    def __init__(self, file_path: str | Path):
        self.file_path = Path(file_path)
        self._lock = threading.RLock()
        self._jobs: list[Job] = []
        self._mtime: float | None = None

    def _load(self) -> list[Job]:
        """Load jobs from JSON file."""
        try:
            with open(self.file_path, encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading job store: {e}")
            return []

        if not isinstance(records, list):
            logger.error("Error loading job store: expected a JSON array in {}", self.file_path)
            return []

        jobs: list[Job] = []
        for record in records:
            try:
                jobs.append(Job.model_validate(record))
            except ValidationError as e:
                logger.error("Error deserializing job {}: {}", record.get("id") if isinstance(record, dict) else "?", e)
        return jobs

    def jobs(self) -> list[Job]:
        """All jobs in the store."""
        with self._lock:
            if not self.file_path.exists():
                self._jobs, self._mtime = [], None
                return []
            mtime = self.file_path.stat().st_mtime
            if mtime != self._mtime:
                self._jobs = self._load()
                self._mtime = mtime
            return list(self._jobs)

    async def find(self, manager_uid: str, clauses: Sequence[Clause]) -> list[Job]:
        jobs = await asyncio.to_thread(self.jobs)
        return [job for job in jobs if job.manager_uid == manager_uid and matches(job, clauses)]
