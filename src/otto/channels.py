"""Channel-facing contracts: output delivery and the input audit log."""

from __future__ import annotations

import asyncio
import json
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from otto.session import Session
from otto.types import EventInput, Fulfillment, InputParams


class OutputSink(Protocol):
    """Delivers a fulfillment to a session; reports failure, never raises."""

    async def output(self, fulfillment: Fulfillment, session: Session, bag: dict[str, Any] | None = None) -> bool: ...


class InputLog(Protocol):
    async def write(self, session: Session, params: InputParams) -> None: ...


def input_record(session: Session, params: InputParams) -> dict[str, Any]:
    record: dict[str, Any] = {
        "session_id": session.id,
        "channel": session.channel,
        "created_at": datetime.now(UTC).isoformat(),
    }
    if params.text:
        record["text"] = params.text
    if params.answer:
        record["answer"] = params.answer
    if isinstance(params.event, EventInput):
        record["event"] = params.event.to_json()
    elif params.event:
        record["event"] = {"name": params.event}
    if isinstance(params.audio, Path):
        record["audio"] = str(params.audio)
    elif params.audio:
        record["audio"] = f"<{len(params.audio)} bytes>"
    return record


class JSONLInputLog:
    """Append-only JSONL file with one line per received input."""

    def __init__(self, file_path: str | Path) -> None:
        self.file_path = Path(file_path)
        self._lock = threading.Lock()

    async def write(self, session: Session, params: InputParams) -> None:
        line = json.dumps(input_record(session, params), ensure_ascii=False)
        await asyncio.to_thread(self._append, line)

    def _append(self, line: str) -> None:
        with self._lock:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.file_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        logger.debug("input_log.write path={}", self.file_path)
