from __future__ import annotations

import json
from pathlib import Path

import pytest

from otto.channels import JSONLInputLog, input_record
from otto.session import Session
from otto.types import EventInput, InputParams


@pytest.mark.asyncio
async def test_jsonl_input_log_appends_one_line_per_input(tmp_path: Path) -> None:
    log = JSONLInputLog(tmp_path / "logs" / "inputs.jsonl")
    session = Session(id="s1", channel="web")

    await log.write(session, InputParams(text="hello"))
    await log.write(session, InputParams(event=EventInput(name="wake", parameters={"x": 1})))

    lines = (tmp_path / "logs" / "inputs.jsonl").read_text(encoding="utf-8").splitlines()
    records = [json.loads(line) for line in lines]
    assert records[0]["text"] == "hello"
    assert records[0]["channel"] == "web"
    assert records[1]["event"] == {"name": "wake", "parameters": {"x": 1}}


def test_input_record_summarizes_audio() -> None:
    record = input_record(Session(id="s1"), InputParams(audio=b"1234"))

    assert record["audio"] == "<4 bytes>"
    assert "text" not in record
