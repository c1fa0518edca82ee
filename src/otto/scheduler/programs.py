"""Scheduler programs: a closed set of kinds with one dispatch function."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Protocol, TypeAlias

from pydantic import ValidationError, model_validator

from otto.errors import ProgramNotFoundError
from otto.scheduler.jobs import Job
from otto.session import Session
from otto.types import EventInput, Fulfillment, InputParams, WireModel


class ProgramKind(StrEnum):
    INPUT = "input"
    OUTPUT = "output"


class InputProgram(WireModel):
    """Feed a synthetic input into the orchestrator for the job's session."""

    text: str | None = None
    event: str | EventInput | None = None

    @model_validator(mode="after")
    def _one_input(self) -> InputProgram:
        if bool(self.text) == bool(self.event):
            raise ValueError("input program needs exactly one of text or event")
        return self


class OutputProgram(WireModel):
    """Deliver a fixed fulfillment to the job's session."""

    fulfillment_text: str
    payload: dict[str, Any] | None = None


Program: TypeAlias = InputProgram | OutputProgram

_PROGRAM_MODELS: dict[ProgramKind, type[InputProgram] | type[OutputProgram]] = {
    ProgramKind.INPUT: InputProgram,
    ProgramKind.OUTPUT: OutputProgram,
}


class ProgramTarget(Protocol):
    """What programs act on; implemented by the orchestrator."""

    async def process_input(self, params: InputParams, session: Session) -> bool: ...

    async def deliver(self, fulfillment: Fulfillment, session: Session, bag: dict[str, Any] | None = None) -> bool: ...


def parse_program(job: Job) -> Program:
    try:
        kind = ProgramKind(job.program_name)
    except ValueError:
        raise ProgramNotFoundError(f"Program <{job.program_name}> not found") from None

    try:
        return _PROGRAM_MODELS[kind].model_validate(job.program_args)
    except ValidationError as exc:
        raise ProgramNotFoundError(f"Program <{job.program_name}> has invalid arguments: {exc}") from exc


async def run_program(program: Program, session: Session, target: ProgramTarget) -> bool:
    match program:
        case InputProgram(text=text) if text:
            return await target.process_input(InputParams(text=text), session)
        case InputProgram(event=event):
            return await target.process_input(InputParams(event=event), session)
        case OutputProgram(fulfillment_text=text, payload=payload):
            return await target.deliver(Fulfillment(fulfillment_text=text, payload=payload), session)
        case _:
            raise TypeError(f"unsupported program: {type(program).__name__}")
