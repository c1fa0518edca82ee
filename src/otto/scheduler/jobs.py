"""Scheduled job records and time-predicate matching."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any, TypeAlias

from pydantic import Field

from otto.types import WireModel

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

Clause: TypeAlias = tuple[str, str | bool]

PREDICATE_FIELDS = (
    "yearly",
    "monthly",
    "weekly",
    "daily",
    "hourly",
    "every_half_hour",
    "every_quarter_hour",
    "every_five_minutes",
    "minutely",
    "on_date",
    "on_boot",
    "on_tick",
)


class Job(WireModel):
    """One scheduled unit; stored with camelCase keys."""

    id: str
    program_name: str
    program_args: dict[str, Any] = Field(default_factory=dict)
    session_id: str
    manager_uid: str

    yearly: str | None = None
    monthly: str | None = None
    weekly: str | None = None
    daily: str | None = None
    hourly: str | None = None
    every_half_hour: bool | None = None
    every_quarter_hour: bool | None = None
    every_five_minutes: bool | None = None
    minutely: str | None = None
    on_date: str | None = None
    on_boot: bool | None = None
    on_tick: bool | None = None


def time_clauses(now: datetime) -> list[Clause]:
    """Project ``now``, truncated to the minute, onto every predicate field."""
    time = now.replace(second=0, microsecond=0)
    clock = time.strftime("%H:%M:%S")
    return [
        ("yearly", f"{time.timetuple().tm_yday} {clock}"),
        ("monthly", f"{time.day} {clock}"),
        ("weekly", f"{time.strftime('%w')} {clock}"),
        ("daily", clock),
        ("hourly", time.strftime("%M:%S")),
        ("every_half_hour", time.minute % 30 == 0),
        ("every_quarter_hour", time.minute % 15 == 0),
        ("every_five_minutes", time.minute % 5 == 0),
        ("minutely", time.strftime("%S")),
        ("on_date", time.strftime(DATE_FORMAT)),
        ("on_tick", True),
    ]


def matches(job: Job, clauses: Iterable[Clause]) -> bool:
    """True when any populated predicate field equals its clause value.

    Absent fields never match; boolean fields only take part when set to ``True``.
    """
    for name, value in clauses:
        field_value = getattr(job, name, None)
        if field_value is None or field_value is False:
            continue
        if field_value == value:
            return True
    return False
