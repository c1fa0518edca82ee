"""Job scheduler."""

from otto.scheduler.jobs import Job, matches, time_clauses
from otto.scheduler.programs import ProgramKind, parse_program, run_program
from otto.scheduler.scheduler import Scheduler
from otto.scheduler.store import JobStore, JSONJobStore

__all__ = [
    "JSONJobStore",
    "Job",
    "JobStore",
    "ProgramKind",
    "Scheduler",
    "matches",
    "parse_program",
    "run_program",
    "time_clauses",
]
