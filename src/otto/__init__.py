"""Otto - fulfillment orchestration for a conversational assistant."""

from otto.app import Runtime, build_runtime
from otto.config import Settings, load_settings
from otto.orchestrator import Orchestrator
from otto.session import Session
from otto.types import Fulfillment, InputParams

__version__ = "0.1.0"

__all__ = [
    "Fulfillment",
    "InputParams",
    "Orchestrator",
    "Runtime",
    "Session",
    "Settings",
    "build_runtime",
    "load_settings",
]
