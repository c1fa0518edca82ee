"""Contracts of the external language services."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class Language:
    code: str
    name: str


class Translator(Protocol):
    async def translate(self, text: str, to_language: str, from_language: str) -> str: ...

    async def get_languages(self, target: str) -> list[Language]:
        """List supported languages with names rendered in ``target``."""
        ...


class SpeechRecognizer(Protocol):
    async def recognize(self, audio: Path | bytes, locale: str) -> str: ...
