"""Session entity and the store contract the core consumes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

LOCALES: dict[str, str] = {
    "cy": "cy-GB",
    "da": "da-DK",
    "de": "de-DE",
    "en": "en-GB",
    "es": "es-ES",
    "fr": "fr-FR",
    "is": "is-IS",
    "it": "it-IT",
    "ja": "ja-JP",
    "nb": "nb-NO",
    "nl": "nl-NL",
    "pt": "pt-PT",
    "ro": "ro-RO",
    "ru": "ru-RU",
    "sv": "sv-SE",
    "tr": "tr-TR",
}


def get_locale(language: str) -> str:
    """Return the speech locale for a two-letter language code."""
    try:
        return LOCALES[language]
    except KeyError:
        raise ValueError(f"no locale for language code: {language!r}") from None


@dataclass(eq=False)
class Session:
    """One conversation endpoint, owned by the external session store."""

    id: str
    channel: str = "default"
    translate_from: str = "en"
    translate_to: str = "en"
    authorizations: set[str] = field(default_factory=set)
    repeat_mode_session: Session | None = None
    pending_scheduler: dict[str, Any] | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        get_locale(self.translate_from)
        get_locale(self.translate_to)


class SessionStore(Protocol):
    """Minimal async contract for session persistence."""

    async def get_session(self, session_id: str) -> Session | None: ...

    async def register_session(
        self, channel: str, session_id: str, context: dict[str, Any] | None = None
    ) -> Session: ...


class InMemorySessionStore:
    """Process-local session store."""

    def __init__(self, default_language: str = "en") -> None:
        self.default_language = default_language
        self._sessions: dict[str, Session] = {}

    def add(self, session: Session) -> Session:
        self._sessions[session.id] = session
        return session

    async def get_session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    async def register_session(
        self, channel: str, session_id: str, context: dict[str, Any] | None = None
    ) -> Session:
        existing = self._sessions.get(session_id)
        if existing is not None:
            if context:
                existing.context.update(context)
            return existing
        return self.add(
            Session(
                id=session_id,
                channel=channel,
                translate_from=self.default_language,
                translate_to=self.default_language,
                context=dict(context or {}),
            )
        )
