"""Built-in action packages."""

from __future__ import annotations

from typing import Any

from otto.actions.registry import ActionRegistry
from otto.config import Settings
from otto.errors import ActionError, ConfigurationError
from otto.hookspecs import hookimpl
from otto.nlu import Body
from otto.services import Translator
from otto.session import Session
from otto.types import Fulfillment


def register_builtin_actions(registry: ActionRegistry, *, settings: Settings, translator: Translator | None) -> None:
    """Register built-in actions into registry."""

    @registry.register("translate.text")
    async def translate_text(body: Body, session: Session, bag: dict[str, Any] | None) -> Fulfillment:
        """Translate a phrase into a language named by the user."""
        if translator is None:
            raise ConfigurationError("no translator configured")
        params = body.query_result.parameters
        language_name = params.get("language")

        languages = await translator.get_languages(settings.language)
        language = next((item for item in languages if item.name == language_name), None)
        if language is None:
            raise ActionError("unknown_language", data={"language": language_name})

        text = await translator.translate(str(params.get("q", "")), to_language=language.code, from_language=settings.language)
        return Fulfillment(
            fulfillment_text=text,
            payload={"includeVoice": True, "language": language.code},
        )


class BuiltinActions:
    """Plugin registering the actions shipped with Otto."""

    def __init__(self, settings: Settings, translator: Translator | None = None) -> None:
        self.settings = settings
        self.translator = translator

    @hookimpl
    def register_actions(self, registry: ActionRegistry) -> None:
        register_builtin_actions(registry, settings=self.settings, translator=self.translator)
