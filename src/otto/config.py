"""Configuration management for Otto."""

from __future__ import annotations

import socket
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from otto.session import get_locale


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="OTTO_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Instance identity, used for provenance stamps and job ownership
    uid: str = Field(default_factory=socket.gethostname, description="Unique id of this running instance")
    language: str = Field(default="en", description="Language the NLU agent is trained in")

    # NLU backend
    nlu_project_id: str = Field(default="", description="Project id of the NLU agent")
    nlu_environment: str | None = Field(default=None, description="Optional NLU agent environment")
    mimic_offline_server: bool = Field(default=False, description="Ignore webhook-enriched responses")
    training_session_id: str | None = Field(default=None, description="Session asked to teach fallback queries")

    # Audio
    audio_encoding: str = Field(default="MP3", description="Output audio encoding requested from the backend")
    audio_extension: str = Field(default="mp3", description="File extension of the output audio")

    # Scheduler
    scheduler_interval_seconds: int = Field(default=60, ge=1, description="Seconds between two scheduler ticks")

    # Storage
    home: Path = Field(default_factory=lambda: Path.home() / ".otto", description="Otto data directory")
    jobs_path: Path | None = Field(default=None, description="JSON file holding scheduled jobs")
    input_log_path: Path | None = Field(default=None, description="JSONL file receiving every input")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")

    @field_validator("language")
    @classmethod
    def _check_language(cls, value: str) -> str:
        get_locale(value)
        return value

    def resolve_home(self) -> Path:
        return self.home.expanduser()

    def resolve_jobs_path(self) -> Path:
        return self.jobs_path or self.resolve_home() / "jobs.json"

    def resolve_input_log_path(self) -> Path:
        return self.input_log_path or self.resolve_home() / "inputs.jsonl"


def load_settings(**overrides: Any) -> Settings:
    """Load settings from the environment and ``.env``, applying explicit overrides."""
    settings = Settings()
    if overrides:
        settings = settings.model_copy(update=overrides)
    return settings
