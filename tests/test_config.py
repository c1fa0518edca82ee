from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from otto.config import Settings, load_settings


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("OTTO_UID", "kitchen-pi")
    monkeypatch.setenv("OTTO_LANGUAGE", "it")
    monkeypatch.setenv("OTTO_MIMIC_OFFLINE_SERVER", "true")
    monkeypatch.setenv("OTTO_HOME", str(tmp_path))

    settings = load_settings()

    assert settings.uid == "kitchen-pi"
    assert settings.language == "it"
    assert settings.mimic_offline_server is True
    assert settings.resolve_jobs_path() == tmp_path / "jobs.json"
    assert settings.resolve_input_log_path() == tmp_path / "inputs.jsonl"


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OTTO_UID", "from-env")

    settings = load_settings(uid="explicit", scheduler_interval_seconds=5)

    assert settings.uid == "explicit"
    assert settings.scheduler_interval_seconds == 5


def test_explicit_paths_are_kept(tmp_path: Path) -> None:
    settings = Settings(jobs_path=tmp_path / "mine.json")

    assert settings.resolve_jobs_path() == tmp_path / "mine.json"


def test_unknown_language_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(language="xx")


def test_defaults() -> None:
    settings = Settings()

    assert settings.uid
    assert settings.audio_encoding == "MP3"
    assert settings.scheduler_interval_seconds == 60
