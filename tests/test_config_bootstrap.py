# tests/test_config_bootstrap.py

from __future__ import annotations

from pathlib import Path

import pytest

from vita_companion.cli.bootstrap import create_initial_state
from vita_companion.config import DEFAULT_USER_PROFILE, Settings
from vita_companion.llm.client import friendly_llm_error_message
from vita_companion.llm.offline import OfflineLLMClient, OfflineTranscriber

_KEYS = (
    "VITA_OPENROUTER_API_KEY",
    "OPENROUTER_API_KEY",
    "VITA_TRANSCRIPTION_API_KEY",
    "OPENAI_API_KEY",
    "VITA_LLM_MODELS",
    "VITA_LOCAL_UTC_OFFSET_HOURS",
    "VITA_COMPLETED_DISPLAY_LIMIT",
    "VITA_USER_PROFILE",
)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    for key in _KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("VITA_DATA_DIR", str(tmp_path / "data"))
    return monkeypatch


def test_settings_defaults(clean_env, tmp_path: Path) -> None:
    s = Settings.from_env()
    assert s.local_utc_offset_hours == -3.0
    assert s.completed_display_limit == 5
    assert s.user_profile == DEFAULT_USER_PROFILE
    assert s.openrouter_api_key is None
    assert s.todos_db_path == tmp_path / "data" / "todos.sqlite3"
    assert s.llm_models[0] == "google/gemini-flash-1.5"


def test_settings_overrides(clean_env) -> None:
    clean_env.setenv("VITA_LLM_MODELS", "a/one, b/two")
    clean_env.setenv("VITA_LOCAL_UTC_OFFSET_HOURS", "2.5")
    clean_env.setenv("VITA_COMPLETED_DISPLAY_LIMIT", "-4")
    clean_env.setenv("OPENAI_API_KEY", "sk-test")

    s = Settings.from_env()
    assert s.llm_models == ["a/one", "b/two"]
    assert s.local_utc_offset_hours == 2.5
    assert s.completed_display_limit == 0
    assert s.transcription_api_key == "sk-test"


def test_bootstrap_without_keys_runs_offline(clean_env) -> None:
    s = Settings.from_env()
    state = create_initial_state(settings=s)

    assert isinstance(state.llm, OfflineLLMClient)
    assert isinstance(state.transcriber, OfflineTranscriber)
    assert s.matrix_store_path.is_dir()
    assert state.todos.count_tasks() == 0


def test_friendly_messages() -> None:
    assert "VITA_OPENROUTER_API_KEY" in friendly_llm_error_message(RuntimeError("LLM API key is not set."))
    assert "saturada" in friendly_llm_error_message(RuntimeError("LLM is rate-limited. Try again later."))
    assert "intentá nuevamente" in friendly_llm_error_message(RuntimeError("boom"))
