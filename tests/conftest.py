# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from vita_companion.core.state import AppState
from vita_companion.journal.journal_store import JournalStore
from vita_companion.todos.todo_store import TodoStore

from .fakes import FakeLLMClient, FakeTranscriber


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="vita",
        # Paths (tmp per test run)
        data_dir=tmp_path,
        matrix_store_path=tmp_path / "matrix_store",
        todos_db_path=tmp_path / "todos.sqlite3",
        journal_db_path=tmp_path / "journal.sqlite3",
        # Behaviour
        llm_models=["test/model"],
        local_utc_offset_hours=-3.0,
        completed_display_limit=5,
        user_profile="Hombre, 35 años, 80 kg, 1.80 m, actividad moderada.",
        matrix_enabled=False,
    )


@pytest.fixture()
def llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture()
def transcriber() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture()
def state(settings: SimpleNamespace, llm: FakeLLMClient, transcriber: FakeTranscriber) -> AppState:
    """
    AppState wired with deterministic fakes.

    NOTE: We keep real SQLite stores here (TodoStore/JournalStore) because
    their correctness is part of what we want to test.
    """
    return AppState(
        settings=settings,
        llm=llm,
        transcriber=transcriber,
        todos=TodoStore(settings.todos_db_path),
        journal=JournalStore(settings.journal_db_path),
    )
