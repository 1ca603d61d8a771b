# src/vita_companion/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (LLM/transcriber/stores).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import LLMClient, Transcriber
from ..core.state import AppState
from ..journal.journal_store import JournalStore
from ..llm.client import OpenRouterLLMClient
from ..llm.offline import OfflineLLMClient, OfflineTranscriber
from ..llm.transcribe import WhisperTranscriber
from ..todos.todo_store import TodoStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.matrix_store_path.mkdir(parents=True, exist_ok=True)
    settings.todos_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.journal_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings (get_settings() when None).

    Missing API keys do not stop the app: the offline stand-ins are used and
    model-backed commands answer with a configuration hint.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    llm_client: LLMClient
    try:
        llm_client = OpenRouterLLMClient(settings)
    except RuntimeError as e:
        logger.warning("LLM client unavailable, running offline: %s", e)
        llm_client = OfflineLLMClient()

    transcriber: Transcriber
    try:
        transcriber = WhisperTranscriber(settings)
    except RuntimeError as e:
        logger.warning("Transcriber unavailable, voice notes disabled: %s", e)
        transcriber = OfflineTranscriber()

    return AppState(
        settings=settings,
        llm=llm_client,
        transcriber=transcriber,
        todos=TodoStore(settings.todos_db_path),
        journal=JournalStore(settings.journal_db_path),
    )
