# src/vita_companion/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from .ports import JournalRepo, LLMClient, TodoRepo, Transcriber


@dataclass
class AppState:
    """
    Explicit application context handed to every handler.

    Clients and stores are constructed once in the composition root
    (cli/bootstrap.py) and passed in here; nothing reads them from globals.
    """

    settings: Any
    llm: LLMClient
    transcriber: Transcriber
    todos: TodoRepo
    journal: JournalRepo

    # dialog key ("user||room") -> kind of input we are waiting for ("meal", "exercise", "todo")
    pending_inputs: dict[str, str] = field(default_factory=dict)

    # Serialises handlers between the console thread and the Matrix thread.
    lock: threading.Lock = field(default_factory=threading.Lock)
