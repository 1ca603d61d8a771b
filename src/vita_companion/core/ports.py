# src/vita_companion/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps connectors/storage/model providers swappable and makes testing easier.
"""

from typing import Any, Iterable, Protocol

ChatMessage = dict[str, str]
# OpenAI-style chat messages: {"role": "...", "content": "..."}.


class LLMClient(Protocol):
    """Streaming chat completion client (OpenAI/OpenRouter-compatible)."""
    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]: ...


class Transcriber(Protocol):
    """Speech-to-text for voice notes."""
    def transcribe(self, audio: bytes, *, filename: str, mime_type: str) -> str: ...


class TodoRepo(Protocol):
    def list_all_tasks(self) -> list[Any]: ...
    def get_task(self, task_id: int) -> Any | None: ...
    def create_task(self, description: str, due_date: str | None = None) -> Any: ...
    def set_completed(self, task_id: int, completed: bool) -> bool: ...
    def toggle_completed(self, task_id: int) -> bool | None: ...
    def delete_task(self, task_id: int) -> bool: ...
    def count_tasks(self) -> int: ...


class JournalRepo(Protocol):
    def add_meal(self, date: str, name: str, calories: int | None) -> Any: ...
    def add_exercise(
            self,
            date: str,
            name: str,
            duration_minutes: int | None,
            calories: int | None,
    ) -> Any: ...
    def list_meals(self) -> list[Any]: ...
    def list_exercises(self) -> list[Any]: ...
    def meals_on(self, date: str) -> list[Any]: ...
    def exercises_on(self, date: str) -> list[Any]: ...
