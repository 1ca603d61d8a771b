# tests/fakes.py

from __future__ import annotations

from collections.abc import Iterable

from vita_companion.core.ports import ChatMessage


class FakeLLMClient:
    """
    Deterministic LLM client for unit tests.

    - Captures calls for assertions
    - Replies with queued texts in order, then with `next_text`
    - A queued Exception instance is raised instead of yielded
    """

    def __init__(self, next_text: str = "ok", replies: list | None = None) -> None:
        self.next_text = next_text
        self.replies: list = list(replies or [])
        self.calls: list[tuple[list[ChatMessage], str]] = []

    def queue(self, *replies) -> None:
        self.replies.extend(replies)

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]:
        self.calls.append((messages, system_prompt))
        reply = self.replies.pop(0) if self.replies else self.next_text
        if isinstance(reply, Exception):
            raise reply
        yield reply

    @property
    def prompts(self) -> list[str]:
        return [messages[-1]["content"] for messages, _ in self.calls]


class FakeTranscriber:
    """Returns a fixed transcript and records what it was given."""

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.calls: list[tuple[bytes, str, str]] = []

    def transcribe(self, audio: bytes, *, filename: str, mime_type: str) -> str:
        self.calls.append((audio, filename, mime_type))
        return self.text
