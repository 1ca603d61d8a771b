# src/vita_companion/llm/offline.py

from __future__ import annotations

from collections.abc import Iterable

from ..core.ports import ChatMessage


class OfflineLLMClient:
    """
    Stand-in used when no external API is configured.

    The journal and the to-do list keep working; every model-backed command
    fails with the "not configured" error, which handlers turn into a
    user-facing hint via friendly_llm_error_message().
    """

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]:
        raise RuntimeError("LLM API key is not set. Set VITA_OPENROUTER_API_KEY in your .env.")
        yield ""  # pragma: no cover


class OfflineTranscriber:
    """Voice notes are rejected with the same "not configured" error."""

    def transcribe(self, audio: bytes, *, filename: str, mime_type: str) -> str:
        raise RuntimeError(
            "Transcription API key is not set. Set VITA_TRANSCRIPTION_API_KEY (or OPENAI_API_KEY)."
        )
