# src/vita_companion/llm/transcribe.py

from __future__ import annotations

import logging
from typing import Any

from openai import OpenAI

from .client import make_timeout, timeouts_from_env

logger = logging.getLogger(__name__)


class WhisperTranscriber:
    """
    Voice-note transcription over the OpenAI-compatible audio API.

    OpenRouter does not serve audio endpoints, so this client has its own
    key/base URL (VITA_TRANSCRIPTION_API_KEY / VITA_TRANSCRIPTION_BASE_URL).
    """

    def __init__(self, settings: Any) -> None:
        api_key = getattr(settings, "transcription_api_key", None)
        base_url = getattr(settings, "transcription_base_url", "") or ""
        if not api_key or not str(api_key).strip():
            raise RuntimeError(
                "Transcription API key is not set. Set VITA_TRANSCRIPTION_API_KEY (or OPENAI_API_KEY)."
            )

        self._model = str(getattr(settings, "transcription_model", "whisper-1") or "whisper-1")
        self._language = str(getattr(settings, "transcription_language", "") or "").strip() or None

        t = timeouts_from_env()
        self._client = OpenAI(
            base_url=base_url or None,
            api_key=str(api_key),
            timeout=make_timeout(t["connect"], t["read"]),
            max_retries=1,
        )

    def transcribe(self, audio: bytes, *, filename: str, mime_type: str) -> str:
        if not audio:
            raise ValueError("empty audio payload")

        kwargs: dict[str, Any] = {
            "model": self._model,
            "file": (filename or "voice.ogg", audio, mime_type or "audio/ogg"),
        }
        if self._language:
            kwargs["language"] = self._language

        logger.info("Transcribing voice note (%d bytes, model=%s)", len(audio), self._model)
        result = self._client.audio.transcriptions.create(**kwargs)
        text = (getattr(result, "text", "") or "").strip()
        logger.debug("Transcription len=%d", len(text))
        return text
