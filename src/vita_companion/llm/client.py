# src/vita_companion/llm/client.py

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Iterable, List, Optional

import httpx
import openai
from openai import OpenAI

from ..core.ports import ChatMessage, LLMClient

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    s = raw.strip()
    if not s:
        return default
    try:
        return float(s)
    except ValueError:
        return default


def timeouts_from_env() -> dict[str, float]:
    """
    Timeouts are configurable via env so a slow model cannot hang a chat handler.

    Defaults:
    - connect timeout: 5s
    - read timeout: 60s (structured answers such as meal plans are long)
    - first token timeout: 30s (no content tokens)
    """
    first_token = _env_float("VITA_LLM_FIRST_TOKEN_TIMEOUT_SECONDS", 30.0)
    read_timeout = _env_float("VITA_LLM_READ_TIMEOUT_SECONDS", 60.0)
    connect_timeout = _env_float("VITA_LLM_CONNECT_TIMEOUT_SECONDS", 5.0)

    read_timeout = max(read_timeout, first_token)

    return {
        "first_token": first_token,
        "read": read_timeout,
        "connect": connect_timeout,
    }


def make_timeout(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s)


def _is_auth_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return True
    return exc.__class__.__name__ in {"UnauthorizedError"}


def _is_rate_limit_error(exc: Exception) -> bool:
    if isinstance(exc, openai.RateLimitError):
        return True
    return exc.__class__.__name__ in {"TooManyRequestsError"}


def _is_connection_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.APIConnectionError, httpx.TimeoutException)):
        return True
    return isinstance(exc, TimeoutError)


def _is_not_found_error(exc: Exception) -> bool:
    return isinstance(exc, openai.NotFoundError)


def friendly_llm_error_message(err: Exception) -> str:
    msg = str(err).strip() or "LLM error."
    if "LLM API key is not set" in msg:
        return "La IA no está configurada (falta la API key). Configurá VITA_OPENROUTER_API_KEY en .env."
    if "Transcription API key is not set" in msg:
        return "Las notas de voz no están configuradas. Configurá VITA_TRANSCRIPTION_API_KEY en .env."
    if "LLM model list is empty" in msg:
        return "La IA no está configurada (sin modelos). Configurá VITA_LLM_MODELS en .env."
    if "LLM base URL is not set" in msg:
        return "La IA no está configurada (falta la URL base). Configurá VITA_OPENROUTER_BASE_URL en .env."
    if "rate-limited" in msg:
        return "La IA está saturada en este momento. Intentá de nuevo en unos minutos."
    if "network/timeout" in msg:
        return "No pude contactar a la IA (red/timeout). Intentá de nuevo más tarde."
    if "authentication failed" in msg:
        return "La IA rechazó la API key configurada. Revisá VITA_OPENROUTER_API_KEY."
    return "Lo siento, la IA no pudo responder. Por favor intentá nuevamente."


def _close_stream(stream: Any) -> None:
    close = getattr(stream, "close", None)
    if callable(close):
        try:
            close()
        except Exception:
            logger.debug("Failed to close LLM stream.", exc_info=True)


class OpenRouterLLMClient:
    """
    OpenAI-compatible streaming client with an ordered model fallback chain.

    Behavior:
    - Tries models in the order from settings (VITA_LLM_MODELS).
    - If a model doesn't produce a first content token within FIRST_TOKEN timeout,
      we abort and try the next model.
    - 404 (model not available) -> model is parked for an hour, try next.
    - Rate limit / network issues -> try next.
    - Auth issues -> fail fast (no retries across models).
    """

    def __init__(self, settings: Any) -> None:
        api_key = getattr(settings, "openrouter_api_key", None)
        base_url = getattr(settings, "openrouter_base_url", "") or ""

        if not api_key or not str(api_key).strip():
            raise RuntimeError("LLM API key is not set. Set VITA_OPENROUTER_API_KEY in your .env.")
        if not base_url.strip():
            raise RuntimeError("LLM base URL is not set. Set VITA_OPENROUTER_BASE_URL in your .env.")

        self._models: List[str] = [m.strip() for m in (getattr(settings, "llm_models", []) or []) if m and m.strip()]
        self._headers: Dict[str, str] = dict(getattr(settings, "extra_headers", {}) or {})
        self._timeouts = timeouts_from_env()
        self._timeout = make_timeout(self._timeouts["connect"], self._timeouts["read"])
        self._bad_models: dict[str, float] = {}  # model -> retry_at (monotonic)

        # Automatic retries are disabled so fallback across models stays quick.
        self._client = OpenAI(
            base_url=str(base_url),
            api_key=str(api_key),
            timeout=self._timeout,
            max_retries=0,
        )

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]:
        if not self._models:
            raise RuntimeError("LLM model list is empty. Set VITA_LLM_MODELS in your .env.")

        first_token_timeout = float(self._timeouts["first_token"])
        full_messages: list[dict[str, str]] = list(messages)
        if system_prompt:
            full_messages = [{"role": "system", "content": system_prompt}, *messages]

        last_error: Optional[Exception] = None
        now = time.monotonic()

        for model in self._models:
            retry_at = self._bad_models.get(model)
            if retry_at is not None and retry_at > now:
                continue

            logger.info("LLM: trying model=%s (first_token_timeout=%.1fs)", model, first_token_timeout)
            t0 = time.monotonic()
            deadline = t0 + first_token_timeout

            stream = None
            used_any = False

            try:
                stream = self._client.chat.completions.create(
                    model=model,
                    stream=True,
                    extra_headers=self._headers or None,
                    messages=full_messages,
                    timeout=self._timeout,
                )

                for chunk in stream:
                    if not used_any and time.monotonic() > deadline:
                        last_error = TimeoutError(f"First token timeout on model: {model}")
                        logger.info("LLM: first token timeout on model=%s -> trying next", model)
                        break

                    content = None
                    if chunk.choices:
                        delta = chunk.choices[0].delta
                        content = getattr(delta, "content", None) if delta is not None else None

                    if content:
                        if not used_any:
                            logger.info("LLM: first token from model=%s (%.2fs)", model, time.monotonic() - t0)
                        used_any = True
                        yield content

                if used_any:
                    logger.debug("LLM: completed with model=%s", model)
                    return

                if last_error is None:
                    last_error = RuntimeError(f"Model returned no content: {model}")

            except Exception as e:
                last_error = e

                if _is_auth_error(e):
                    raise RuntimeError(
                        "LLM authentication failed. Check your API key (VITA_OPENROUTER_API_KEY)."
                    ) from e

                if _is_not_found_error(e):
                    self._bad_models[model] = time.monotonic() + 3600.0
                    logger.info("LLM: model not available (404): %s", model)
                    continue

                if _is_rate_limit_error(e):
                    logger.info("LLM: rate-limited on model=%s, trying next", model)
                    continue

                if _is_connection_error(e):
                    logger.info("LLM: network/timeout error on model=%s, trying next", model)
                    continue

                logger.info("LLM: error on model=%s (%s), trying next", model, e.__class__.__name__)
                continue

            finally:
                if stream is not None:
                    _close_stream(stream)

        if last_error is not None:
            if _is_rate_limit_error(last_error):
                raise RuntimeError("LLM is rate-limited. Try again later.") from last_error
            if _is_connection_error(last_error):
                raise RuntimeError("LLM network/timeout error. Try again later or change models.") from last_error
            raise RuntimeError("All LLM models failed.") from last_error

        raise RuntimeError("All LLM models failed.")


def complete_text(llm: LLMClient, prompt: str, system_prompt: str = "") -> str:
    """Run a single-turn prompt and return the whole reply as one string."""
    parts: list[str] = []
    for piece in llm.stream_chat([{"role": "user", "content": prompt}], system_prompt):
        parts.append(piece)
    return "".join(parts).strip()
