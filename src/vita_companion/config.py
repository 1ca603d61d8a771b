# src/vita_companion/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time.
- Everything else receives the settings object explicitly (no hidden config reads).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

ENV_PREFIX = "VITA"

DEFAULT_USER_PROFILE = (
    "31-year-old man, height 1.70m, weight 84kg, wants to lose weight and gain muscle. "
    "Daily target 1,800-2,000 kcal, no fish, one controlled cheat meal on the weekend. "
    "Uses accessible, inexpensive Argentine foods."
)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Connector flags ----
    console_enabled: bool
    matrix_enabled: bool

    # ---- LLM / OpenRouter ----
    openrouter_api_key: Optional[str]
    openrouter_base_url: str
    llm_models: List[str]
    extra_headers: Dict[str, str]

    # ---- Voice transcription (OpenAI-compatible audio API) ----
    transcription_api_key: Optional[str]
    transcription_base_url: str
    transcription_model: str
    transcription_language: str

    # ---- Matrix ----
    matrix_homeserver: str
    matrix_user_id: str
    matrix_password: str
    matrix_rooms: List[str]

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    matrix_store_path: Path
    todos_db_path: Path
    journal_db_path: Path

    # ---- Domain ----
    local_utc_offset_hours: float
    completed_display_limit: int
    user_profile: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _first_env(_k("APP_NAME"), default=_env(_k("APP_TITLE"), "vita")) or "vita"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        matrix_enabled = _env_bool(_k("MATRIX_ENABLED"), False)

        openrouter_api_key = _first_env(_k("OPENROUTER_API_KEY"), "OPENROUTER_API_KEY", default=None)
        openrouter_base_url = _env(_k("OPENROUTER_BASE_URL"), "https://openrouter.ai/api/v1")

        http_referer = _env(_k("HTTP_REFERER"), "https://example.com")
        title = _env(_k("APP_TITLE"), app_name)
        extra_headers = {
            "HTTP-Referer": http_referer,
            "X-Title": title,
        }

        llm_models = _env_list(
            _k("LLM_MODELS"),
            [
                "google/gemini-flash-1.5",
                "google/gemini-flash-1.5-8b",
                "qwen/qwen-2.5-72b-instruct:free",
            ],
        )

        transcription_api_key = _first_env(_k("TRANSCRIPTION_API_KEY"), "OPENAI_API_KEY", default=None)
        transcription_base_url = _env(_k("TRANSCRIPTION_BASE_URL"), "https://api.openai.com/v1")
        transcription_model = _env(_k("TRANSCRIPTION_MODEL"), "whisper-1")
        transcription_language = _env(_k("TRANSCRIPTION_LANGUAGE"), "es")

        matrix_homeserver = (_first_env(_k("MATRIX_HOMESERVER"), "MATRIX_HOMESERVER", default="") or "").strip()
        matrix_user_id = (_first_env(_k("MATRIX_USER_ID"), "MATRIX_USER_ID", default="") or "").strip()
        matrix_password = (_first_env(_k("MATRIX_PASSWORD"), "MATRIX_PASSWORD", default="") or "").strip()
        matrix_rooms = _env_list(_k("MATRIX_ROOMS"), _env_list("MATRIX_ROOMS", []))

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/vita"))
        matrix_store_path = _env_path(_k("MATRIX_STORE_PATH"), data_dir / "matrix_store")
        todos_db_path = _env_path(_k("TODOS_DB_PATH"), data_dir / "todos.sqlite3")
        journal_db_path = _env_path(_k("JOURNAL_DB_PATH"), data_dir / "journal.sqlite3")

        # Single-locale deployment: Argentina (UTC-3) unless overridden.
        local_utc_offset_hours = _env_float(_k("LOCAL_UTC_OFFSET_HOURS"), -3.0)
        completed_display_limit = max(0, _env_int(_k("COMPLETED_DISPLAY_LIMIT"), 5))
        user_profile = _env(_k("USER_PROFILE"), DEFAULT_USER_PROFILE).strip() or DEFAULT_USER_PROFILE

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            matrix_enabled=matrix_enabled,
            openrouter_api_key=openrouter_api_key,
            openrouter_base_url=openrouter_base_url,
            llm_models=llm_models,
            extra_headers=extra_headers,
            transcription_api_key=transcription_api_key,
            transcription_base_url=transcription_base_url,
            transcription_model=transcription_model,
            transcription_language=transcription_language,
            matrix_homeserver=matrix_homeserver,
            matrix_user_id=matrix_user_id,
            matrix_password=matrix_password,
            matrix_rooms=matrix_rooms,
            data_dir=data_dir,
            matrix_store_path=matrix_store_path,
            todos_db_path=todos_db_path,
            journal_db_path=journal_db_path,
            local_utc_offset_hours=local_utc_offset_hours,
            completed_display_limit=completed_display_limit,
            user_profile=user_profile,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, built on first use."""
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
