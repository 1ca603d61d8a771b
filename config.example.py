# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file,
read with python-dotenv). Do NOT commit real secrets.
"""

ENV_VARS = {
    # App / logging
    "VITA_APP_NAME": "App display name (default: vita).",
    "VITA_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Connectors
    "VITA_CONSOLE_ENABLED": "Enable the console REPL (true/false, default: true).",
    "VITA_MATRIX_ENABLED": "Enable the Matrix bot (true/false, default: false).",
    # LLM / OpenRouter
    "VITA_OPENROUTER_API_KEY": "OpenRouter API key. Without it the model-backed commands answer with a hint.",
    "VITA_OPENROUTER_BASE_URL": "OpenRouter base URL (default: https://openrouter.ai/api/v1).",
    "VITA_LLM_MODELS": "Comma/space separated list of models to try in order (Gemini first by default).",
    "VITA_HTTP_REFERER": "Optional OpenRouter metadata header.",
    "VITA_APP_TITLE": "Optional OpenRouter metadata header title.",
    "VITA_LLM_CONNECT_TIMEOUT_SECONDS": "Seconds to open a connection (default: 5).",
    "VITA_LLM_READ_TIMEOUT_SECONDS": "Seconds between streamed chunks (default: 60).",
    "VITA_LLM_FIRST_TOKEN_TIMEOUT_SECONDS": "Seconds to wait for the first token before the next model (default: 30).",
    # Voice notes
    "VITA_TRANSCRIPTION_API_KEY": "Key for the Whisper transcription endpoint (falls back to OPENAI_API_KEY).",
    "VITA_TRANSCRIPTION_BASE_URL": "Transcription base URL (default: https://api.openai.com/v1).",
    "VITA_TRANSCRIPTION_MODEL": "Transcription model (default: whisper-1).",
    "VITA_TRANSCRIPTION_LANGUAGE": "Spoken language hint (default: es).",
    # Matrix
    "VITA_MATRIX_HOMESERVER": "Matrix homeserver URL.",
    "VITA_MATRIX_USER_ID": "Matrix user ID (bot).",
    "VITA_MATRIX_PASSWORD": "Password for first login (session stored locally).",
    "VITA_MATRIX_ROOMS": "Optional allowlist of room IDs (empty => all rooms).",
    # Paths (gitignored)
    "VITA_DATA_DIR": "Local data directory (default: .local/vita).",
    "VITA_MATRIX_STORE_PATH": "Matrix session/E2EE store (default: <data_dir>/matrix_store).",
    "VITA_TODOS_DB_PATH": "To-do SQLite path (default: <data_dir>/todos.sqlite3).",
    "VITA_JOURNAL_DB_PATH": "Meal/exercise SQLite path (default: <data_dir>/journal.sqlite3).",
    # Behaviour
    "VITA_LOCAL_UTC_OFFSET_HOURS": "Fixed offset that defines 'today' (default: -3, Argentina).",
    "VITA_COMPLETED_DISPLAY_LIMIT": "How many completed to-dos /todos shows (default: 5).",
    "VITA_USER_PROFILE": "Free-text profile used by /mealplan and /exerciseplan.",
}
