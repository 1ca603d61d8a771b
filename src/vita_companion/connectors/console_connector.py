# src/vita_companion/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

from ..cli.commands import handle_message
from ..core.chat import handle_voice
from ..core.state import AppState

logger = logging.getLogger(__name__)

VOICE_COMMAND = "/voice"

_AUDIO_MIME = {
    ".ogg": "audio/ogg",
    ".oga": "audio/ogg",
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".wav": "audio/wav",
    ".webm": "audio/webm",
}


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    try:
        if sys.stdout.isatty():
            sys.stdout.write("\033[1A\033[2K\r")
            sys.stdout.write(line + "\n")
            sys.stdout.flush()
        else:
            print(line)
    except Exception:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def _voice_from_file(state: AppState, raw_path: str, emit) -> str:
    """`/voice path/to/note.ogg`: feed a local audio file through the voice pipeline."""
    if not raw_path.strip():
        return f"Uso: {VOICE_COMMAND} <ruta al archivo de audio>"
    path = Path(raw_path.strip()).expanduser()
    try:
        audio = path.read_bytes()
    except OSError as e:
        logger.info("Cannot read audio file %s: %r", path, e)
        return f"❌ No pude leer el archivo {path}."
    mime = _AUDIO_MIME.get(path.suffix.lower(), "application/octet-stream")
    return handle_voice(state, audio, filename=path.name, mime_type=mime, emit=emit)


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts(
        "[CONSOLE] Escribí tus mensajes. /help para ver los comandos, "
        f"{VOICE_COMMAND} <archivo> para una nota de voz, /exit para salir.\n"
    )

    app_name = str(getattr(state.settings, "app_name", "vita"))

    def emit(text: str) -> None:
        _print_ts(text)

    while True:
        try:
            user_input = input(">>> Vos: ").strip()
            _rewrite_prev_line(f"[{_ts_local()}] >>> Vos: {user_input}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            with state.lock:
                if user_input.lower().startswith(VOICE_COMMAND + " ") or user_input.lower() == VOICE_COMMAND:
                    reply = _voice_from_file(state, user_input[len(VOICE_COMMAND) :], emit)
                else:
                    reply = handle_message(state, user_input, emit=emit)
        except Exception:
            logger.exception("Console handler crashed.")
            reply = "Error interno procesando el mensaje."

        _print_ts(f"<<< {app_name}: {reply}\n")

    logger.info("Console connector finished.")
