# src/vita_companion/core/chat.py

"""
Core chat orchestration.

This module is transport-agnostic:
- connectors provide inbound text (or voice bytes) + optional (user_id, room_id),
- the core calls the analysis agents, writes to the stores, and returns reply text,
- connectors decide how to display/send it (console, Matrix, etc.).

Key invariants:
- a failed model call or store write never leaves a partial record behind,
- invalid task ids are rejected before the store is touched,
- pending prompts (/addmeal without text, ...) are per dialog and consumed once.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, date, datetime

from ..analysis.exercise import analyze_exercise
from ..analysis.food import analyze_food
from ..analysis.todo import analyze_todo
from ..analysis.voice import interpret_transcript
from ..llm.client import friendly_llm_error_message
from ..todos.todo_aggregator import aggregate
from ..todos.todo_formatter import format_todo_list, parse_id_digits
from .clock import local_today
from .errors import ModelReplyError, StorageError
from .state import AppState

logger = logging.getLogger(__name__)

Emitter = Callable[[str], None]

GREETING = "👋 ¡Hola! Usá /help para ver todos los comandos disponibles."
GENERIC_ERROR = "Lo siento, hubo un error procesando tu mensaje. Por favor intentá nuevamente."
STORAGE_ERROR = "❌ No pude acceder a la base de datos. Por favor intentá nuevamente en unos minutos."
MODEL_REPLY_ERROR = "❌ No pude interpretar la respuesta de la IA. Por favor intentá nuevamente."
INVALID_TASK_ID = "❌ ID de tarea inválido"
VOICE_NOT_UNDERSTOOD = "Lo siento, no pude entender el mensaje. Por favor intentá nuevamente."

INPUT_PROMPTS = {
    "meal": (
        "🍽 ¿Qué comiste? Describí tu comida lo más detallado posible.\n"
        "Por ejemplo: 'milanesa con puré' o 'ensalada de lechuga, tomate y zanahoria'"
    ),
    "exercise": (
        "💪 ¿Qué ejercicio realizaste? Incluí el tiempo si es posible.\n"
        "Por ejemplo: '30 minutos de caminata' o 'una hora de gimnasio'"
    ),
    "todo": (
        "📝 ¿Qué tarea querés agregar?\n"
        "Podés incluir una fecha límite agregando 'para [fecha]' al final.\n"
        "Por ejemplo: 'Llamar al médico para mañana' o 'Comprar verduras para el viernes'"
    ),
}


def dialog_key(user_id: str | None, room_id: str | None) -> str:
    """Stable key for per-dialog state. The console (no ids) is a single dialog."""
    if not user_id and not room_id:
        return "local"
    return f"{user_id or ''}||{room_id or ''}"


def today_for(state: AppState, now: datetime | None = None) -> date:
    return local_today(float(state.settings.local_utc_offset_hours), now=now)


def user_error_text(exc: Exception, failure_text: str = GENERIC_ERROR) -> str:
    """Map an exception from an action to the text shown to the user."""
    if isinstance(exc, StorageError):
        return STORAGE_ERROR
    if isinstance(exc, ModelReplyError):
        return MODEL_REPLY_ERROR
    if isinstance(exc, RuntimeError):
        return friendly_llm_error_message(exc)
    return failure_text


# ---- journal ----


def _kcal_text(calories: int | None) -> str:
    return f"{calories}" if calories is not None else "?"


def log_meal(state: AppState, text: str) -> str:
    food = analyze_food(state.llm, text)
    state.journal.add_meal(today_for(state).isoformat(), food.name, food.calories)
    return f"✅ Registré tu comida:\n{food.name} - {_kcal_text(food.calories)} calorías"


def log_exercise(state: AppState, text: str) -> str:
    ex = analyze_exercise(state.llm, text)
    state.journal.add_exercise(today_for(state).isoformat(), ex.name, ex.duration_minutes, ex.calories)
    return (
        f"✅ Registré tu ejercicio:\n{ex.name} - {_kcal_text(ex.calories)} calorías quemadas"
        f" ({ex.duration_minutes or '?'} minutos)"
    )


# ---- todos ----


def _todo_added_text(description: str, due_date: str | None) -> str:
    due = f"\nFecha límite: {due_date}" if due_date else ""
    return f"✅ Tarea agregada:\n{description}{due}"


def add_todo(state: AppState, text: str) -> str:
    draft = analyze_todo(state.llm, text, today_for(state))
    task = state.todos.create_task(draft.task, draft.due_date)
    return _todo_added_text(task.description, task.due_date)


def render_todo_list(state: AppState, now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    offset = float(state.settings.local_utc_offset_hours)
    tasks = state.todos.list_all_tasks()
    result = aggregate(tasks, now, utc_offset_hours=offset)
    if result.rejected:
        logger.warning("Todo list rendered without %d malformed record(s)", len(result.rejected))
    return format_todo_list(
        result,
        result.today,
        completed_limit=int(state.settings.completed_display_limit),
        utc_offset_hours=offset,
    )


def toggle_todo(state: AppState, raw_id: str) -> str:
    task_id = parse_id_digits(raw_id)
    if task_id is None:
        return INVALID_TASK_ID
    try:
        new_state = state.todos.toggle_completed(task_id)
    except StorageError:
        logger.exception("Toggle failed task_id=%s", task_id)
        return "❌ Error al actualizar la tarea"
    if new_state is None:
        return f"❌ No existe la tarea {task_id}."
    if new_state:
        return "✅ ¡Tarea marcada como completada!"
    return "↩️ Tarea marcada como pendiente otra vez."


def delete_todo(state: AppState, raw_id: str) -> str:
    task_id = parse_id_digits(raw_id)
    if task_id is None:
        return INVALID_TASK_ID
    try:
        found = state.todos.delete_task(task_id)
    except StorageError:
        logger.exception("Delete failed task_id=%s", task_id)
        return "❌ Error al eliminar la tarea"
    if not found:
        return f"❌ No existe la tarea {task_id}."
    return "🗑️ Tarea eliminada"


# ---- pending prompts ----

_ACTIONS: dict[str, tuple[Callable[[AppState, str], str], str]] = {
    "meal": (log_meal, "❌ Hubo un error al registrar la comida. Por favor intentá nuevamente."),
    "exercise": (log_exercise, "❌ Hubo un error al registrar el ejercicio. Por favor intentá nuevamente."),
    "todo": (add_todo, "❌ Hubo un error al agregar la tarea. Por favor intentá nuevamente."),
}


def run_action(state: AppState, kind: str, text: str) -> str:
    action, failure_text = _ACTIONS[kind]
    try:
        return action(state, text)
    except Exception as e:
        logger.exception("Action %s failed.", kind)
        return user_error_text(e, failure_text)


def request_input(state: AppState, kind: str, user_id: str | None, room_id: str | None) -> str:
    """Remember that the next plain message in this dialog answers `kind`."""
    state.pending_inputs[dialog_key(user_id, room_id)] = kind
    return INPUT_PROMPTS[kind]


def reply_to_text(state: AppState, text: str, user_id: str | None = None, room_id: str | None = None) -> str:
    """Plain (non-command) text: answer a pending prompt, or point to /help."""
    text = (text or "").strip()
    kind = state.pending_inputs.pop(dialog_key(user_id, room_id), None)
    if kind is None:
        logger.info("Received message without pending prompt: %r", text[:200])
        return GREETING
    if not text:
        state.pending_inputs[dialog_key(user_id, room_id)] = kind
        return INPUT_PROMPTS[kind]
    return run_action(state, kind, text)


# ---- voice ----


def handle_voice(
    state: AppState,
    audio: bytes,
    *,
    filename: str = "voice.ogg",
    mime_type: str = "audio/ogg",
    user_id: str | None = None,
    room_id: str | None = None,
    emit: Emitter | None = None,
) -> str:
    """
    Voice note -> transcript -> intent -> stored record -> confirmation text.

    Meal/exercise intents without a calorie estimate are re-analysed from the
    transcript with the dedicated agent.
    """
    if emit:
        try:
            emit("Procesando tu nota de voz...")
        except Exception:
            logger.debug("Voice progress emit failed.", exc_info=True)

    try:
        transcript = state.transcriber.transcribe(audio, filename=filename, mime_type=mime_type)
        today = today_for(state)
        intent = interpret_transcript(state.llm, transcript, today)
        logger.info("Voice note intent=%s user=%s room=%s", intent.kind, user_id, room_id)

        if intent.kind == "todo":
            draft = analyze_todo(state.llm, intent.text, today)
            task = state.todos.create_task(draft.task, draft.due_date)
            return _todo_added_text(task.description, task.due_date)

        if intent.kind == "exercise":
            name, calories, duration = intent.name, intent.calories, intent.duration_minutes
            if calories is None or not name:
                est = analyze_exercise(state.llm, intent.text)
                name, calories = est.name, est.calories
                duration = duration if duration is not None else est.duration_minutes
            state.journal.add_exercise(today.isoformat(), name, duration, calories)
            return (
                f"✅ Registré tu ejercicio:\n{name} - {_kcal_text(calories)} calorías quemadas"
                f" ({duration or '?'} minutos)"
            )

        if intent.kind == "meal":
            name, calories = intent.name, intent.calories
            if calories is None or not name:
                food = analyze_food(state.llm, intent.text)
                name, calories = food.name, food.calories
            state.journal.add_meal(today.isoformat(), name, calories)
            return f"✅ Registré tu comida:\n{name} - {_kcal_text(calories)} calorías"

        return VOICE_NOT_UNDERSTOOD

    except Exception as e:
        logger.exception("Voice message processing failed.")
        return user_error_text(e, GENERIC_ERROR)
