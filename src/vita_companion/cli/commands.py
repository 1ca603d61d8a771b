# src/vita_companion/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..analysis.evaluator import evaluate_day, format_evaluation
from ..analysis.planner import format_meal_plan, generate_exercise_plan, generate_meal_plan
from ..core import chat
from ..core.state import AppState
from ..journal.journal_format import format_exercise_history, format_meal_history

CommandEmitter = Callable[[str], None]
CommandHandler4 = Callable[[AppState, list[str], str | None, str | None], str]
CommandHandler5 = Callable[
    [AppState, list[str], str | None, str | None, CommandEmitter | None], str
]
CommandHandler = CommandHandler4 | CommandHandler5

logger = logging.getLogger(__name__)


class CommandRegistry:
    """
    Slash-command registry used by connectors (/help, /todos, ...).

    Prefix commands ("/done_12") are registered with register_prefix(); their
    handler receives the text after the prefix as args[0].
    """

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._prefixes: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def register_prefix(self, prefix: str, handler: CommandHandler, help_text: str) -> None:
        key = prefix.lower()
        self._prefixes[key] = handler
        self._help[f"{key}N"] = help_text

    def _resolve(self, name: str, args: list[str]) -> tuple[CommandHandler | None, list[str]]:
        handler = self._handlers.get(name)
        if handler is not None:
            return handler, args
        for prefix, prefix_handler in self._prefixes.items():
            if name.startswith(prefix):
                return prefix_handler, [name[len(prefix) :], *args]
        return None, args

    def handle(
        self,
        state: AppState,
        line: str,
        user_id: str | None = None,
        room_id: str | None = None,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Comando vacío. Usá /help para ver los comandos disponibles."

        name = parts[0].lower()
        handler, args = self._resolve(name, parts[1:])
        if handler is None:
            return f"Comando desconocido: /{name}. Usá /help para ver los comandos disponibles."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 5

        if nparams >= 5:
            h5 = cast(CommandHandler5, handler)
            return h5(state, args, user_id, room_id, emit)

        h4 = cast(CommandHandler4, handler)
        return h4(state, args, user_id, room_id)

    def build_help(self) -> str:
        lines = ["🤖 Comandos disponibles:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("")
        lines.append("💡 También podés enviar notas de voz describiendo comidas, ejercicios o tareas.")
        return "\n".join(lines)


registry = CommandRegistry()


def _emit(emit: CommandEmitter | None, text: str) -> None:
    if emit is None:
        return
    try:
        emit(text)
    except Exception:
        logger.debug("Progress emit failed.", exc_info=True)


def cmd_help(state: AppState, args: list[str], user_id: str | None, room_id: str | None) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str], user_id: str | None, room_id: str | None) -> str:
    s = state.settings
    models = ", ".join(list(getattr(s, "llm_models", []) or []))
    try:
        total = str(state.todos.count_tasks())
    except Exception:
        logger.exception("count_tasks failed")
        total = "?"
    return (
        "Estado:\n"
        f"  Modelos (prioridad -> fallback): {models}\n"
        f"  Zona horaria: UTC{float(s.local_utc_offset_hours):+g}\n"
        f"  Tareas guardadas: {total}"
    )


def _make_add_command(kind: str) -> CommandHandler4:
    def handler(state: AppState, args: list[str], user_id: str | None, room_id: str | None) -> str:
        text = " ".join(args).strip()
        if not text:
            return chat.request_input(state, kind, user_id, room_id)
        return chat.run_action(state, kind, text)

    handler.__name__ = f"cmd_add_{kind}"
    return handler


def cmd_todos(
    state: AppState,
    args: list[str],
    user_id: str | None,
    room_id: str | None,
    emit: CommandEmitter | None = None,
) -> str:
    _emit(emit, "📋 Cargando tu lista de tareas...")
    try:
        return chat.render_todo_list(state)
    except Exception as e:
        logger.exception("Rendering the todo list failed.")
        return chat.user_error_text(e)


def cmd_done(state: AppState, args: list[str], user_id: str | None, room_id: str | None) -> str:
    return chat.toggle_todo(state, args[0] if args else "")


def cmd_delete(state: AppState, args: list[str], user_id: str | None, room_id: str | None) -> str:
    return chat.delete_todo(state, args[0] if args else "")


def cmd_all_meals(
    state: AppState,
    args: list[str],
    user_id: str | None,
    room_id: str | None,
    emit: CommandEmitter | None = None,
) -> str:
    _emit(emit, "📋 Cargando tu historial de comidas...")
    try:
        return format_meal_history(state.journal.list_meals())
    except Exception as e:
        logger.exception("Loading meals failed.")
        return chat.user_error_text(e)


def cmd_all_exercises(
    state: AppState,
    args: list[str],
    user_id: str | None,
    room_id: str | None,
    emit: CommandEmitter | None = None,
) -> str:
    _emit(emit, "📋 Cargando tu historial de ejercicios...")
    try:
        return format_exercise_history(state.journal.list_exercises())
    except Exception as e:
        logger.exception("Loading exercises failed.")
        return chat.user_error_text(e)


def cmd_evaluate_day(
    state: AppState,
    args: list[str],
    user_id: str | None,
    room_id: str | None,
    emit: CommandEmitter | None = None,
) -> str:
    _emit(emit, "📊 Analizando tu día...")
    try:
        today = chat.today_for(state).isoformat()
        meals = state.journal.meals_on(today)
        exercises = state.journal.exercises_on(today)
        if not meals and not exercises:
            return "❌ No hay registros de comidas ni ejercicios para el día de hoy."
        return format_evaluation(evaluate_day(state.llm, meals, exercises))
    except Exception as e:
        logger.exception("Evaluating the day failed.")
        return chat.user_error_text(
            e, "Lo siento, hubo un error al evaluar tu día. Por favor intentá nuevamente."
        )


def cmd_meal_plan(
    state: AppState,
    args: list[str],
    user_id: str | None,
    room_id: str | None,
    emit: CommandEmitter | None = None,
) -> str:
    _emit(emit, "Generando plan de alimentación personalizado...")
    try:
        return format_meal_plan(generate_meal_plan(state.llm, state.settings.user_profile))
    except Exception as e:
        logger.exception("Meal plan generation failed.")
        return chat.user_error_text(
            e, "Lo siento, hubo un error generando el plan de alimentación. Por favor intentá nuevamente."
        )


def cmd_exercise_plan(
    state: AppState,
    args: list[str],
    user_id: str | None,
    room_id: str | None,
    emit: CommandEmitter | None = None,
) -> str:
    _emit(emit, "Generando plan de ejercicio personalizado...")
    try:
        return generate_exercise_plan(state.llm, state.settings.user_profile)
    except Exception as e:
        logger.exception("Exercise plan generation failed.")
        return chat.user_error_text(
            e, "Lo siento, hubo un error generando el plan de ejercicio. Por favor intentá nuevamente."
        )


def handle_message(
    state: AppState,
    text: str,
    user_id: str | None = None,
    room_id: str | None = None,
    emit: CommandEmitter | None = None,
) -> str:
    """Entry point for connectors: slash commands first, then plain text."""
    text = (text or "").strip()
    reply = registry.handle(state, text, user_id=user_id, room_id=room_id, emit=emit)
    if reply is not None:
        return reply
    return chat.reply_to_text(state, text, user_id=user_id, room_id=room_id)


registry.register("help", cmd_help, help_text="Mostrar los comandos disponibles.", aliases=["h", "?", "start"])
registry.register("status", cmd_status, help_text="Mostrar la configuración actual.")
registry.register("addmeal", _make_add_command("meal"), help_text="Registrar una comida.")
registry.register("addexercise", _make_add_command("exercise"), help_text="Registrar un ejercicio.")
registry.register("addtodo", _make_add_command("todo"), help_text="Agregar una tarea (podés incluir 'para [fecha]').")
registry.register("todos", cmd_todos, help_text="Ver la lista de tareas.")
registry.register_prefix("done_", cmd_done, help_text="Completar (o reabrir) la tarea N.")
registry.register_prefix("delete_", cmd_delete, help_text="Eliminar la tarea N.")
registry.register("allmymeals", cmd_all_meals, help_text="Ver el historial de comidas.")
registry.register("allexercises", cmd_all_exercises, help_text="Ver el historial de ejercicios.")
registry.register("evaluateday", cmd_evaluate_day, help_text="Evaluar el día actual.")
registry.register("mealplan", cmd_meal_plan, help_text="Generar un plan de alimentación.")
registry.register("exerciseplan", cmd_exercise_plan, help_text="Generar un plan de ejercicios.")
