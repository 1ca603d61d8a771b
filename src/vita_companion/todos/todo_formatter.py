# src/vita_companion/todos/todo_formatter.py

"""
Rendering of an AggregationResult into chat text.

Wire format guarantee: every actionable line contains exactly one "/done_<id>"
token. Commands are parsed back with parse_task_id(): strip the known prefix,
the remainder must be ASCII digits.
"""

from __future__ import annotations

import re
from datetime import date

from ..core.clock import local_date_of_ts
from .todo_aggregator import DEFAULT_UTC_OFFSET_HOURS, AggregationResult, parse_due_date
from .todo_models import Task

DONE_PREFIX = "/done_"
DELETE_PREFIX = "/delete_"

EMPTY_STATE_MESSAGE = "✨ No hay tareas pendientes."

_DIGITS = re.compile(r"[0-9]+")

WEEKDAYS_ES = ("lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo")
MONTHS_ES = (
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
)


def format_long_date(d: date, *, weekday: bool = True) -> str:
    """'miércoles 5 de marzo de 2025' (or without the weekday)."""
    body = f"{d.day} de {MONTHS_ES[d.month - 1]} de {d.year}"
    if not weekday:
        return body
    return f"{WEEKDAYS_ES[d.weekday()]} {body}"


def format_short_date(d: date) -> str:
    return f"{d.day} {MONTHS_ES[d.month - 1][:3]} {d.year}"


def relative_days_text(target: date, today: date) -> str:
    diff = abs((target - today).days)
    if diff == 1:
        return "mañana"
    return f"en {diff} días"


def task_command(prefix: str, task_id: int) -> str:
    return f"{prefix}{int(task_id)}"


def parse_id_digits(raw: str) -> int | None:
    s = (raw or "").strip()
    if not _DIGITS.fullmatch(s):
        return None
    return int(s)


def parse_task_id(text: str, prefix: str) -> int | None:
    """
    Extract the numeric id from "/done_12" style input.

    Returns None for anything that is not prefix + digits.
    """
    s = (text or "").strip()
    if not s.lower().startswith(prefix.lower()):
        return None
    return parse_id_digits(s[len(prefix) :])


def _one_line(text: str) -> str:
    return " ".join((text or "").split())


def _task_line(bullet: str, task: Task, suffix: str = "") -> str:
    return f"{bullet} {task_command(DONE_PREFIX, task.id)} {_one_line(task.description)}{suffix}"


def _created_suffix(task: Task, utc_offset_hours: float) -> str:
    # Timestamps outside the datetime range (e.g. milliseconds) get no date.
    try:
        created = local_date_of_ts(task.created_at, utc_offset_hours)
    except (ValueError, OverflowError, OSError):
        return ""
    return f" ({format_short_date(created)})"


def format_todo_list(
    result: AggregationResult,
    reference_date: date,
    *,
    completed_limit: int | None = 5,
    utc_offset_hours: float = DEFAULT_UTC_OFFSET_HOURS,
) -> str:
    """
    Render buckets in fixed order: overdue, today, upcoming, no date, completed.

    completed_limit caps the completed section to the most recent N tasks
    (by created_at); None shows all.
    """
    if result.is_empty():
        return EMPTY_STATE_MESSAGE

    lines: list[str] = ["📝 LISTA DE TAREAS", ""]

    if result.overdue:
        lines.append("⚠️ Tareas vencidas:")
        for task in result.overdue:
            due = parse_due_date(task.due_date)
            suffix = f" (vencida: {format_long_date(due, weekday=False)})" if due else ""
            lines.append(_task_line("❗", task, suffix))
        lines.append("")

    if result.due_today:
        lines.append(f"🎯 HOY - {format_long_date(reference_date)}:")
        for task in result.due_today:
            lines.append(_task_line("•", task))
        lines.append("")

    if result.upcoming:
        lines.append("📅 Próximas tareas:")
        for group in result.upcoming:
            d = date.fromisoformat(group.date)
            lines.append(f"📌 {format_long_date(d)} ({relative_days_text(d, reference_date)})")
            for task in group.tasks:
                lines.append(_task_line("•", task))
        lines.append("")

    if result.no_date:
        lines.append("📌 Tareas sin fecha:")
        for task in result.no_date:
            lines.append(_task_line("•", task))
        lines.append("")

    if result.completed:
        lines.append("✅ Tareas completadas:")
        recent = sorted(result.completed, key=lambda t: t.created_at, reverse=True)
        shown = recent if completed_limit is None else recent[: max(0, completed_limit)]
        for task in shown:
            lines.append(_task_line("✓", task, _created_suffix(task, utc_offset_hours)))
        hidden = len(recent) - len(shown)
        if hidden > 0:
            lines.append(f"...y {hidden} tareas más...")
        lines.append("")

    lines.append("💡 Acciones:")
    lines.append("  /addtodo para agregar una tarea")
    lines.append(f"  {DONE_PREFIX}N para completar (o reabrir) una tarea")
    lines.append(f"  {DELETE_PREFIX}N para eliminar una tarea")

    return "\n".join(lines)
