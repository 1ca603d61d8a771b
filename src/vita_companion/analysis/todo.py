# src/vita_companion/analysis/todo.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from ..core.errors import ModelReplyError
from ..core.ports import LLMClient
from ..todos.todo_aggregator import parse_due_date
from .replies import ask_json, clean_str

TODO_PROMPT = """
Hoy es {today}. Como asistente de gestión de tareas, analizá el siguiente texto que describe
una tarea y extraé la tarea principal y su fecha límite si se menciona.

Reglas:
1. La tarea debe comenzar con un verbo en infinitivo.
2. Eliminá palabras innecesarias pero mantené el contexto importante.
3. Fechas:
   - Entendé referencias relativas como "hoy", "mañana", "próximo [día]".
   - Convertí todas las fechas al formato YYYY-MM-DD.
   - Si no hay fecha mencionada, devolvé null.
   - Si mencionan un día de la semana, calculá la próxima ocurrencia desde hoy.

Devolvé SOLO este JSON:
{ "task": "tarea formateada", "due_date": "YYYY-MM-DD o null" }

Ejemplos (hoy es {today}):
Entrada: "tengo que llamar al médico mañana"
Salida: { "task": "llamar al médico", "due_date": "{tomorrow}" }

Entrada: "necesito comprar pan"
Salida: { "task": "comprar pan", "due_date": null }

El texto a analizar es: {text}
""".strip()


@dataclass(slots=True, frozen=True)
class TodoDraft:
    task: str
    due_date: str | None


def analyze_todo(llm: LLMClient, text: str, today: date) -> TodoDraft:
    """
    Ask the model for a normalised task + due date.

    A due date that is not a valid ISO date is dropped rather than stored.
    """
    prompt = (
        TODO_PROMPT.replace("{today}", today.isoformat())
        .replace("{tomorrow}", (today + timedelta(days=1)).isoformat())
        .replace("{text}", text.strip())
    )
    data = ask_json(llm, prompt)
    task = clean_str(data.get("task"))
    if not task:
        raise ModelReplyError("todo reply has no task")
    due = parse_due_date(clean_str(data.get("due_date")) or None)
    return TodoDraft(task=task, due_date=due.isoformat() if due else None)
