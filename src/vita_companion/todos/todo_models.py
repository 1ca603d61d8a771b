# src/vita_companion/todos/todo_models.py

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Task:
    """
    A to-do record.

    Notes:
    - due_date is an ISO calendar date ("YYYY-MM-DD") without time or zone;
      it is interpreted against the configured local offset at display time.
    - completing a task never clears due_date.
    """

    id: int
    description: str
    due_date: str | None = None
    completed: bool = False
    created_at: float = 0.0
