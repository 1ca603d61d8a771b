# src/vita_companion/journal/journal_format.py

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from ..todos.todo_formatter import format_long_date
from .journal_models import Exercise, Meal

NO_MEALS_MESSAGE = "❌ No hay comidas registradas todavía."
NO_EXERCISES_MESSAGE = "❌ No hay ejercicios registrados todavía."


def _date_header(raw: str) -> str:
    try:
        return format_long_date(date.fromisoformat(raw[:10]))
    except ValueError:
        return raw


def _kcal(calories: int | None) -> str:
    return f"{calories} kcal" if calories is not None else "? kcal"


def format_meal_history(meals: Sequence[Meal]) -> str:
    """Meals grouped by day, in the order given (the store returns newest day first)."""
    if not meals:
        return NO_MEALS_MESSAGE

    lines = ["🍽 Tu historial de comidas", ""]
    current = None
    for meal in meals:
        if meal.date != current:
            if current is not None:
                lines.append("")
            current = meal.date
            lines.append(f"📅 {_date_header(meal.date)}")
        lines.append(f"  • {meal.name} - {_kcal(meal.calories)} 🔥")
    return "\n".join(lines)


def format_exercise_history(exercises: Sequence[Exercise]) -> str:
    if not exercises:
        return NO_EXERCISES_MESSAGE

    lines = ["🏃 Tu historial de ejercicios", ""]
    current = None
    for ex in exercises:
        if ex.date != current:
            if current is not None:
                lines.append("")
            current = ex.date
            lines.append(f"📅 {_date_header(ex.date)}")
        duration = f" ({ex.duration_minutes} min)" if ex.duration_minutes else ""
        lines.append(f"  • {ex.name}{duration} - {_kcal(ex.calories)} 🔥")
    return "\n".join(lines)
