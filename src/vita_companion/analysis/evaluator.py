# src/vita_companion/analysis/evaluator.py

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..core.ports import LLMClient
from ..journal.journal_models import Exercise, Meal
from .replies import ask_json, to_int

EVALUATION_PROMPT = """
Como nutricionista y entrenador personal virtual, evaluá el día basado en las comidas y ejercicios.

Información del día:
Comidas:
{meals}

Ejercicios:
{exercises}

Resumen calórico:
- Calorías consumidas: {consumed}
- Calorías quemadas: {burned}
- Balance calórico neto: {net}

Proporcioná una evaluación detallada que incluya:
1. Un análisis de las comidas y su distribución
2. Un análisis de los ejercicios realizados y su efectividad
3. Recomendaciones específicas para mejorar
4. Una calificación general del día (del 1 al 10)
5. Sugerencias para el día siguiente

Respondé SOLO en formato JSON con esta estructura:
{
  "analisisComidas": "string",
  "analisisEjercicios": "string",
  "recomendaciones": "string",
  "calificacion": number,
  "sugerenciasSiguienteDia": "string"
}

La respuesta debe ser específica, personalizada y motivadora.
""".strip()


@dataclass(slots=True, frozen=True)
class CalorieTotals:
    consumed: int
    burned: int

    @property
    def net(self) -> int:
        return self.consumed - self.burned


@dataclass(slots=True, frozen=True)
class DayEvaluation:
    meals_analysis: str
    exercise_analysis: str
    recommendations: str
    score: int | None
    next_day_suggestions: str
    totals: CalorieTotals


def calorie_totals(meals: Sequence[Meal], exercises: Sequence[Exercise]) -> CalorieTotals:
    return CalorieTotals(
        consumed=sum(m.calories or 0 for m in meals),
        burned=sum(e.calories or 0 for e in exercises),
    )


def _meal_lines(meals: Sequence[Meal]) -> str:
    if not meals:
        return "- (sin comidas registradas)"
    return "\n".join(f"- {m.name} ({m.calories or 0} calorías)" for m in meals)


def _exercise_lines(exercises: Sequence[Exercise]) -> str:
    if not exercises:
        return "- (sin ejercicios registrados)"
    return "\n".join(
        f"- {e.name} ({e.calories or 0} calorías quemadas, duración: {e.duration_minutes or 0} minutos)"
        for e in exercises
    )


def evaluate_day(llm: LLMClient, meals: Sequence[Meal], exercises: Sequence[Exercise]) -> DayEvaluation:
    totals = calorie_totals(meals, exercises)
    prompt = (
        EVALUATION_PROMPT.replace("{meals}", _meal_lines(meals))
        .replace("{exercises}", _exercise_lines(exercises))
        .replace("{consumed}", str(totals.consumed))
        .replace("{burned}", str(totals.burned))
        .replace("{net}", str(totals.net))
    )
    data = ask_json(llm, prompt)

    score = to_int(data.get("calificacion"))
    if score is not None:
        score = max(1, min(10, score))

    return DayEvaluation(
        meals_analysis=str(data.get("analisisComidas") or "").strip(),
        exercise_analysis=str(data.get("analisisEjercicios") or "").strip(),
        recommendations=str(data.get("recomendaciones") or "").strip(),
        score=score,
        next_day_suggestions=str(data.get("sugerenciasSiguienteDia") or "").strip(),
        totals=totals,
    )


def format_evaluation(ev: DayEvaluation) -> str:
    score = f"{ev.score}/10" if ev.score is not None else "sin calificación"
    return (
        "📊 EVALUACIÓN DEL DÍA\n\n"
        f"🔢 Consumidas: {ev.totals.consumed} kcal | Quemadas: {ev.totals.burned} kcal | "
        f"Neto: {ev.totals.net} kcal\n\n"
        f"🍽 Análisis de comidas\n{ev.meals_analysis}\n\n"
        f"💪 Análisis de ejercicios\n{ev.exercise_analysis}\n\n"
        f"📝 Recomendaciones\n{ev.recommendations}\n\n"
        f"⭐ Calificación del día: {score}\n\n"
        f"🎯 Sugerencias para mañana\n{ev.next_day_suggestions}"
    )
