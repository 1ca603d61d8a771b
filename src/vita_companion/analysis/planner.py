# src/vita_companion/analysis/planner.py

from __future__ import annotations

from dataclasses import dataclass, field

from ..core.errors import ModelReplyError
from ..core.ports import LLMClient
from ..llm.client import complete_text
from .replies import ask_json, to_int

DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
DAY_NAMES_ES = {
    "monday": "Lunes",
    "tuesday": "Martes",
    "wednesday": "Miércoles",
    "thursday": "Jueves",
    "friday": "Viernes",
    "saturday": "Sábado",
    "sunday": "Domingo",
}
MEAL_SLOTS = (
    ("breakfast", "🌅 Desayuno"),
    ("lunch", "🍳 Almuerzo"),
    ("snack", "🥪 Merienda"),
    ("dinner", "🌙 Cena"),
)

MEAL_PLAN_PROMPT = """
Generate a weekly meal plan for this person: {profile}

Answer in Argentinian Spanish, using products that are available in Argentina and not expensive.
Return ONLY this JSON object, without markdown or code blocks:
{
  "weeklyCalories": number,
  "dailyProteinGrams": number,
  "recommendations": string[],
  "mealPlan": {
    "monday": { "breakfast": string, "lunch": string, "snack": string, "dinner": string },
    "tuesday": { ... },
    "wednesday": { ... },
    "thursday": { ... },
    "friday": { ... },
    "saturday": { ... },
    "sunday": { ... }
  }
}
""".strip()

EXERCISE_PLAN_PROMPT = """
Generá un plan de ejercicio semanal para esta persona: {profile}

Respondé en español argentino, en texto plano (sin markdown), con un bloque por día
(ejercicios, series/repeticiones o duración) y un par de recomendaciones generales al final.
""".strip()

DISCLAIMER = (
    "⚠️ Importante: Este plan es una guía general. Consultá con un profesional de la salud "
    "antes de comenzar cualquier dieta o rutina."
)


@dataclass(slots=True)
class MealPlan:
    weekly_calories: int | None
    daily_protein_grams: int | None
    recommendations: list[str] = field(default_factory=list)
    days: dict[str, dict[str, str]] = field(default_factory=dict)


def generate_meal_plan(llm: LLMClient, profile: str) -> MealPlan:
    data = ask_json(llm, MEAL_PLAN_PROMPT.replace("{profile}", profile))

    raw_plan = data.get("mealPlan")
    if not isinstance(raw_plan, dict) or not raw_plan:
        raise ModelReplyError("meal plan reply has no mealPlan object")

    days: dict[str, dict[str, str]] = {}
    for day in DAYS:
        meals = raw_plan.get(day)
        if not isinstance(meals, dict):
            continue
        days[day] = {slot: str(meals.get(slot) or "").strip() for slot, _ in MEAL_SLOTS}

    recs = data.get("recommendations") or []
    if isinstance(recs, str):
        recs = [recs]

    return MealPlan(
        weekly_calories=to_int(data.get("weeklyCalories")),
        daily_protein_grams=to_int(data.get("dailyProteinGrams")),
        recommendations=[str(r).strip() for r in recs if str(r).strip()],
        days=days,
    )


def format_meal_plan(plan: MealPlan) -> str:
    lines = ["🍽 PLAN DE ALIMENTACIÓN SEMANAL", ""]
    if plan.weekly_calories is not None:
        lines.append(f"📊 Calorías semanales: {plan.weekly_calories}")
    if plan.daily_protein_grams is not None:
        lines.append(f"💪 Proteína diaria: {plan.daily_protein_grams}g")
    lines.append("")

    if plan.recommendations:
        lines.append("📝 RECOMENDACIONES:")
        lines.extend(f"• {r}" for r in plan.recommendations)
        lines.append("")

    for day in DAYS:
        meals = plan.days.get(day)
        if not meals:
            continue
        lines.append(f"📅 {DAY_NAMES_ES[day].upper()}")
        for slot, label in MEAL_SLOTS:
            lines.append(f"{label}: {meals.get(slot) or '-'}")
        lines.append("")

    lines.append(DISCLAIMER)
    return "\n".join(lines)


def generate_exercise_plan(llm: LLMClient, profile: str) -> str:
    text = complete_text(llm, EXERCISE_PLAN_PROMPT.replace("{profile}", profile))
    if not text:
        raise ModelReplyError("exercise plan reply is empty")
    return f"🏋️ PLAN DE EJERCICIO SEMANAL\n\n{text}\n\n{DISCLAIMER}"
