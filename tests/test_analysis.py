# tests/test_analysis.py

from __future__ import annotations

from datetime import date

import pytest

from vita_companion.analysis.evaluator import calorie_totals, evaluate_day, format_evaluation
from vita_companion.analysis.exercise import analyze_exercise
from vita_companion.analysis.food import analyze_food
from vita_companion.analysis.planner import format_meal_plan, generate_exercise_plan, generate_meal_plan
from vita_companion.analysis.replies import clean_str, parse_json_reply, to_int
from vita_companion.analysis.todo import analyze_todo
from vita_companion.core.errors import ModelReplyError
from vita_companion.journal.journal_models import Exercise, Meal

from .fakes import FakeLLMClient


def test_parse_json_reply_tolerates_fences_and_chatter() -> None:
    assert parse_json_reply('```json\n{"name": "pizza"}\n```') == {"name": "pizza"}
    assert parse_json_reply('Claro! {"a": 1} espero que sirva') == {"a": 1}


@pytest.mark.parametrize("raw", ["", "no json here", "[1, 2]", "{broken"])
def test_parse_json_reply_errors(raw: str) -> None:
    with pytest.raises(ModelReplyError):
        parse_json_reply(raw)


def test_to_int_and_clean_str() -> None:
    assert to_int("350") == 350
    assert to_int("300-400") == 350
    assert to_int("30 minutos") == 30
    assert to_int(12.6) == 13
    assert to_int("unknown") is None
    assert to_int(None) is None
    assert to_int(True) is None
    assert clean_str(" Unknown ") == ""
    assert clean_str(None) == ""
    assert clean_str(" pan ") == "pan"


def test_analyze_food() -> None:
    llm = FakeLLMClient('{"name": "milanesa con puré", "calories": "600-700"}')
    food = analyze_food(llm, "una milanesa con puré")
    assert food.name == "milanesa con puré"
    assert food.calories == 650
    assert "una milanesa con puré" in llm.prompts[0]


def test_analyze_food_without_name_is_an_error() -> None:
    with pytest.raises(ModelReplyError):
        analyze_food(FakeLLMClient('{"calories": 100}'), "algo")


def test_analyze_exercise() -> None:
    ex = analyze_exercise(FakeLLMClient('{"name": "correr", "calories": 300, "duration": "30 minutes"}'), "corrí")
    assert (ex.name, ex.calories, ex.duration_minutes) == ("correr", 300, 30)


def test_analyze_todo_keeps_valid_dates_only() -> None:
    today = date(2025, 3, 5)

    llm = FakeLLMClient('{"task": "llamar al médico", "due_date": "2025-03-06"}')
    draft = analyze_todo(llm, "tengo que llamar al médico mañana", today)
    assert draft.task == "llamar al médico"
    assert draft.due_date == "2025-03-06"
    assert "2025-03-05" in llm.prompts[0]
    assert "2025-03-06" in llm.prompts[0]

    draft = analyze_todo(FakeLLMClient('{"task": "comprar pan", "due_date": "el viernes"}'), "pan", today)
    assert draft.due_date is None

    draft = analyze_todo(FakeLLMClient('{"task": "comprar pan", "due_date": null}'), "pan", today)
    assert draft.due_date is None


def test_evaluate_day() -> None:
    meals = [Meal(1, "2025-03-05", "ensalada", 100, 0.0), Meal(2, "2025-03-05", "pizza", None, 0.0)]
    exercises = [Exercise(1, "2025-03-05", "correr", 30, 300, 0.0)]
    assert calorie_totals(meals, exercises).net == -200

    llm = FakeLLMClient(
        '{"analisisComidas": "Poca proteína", "analisisEjercicios": "Bien", '
        '"recomendaciones": "Más agua", "calificacion": 14, "sugerenciasSiguienteDia": "Caminar"}'
    )
    ev = evaluate_day(llm, meals, exercises)
    assert ev.score == 10
    assert ev.meals_analysis == "Poca proteína"
    assert "Calorías consumidas: 100" in llm.prompts[0]

    text = format_evaluation(ev)
    assert "Neto: -200 kcal" in text
    assert "10/10" in text


def test_meal_plan() -> None:
    llm = FakeLLMClient(
        '{"weeklyCalories": 14000, "dailyProteinGrams": "120g", "recommendations": ["Tomar agua"],'
        ' "mealPlan": {"monday": {"breakfast": "avena", "lunch": "pollo", "snack": "fruta", "dinner": "sopa"}}}'
    )
    plan = generate_meal_plan(llm, "perfil")
    assert plan.daily_protein_grams == 120
    assert list(plan.days) == ["monday"]

    text = format_meal_plan(plan)
    assert "📅 LUNES" in text
    assert "🌅 Desayuno: avena" in text
    assert "Tomar agua" in text


def test_meal_plan_without_plan_is_an_error() -> None:
    with pytest.raises(ModelReplyError):
        generate_meal_plan(FakeLLMClient('{"weeklyCalories": 14000}'), "perfil")


def test_exercise_plan_is_free_text() -> None:
    text = generate_exercise_plan(FakeLLMClient("Lunes: correr 30 minutos"), "perfil")
    assert "Lunes: correr 30 minutos" in text
    assert text.startswith("🏋️ PLAN DE EJERCICIO SEMANAL")

    with pytest.raises(ModelReplyError):
        generate_exercise_plan(FakeLLMClient(""), "perfil")
