# src/vita_companion/analysis/food.py

from __future__ import annotations

from dataclasses import dataclass

from ..core.errors import ModelReplyError
from ..core.ports import LLMClient
from .replies import ask_json, clean_str, to_int

FOOD_PROMPT = """
I will provide you with a description of a food or dish. Extract the name of the food and its
approximate calorie count and return ONLY this JSON object:
{ "name": "name of the food", "calories": "approximate calories of the food" }

Rules:
- Always include a valid calorie estimate based on standard portion sizes or typical servings.
- If the description includes multiple foods, focus on the main dish or give a combined count.
- Be specific: for a range like "300-400" return "350".
- Always write the name of the food in Spanish.

Example response:
{ "name": "ensalada", "calories": "100" }

The description is: {text}
""".strip()


@dataclass(slots=True, frozen=True)
class FoodEstimate:
    name: str
    calories: int | None


def analyze_food(llm: LLMClient, text: str) -> FoodEstimate:
    data = ask_json(llm, FOOD_PROMPT.replace("{text}", text.strip()))
    name = clean_str(data.get("name"))
    if not name:
        raise ModelReplyError("food reply has no name")
    return FoodEstimate(name=name, calories=to_int(data.get("calories")))
