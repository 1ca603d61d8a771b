# src/vita_companion/analysis/exercise.py

from __future__ import annotations

from dataclasses import dataclass

from ..core.errors import ModelReplyError
from ..core.ports import LLMClient
from .replies import ask_json, clean_str, to_int

EXERCISE_PROMPT = """
I will provide you with a description of an exercise. Extract the name of the exercise, the
approximate calories burned and the duration, and return ONLY this JSON object:
{ "name": "name of the exercise", "calories": "approximate calories burned", "duration": "duration in minutes" }

Rules:
- Always include a valid calorie estimate based on the described exercise.
- If several exercises are described, focus on the main one or give a combined count.
- Be specific: for a range like "300-400" return "350".
- Always write the name of the exercise in Spanish.

Example response:
{ "name": "correr", "calories": "300", "duration": "30" }

The description is: {text}
""".strip()


@dataclass(slots=True, frozen=True)
class ExerciseEstimate:
    name: str
    calories: int | None
    duration_minutes: int | None


def analyze_exercise(llm: LLMClient, text: str) -> ExerciseEstimate:
    data = ask_json(llm, EXERCISE_PROMPT.replace("{text}", text.strip()))
    name = clean_str(data.get("name"))
    if not name:
        raise ModelReplyError("exercise reply has no name")
    return ExerciseEstimate(
        name=name,
        calories=to_int(data.get("calories")),
        duration_minutes=to_int(data.get("duration")),
    )
