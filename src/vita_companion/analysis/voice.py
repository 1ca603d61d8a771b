# src/vita_companion/analysis/voice.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.ports import LLMClient
from .replies import ask_json, clean_str, to_int

VOICE_KINDS = ("meal", "exercise", "todo", "unknown")

VOICE_INTENT_PROMPT = """
Today is {today}. Below is the transcript of a voice note. Understand its context: it can be a
meal, an exercise, or a todo.
- meal: return the name of the food and its calories.
- exercise: return the name of the exercise, calories burned and duration in minutes.
- todo: return the task and the due date if mentioned (YYYY-MM-DD).
If the text is not clear, use type "unknown".

Return ONLY this JSON object:
{"type": "meal" | "exercise" | "todo" | "unknown", "name": "...", "calories": "...",
 "duration": "...", "due_date": "..."}

Examples:
"comí una ensalada de lechuga y tomate" -> {"type": "meal", "name": "ensalada", "calories": "100"}
"salí a correr 30 minutos" -> {"type": "exercise", "name": "correr", "calories": "300", "duration": "30"}
"recordar comprar leche para mañana" -> {"type": "todo", "name": "comprar leche", "due_date": "mañana"}

Transcript: {text}
""".strip()


@dataclass(slots=True, frozen=True)
class VoiceIntent:
    text: str
    kind: str
    name: str = ""
    calories: int | None = None
    duration_minutes: int | None = None
    due_date: str | None = None


def interpret_transcript(llm: LLMClient, text: str, today: date) -> VoiceIntent:
    """Classify a transcript. Blank transcripts are "unknown" without a model call."""
    text = (text or "").strip()
    if not text:
        return VoiceIntent(text="", kind="unknown")

    prompt = VOICE_INTENT_PROMPT.replace("{today}", today.isoformat()).replace("{text}", text)
    data = ask_json(llm, prompt)

    kind = clean_str(data.get("type")).lower()
    if kind not in VOICE_KINDS:
        kind = "unknown"

    return VoiceIntent(
        text=text,
        kind=kind,
        name=clean_str(data.get("name")),
        calories=to_int(data.get("calories")),
        duration_minutes=to_int(data.get("duration")),
        due_date=clean_str(data.get("due_date")) or None,
    )
