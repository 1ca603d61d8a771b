# src/vita_companion/journal/journal_models.py

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Meal:
    id: int
    date: str  # local ISO date the meal was logged
    name: str
    calories: int | None
    created_at: float


@dataclass(slots=True)
class Exercise:
    id: int
    date: str
    name: str
    duration_minutes: int | None
    calories: int | None
    created_at: float
