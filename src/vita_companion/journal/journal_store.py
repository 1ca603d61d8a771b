# src/vita_companion/journal/journal_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any

from ..core.errors import StorageError
from .journal_models import Exercise, Meal

logger = logging.getLogger(__name__)


def _opt_int(v: Any) -> int | None:
    if v is None:
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


class JournalStore:
    """
    SQLite store for the meal / exercise journal.

    Same conventions as TodoStore: one short-lived connection per call,
    sqlite3.Error surfaces as StorageError.
    """

    def __init__(self, db_path: str | Path = "journal.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._ensure_schema()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to initialize journal store at {self._db_path}") from e
        logger.info("JournalStore ready db=%s", self._db_path)

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS meals (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    date TEXT NOT NULL,
                    meal TEXT NOT NULL,
                    calories INTEGER,
                    created_at REAL NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS exercises (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    date TEXT NOT NULL,
                    exercise TEXT NOT NULL,
                    duration INTEGER,
                    calories INTEGER,
                    created_at REAL NOT NULL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_meals_date ON meals(date)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_exercises_date ON exercises(date)")
            conn.commit()
        finally:
            conn.close()

    def _insert(self, sql: str, params: tuple[Any, ...], what: str) -> int:
        try:
            conn = self._get_conn()
            try:
                cur = conn.execute(sql, params)
                conn.commit()
                rowid = cur.lastrowid
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.exception("Error saving %s", what)
            raise StorageError(f"Failed to save {what} to database") from e
        if rowid is None:
            raise StorageError(f"SQLite did not return lastrowid for {what} insert")
        return int(rowid)

    def _select(self, sql: str, params: tuple[Any, ...], what: str) -> list[sqlite3.Row]:
        try:
            conn = self._get_conn()
            try:
                return conn.execute(sql, params).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.exception("Error fetching %s", what)
            raise StorageError(f"Failed to fetch {what} from database") from e

    @staticmethod
    def _row_to_meal(row: sqlite3.Row) -> Meal:
        return Meal(
            id=int(row["id"]),
            date=str(row["date"]),
            name=str(row["meal"] or ""),
            calories=_opt_int(row["calories"]),
            created_at=float(row["created_at"] or 0.0),
        )

    @staticmethod
    def _row_to_exercise(row: sqlite3.Row) -> Exercise:
        return Exercise(
            id=int(row["id"]),
            date=str(row["date"]),
            name=str(row["exercise"] or ""),
            duration_minutes=_opt_int(row["duration"]),
            calories=_opt_int(row["calories"]),
            created_at=float(row["created_at"] or 0.0),
        )

    # ---- meals ----

    def add_meal(self, date: str, name: str, calories: int | None) -> Meal:
        if not name or not name.strip():
            raise ValueError("meal name is required")
        now = time.time()
        meal_id = self._insert(
            "INSERT INTO meals(date, meal, calories, created_at) VALUES (?, ?, ?, ?)",
            (date, name.strip(), calories, now),
            "meal",
        )
        logger.info("Meal saved id=%s date=%s calories=%s", meal_id, date, calories)
        return Meal(id=meal_id, date=date, name=name.strip(), calories=calories, created_at=now)

    def list_meals(self) -> list[Meal]:
        rows = self._select("SELECT * FROM meals ORDER BY date DESC, created_at ASC", (), "meals")
        return [self._row_to_meal(r) for r in rows]

    def meals_on(self, date: str) -> list[Meal]:
        rows = self._select("SELECT * FROM meals WHERE date = ? ORDER BY created_at ASC", (date,), "meals")
        return [self._row_to_meal(r) for r in rows]

    # ---- exercises ----

    def add_exercise(
        self,
        date: str,
        name: str,
        duration_minutes: int | None,
        calories: int | None,
    ) -> Exercise:
        if not name or not name.strip():
            raise ValueError("exercise name is required")
        now = time.time()
        ex_id = self._insert(
            "INSERT INTO exercises(date, exercise, duration, calories, created_at) VALUES (?, ?, ?, ?, ?)",
            (date, name.strip(), duration_minutes, calories, now),
            "exercise",
        )
        logger.info(
            "Exercise saved id=%s date=%s duration=%s calories=%s",
            ex_id,
            date,
            duration_minutes,
            calories,
        )
        return Exercise(
            id=ex_id,
            date=date,
            name=name.strip(),
            duration_minutes=duration_minutes,
            calories=calories,
            created_at=now,
        )

    def list_exercises(self) -> list[Exercise]:
        rows = self._select("SELECT * FROM exercises ORDER BY date DESC, created_at ASC", (), "exercises")
        return [self._row_to_exercise(r) for r in rows]

    def exercises_on(self, date: str) -> list[Exercise]:
        rows = self._select(
            "SELECT * FROM exercises WHERE date = ? ORDER BY created_at ASC",
            (date,),
            "exercises",
        )
        return [self._row_to_exercise(r) for r in rows]
