# src/vita_companion/todos/todo_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from datetime import UTC, datetime
from pathlib import Path

from ..core.errors import StorageError
from .todo_models import Task

logger = logging.getLogger(__name__)


def _parse_created_at(raw: object) -> float:
    """
    UNIX timestamp from a created_at cell.

    Older tables store SQLite CURRENT_TIMESTAMP text ("YYYY-MM-DD HH:MM:SS", UTC).
    Anything else unreadable becomes 0.0.
    """
    if raw is None or raw == "":
        return 0.0
    if isinstance(raw, int | float):
        return float(raw)
    s = str(raw).strip()
    try:
        return float(s)
    except ValueError:
        pass
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        logger.warning("Unreadable todo created_at=%r; using 0", raw)
        return 0.0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.timestamp()


class TodoStore:
    """
    SQLite to-do store.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection

    Every sqlite3.Error is re-raised as StorageError so callers can tell
    backend failures apart from bad input.
    """

    def __init__(self, db_path: str | Path = "todos.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._ensure_schema()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to initialize todo store at {self._db_path}") from e
        logger.info("TodoStore ready db=%s total=%s", self._db_path, self.count_tasks())

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS todos (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    task TEXT NOT NULL,
                    completed INTEGER NOT NULL DEFAULT 0,
                    due_date TEXT,
                    created_at REAL NOT NULL
                )
                """
            )

            cur.execute("PRAGMA table_info(todos)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE todos ADD COLUMN {name} {decl}")
                logger.info("TodoStore migration: added column %s", name)

            add_col("completed", "INTEGER NOT NULL DEFAULT 0")
            add_col("due_date", "TEXT")
            add_col("created_at", "REAL NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_todos_due ON todos(completed, due_date)")
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            description=str(row["task"] or ""),
            due_date=row["due_date"] or None,
            completed=bool(row["completed"]),
            created_at=_parse_created_at(row["created_at"]),
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        try:
            conn = self._get_conn()
            try:
                (n,) = conn.execute("SELECT COUNT(*) FROM todos").fetchone()
                return int(n)
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError("Failed to count todos") from e

    def list_all_tasks(self) -> list[Task]:
        """
        All tasks, unfiltered.

        Default order: due_date ASC (NULLs first), open before completed, newest first.
        Aggregation does not rely on it.
        """
        try:
            conn = self._get_conn()
            try:
                rows = conn.execute(
                    """
                    SELECT *
                    FROM todos
                    ORDER BY due_date ASC, completed ASC, created_at DESC
                    """
                ).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.exception("Error fetching todos")
            raise StorageError("Failed to fetch todos from database") from e
        return [self._row_to_task(r) for r in rows]

    def get_task(self, task_id: int) -> Task | None:
        try:
            conn = self._get_conn()
            try:
                row = conn.execute("SELECT * FROM todos WHERE id = ?", (int(task_id),)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to fetch todo {task_id}") from e
        return self._row_to_task(row) if row else None

    def create_task(self, description: str, due_date: str | None = None) -> Task:
        if not description or not description.strip():
            raise ValueError("description is required")

        now = time.time()
        due = (due_date or "").strip() or None
        try:
            conn = self._get_conn()
            try:
                cur = conn.execute(
                    "INSERT INTO todos(task, completed, due_date, created_at) VALUES (?, 0, ?, ?)",
                    (description.strip(), due, now),
                )
                conn.commit()
                rowid = cur.lastrowid
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.exception("Error saving todo")
            raise StorageError("Failed to save todo to database") from e

        if rowid is None:
            raise StorageError("SQLite did not return lastrowid for todos insert")

        task = Task(id=int(rowid), description=description.strip(), due_date=due, completed=False, created_at=now)
        logger.info("Todo saved id=%s due_date=%s", task.id, task.due_date)
        return task

    def set_completed(self, task_id: int, completed: bool) -> bool:
        """Set the flag explicitly. Returns False if the id does not exist."""
        try:
            conn = self._get_conn()
            try:
                cur = conn.execute(
                    "UPDATE todos SET completed = ? WHERE id = ?",
                    (1 if completed else 0, int(task_id)),
                )
                conn.commit()
                found = cur.rowcount == 1
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.exception("Error updating todo id=%s", task_id)
            raise StorageError("Failed to update todo in database") from e
        logger.debug("Todo set_completed id=%s completed=%s found=%s", task_id, completed, found)
        return found

    def toggle_completed(self, task_id: int) -> bool | None:
        """
        Flip the completed flag in a single statement.

        Returns the new state, or None if the id does not exist.
        """
        try:
            conn = self._get_conn()
            try:
                cur = conn.execute(
                    "UPDATE todos SET completed = NOT completed WHERE id = ?",
                    (int(task_id),),
                )
                if cur.rowcount != 1:
                    conn.rollback()
                    return None
                row = conn.execute("SELECT completed FROM todos WHERE id = ?", (int(task_id),)).fetchone()
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.exception("Error toggling todo id=%s", task_id)
            raise StorageError("Failed to toggle todo in database") from e

        new_state = bool(row["completed"])
        logger.info("Todo toggled id=%s completed=%s", task_id, new_state)
        return new_state

    def delete_task(self, task_id: int) -> bool:
        """Permanent delete. Returns False if the id does not exist."""
        try:
            conn = self._get_conn()
            try:
                cur = conn.execute("DELETE FROM todos WHERE id = ?", (int(task_id),))
                conn.commit()
                found = cur.rowcount == 1
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.exception("Error deleting todo id=%s", task_id)
            raise StorageError("Failed to delete todo from database") from e
        logger.info("Todo deleted id=%s found=%s", task_id, found)
        return found
