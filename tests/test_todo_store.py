# tests/test_todo_store.py

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from pathlib import Path

import pytest

from vita_companion.todos.todo_aggregator import aggregate
from vita_companion.todos.todo_store import TodoStore


def test_create_list_toggle_delete(tmp_path: Path) -> None:
    store = TodoStore(tmp_path / "todos.sqlite3")

    a = store.create_task("  comprar pan  ", "2025-03-06")
    b = store.create_task("leer", None)
    assert a.id > 0 and b.id > a.id
    assert a.description == "comprar pan"
    assert store.count_tasks() == 2

    assert store.toggle_completed(a.id) is True
    done = store.get_task(a.id)
    assert done is not None
    assert done.completed is True
    # Completing never clears the due date.
    assert done.due_date == "2025-03-06"

    assert store.toggle_completed(a.id) is False
    assert store.get_task(a.id).completed is False  # type: ignore[union-attr]

    assert store.delete_task(b.id) is True
    assert store.delete_task(b.id) is False
    assert [t.id for t in store.list_all_tasks()] == [a.id]


def test_unknown_ids(tmp_path: Path) -> None:
    store = TodoStore(tmp_path / "todos.sqlite3")
    assert store.get_task(999) is None
    assert store.toggle_completed(999) is None
    assert store.set_completed(999, True) is False


def test_set_completed_is_explicit(tmp_path: Path) -> None:
    store = TodoStore(tmp_path / "todos.sqlite3")
    t = store.create_task("x")
    assert store.set_completed(t.id, True) is True
    assert store.set_completed(t.id, True) is True
    assert store.get_task(t.id).completed is True  # type: ignore[union-attr]


def test_empty_description_is_rejected(tmp_path: Path) -> None:
    store = TodoStore(tmp_path / "todos.sqlite3")
    with pytest.raises(ValueError):
        store.create_task("   ")
    assert store.count_tasks() == 0


def test_blank_due_date_is_stored_as_null(tmp_path: Path) -> None:
    store = TodoStore(tmp_path / "todos.sqlite3")
    t = store.create_task("x", "  ")
    assert t.due_date is None
    assert store.get_task(t.id).due_date is None  # type: ignore[union-attr]


def test_legacy_table_is_migrated(tmp_path: Path) -> None:
    db = tmp_path / "todos.sqlite3"
    conn = sqlite3.connect(str(db))
    conn.execute("CREATE TABLE todos (id INTEGER PRIMARY KEY AUTOINCREMENT, task TEXT NOT NULL)")
    conn.execute("INSERT INTO todos(task) VALUES ('vieja')")
    conn.commit()
    conn.close()

    store = TodoStore(db)
    tasks = store.list_all_tasks()
    assert len(tasks) == 1
    assert tasks[0].description == "vieja"
    assert tasks[0].completed is False
    assert tasks[0].due_date is None


def test_text_timestamps_from_older_table_are_read(tmp_path: Path) -> None:
    db = tmp_path / "todos.sqlite3"
    conn = sqlite3.connect(str(db))
    conn.execute(
        """
        CREATE TABLE todos (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            task TEXT NOT NULL,
            completed BOOLEAN DEFAULT 0,
            due_date DATE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """
    )
    conn.execute("INSERT INTO todos(task, created_at) VALUES ('vieja', '2025-03-01 12:00:00')")
    conn.execute("INSERT INTO todos(task, created_at) VALUES ('rota', 'ayer')")
    conn.commit()
    conn.close()

    store = TodoStore(db)
    store.create_task("nueva")
    by_name = {t.description: t for t in store.list_all_tasks()}

    assert set(by_name) == {"vieja", "rota", "nueva"}
    assert by_name["vieja"].created_at == datetime(2025, 3, 1, 12, 0, tzinfo=UTC).timestamp()
    assert by_name["rota"].created_at == 0.0
    assert by_name["nueva"].created_at > by_name["vieja"].created_at


def test_completed_task_leaves_dated_buckets_and_keeps_due_date(tmp_path: Path) -> None:
    store = TodoStore(tmp_path / "todos.sqlite3")
    t = store.create_task("pagar luz", "2025-03-01")
    now = datetime(2025, 3, 5, 12, 0, tzinfo=UTC)

    assert [x.id for x in aggregate(store.list_all_tasks(), now).overdue] == [t.id]

    store.toggle_completed(t.id)
    result = aggregate(store.list_all_tasks(), now)
    assert [x.id for x in result.completed] == [t.id]
    assert result.overdue == [] and result.due_today == [] and result.upcoming == []

    store.toggle_completed(t.id)
    reopened = store.get_task(t.id)
    assert reopened is not None
    assert reopened.due_date == "2025-03-01"
    assert [x.id for x in aggregate(store.list_all_tasks(), now).overdue] == [t.id]
