# tests/test_todo_formatter.py

from __future__ import annotations

import re
from datetime import UTC, date, datetime

from vita_companion.todos.todo_aggregator import aggregate
from vita_companion.todos.todo_formatter import (
    DELETE_PREFIX,
    DONE_PREFIX,
    EMPTY_STATE_MESSAGE,
    format_long_date,
    format_todo_list,
    parse_task_id,
    relative_days_text,
)
from vita_companion.todos.todo_models import Task

NOW = datetime(2025, 3, 5, 12, 0, tzinfo=UTC)
TODAY = date(2025, 3, 5)


def _ts(y: int, m: int, d: int) -> float:
    return datetime(y, m, d, 15, 0, tzinfo=UTC).timestamp()


def _render(tasks: list[Task], **kwargs) -> str:
    return format_todo_list(aggregate(tasks, NOW), TODAY, **kwargs)


def test_empty_list_renders_empty_state_message() -> None:
    assert _render([]) == EMPTY_STATE_MESSAGE


def test_sections_appear_in_fixed_order() -> None:
    text = _render(
        [
            Task(1, "completada", completed=True, created_at=_ts(2025, 3, 1)),
            Task(2, "sin fecha"),
            Task(3, "futura", "2025-03-06"),
            Task(4, "hoy", "2025-03-05"),
            Task(5, "vencida", "2025-03-01"),
        ]
    )

    headers = ["Tareas vencidas", "HOY", "Próximas tareas", "Tareas sin fecha", "Tareas completadas", "Acciones"]
    positions = [text.index(h) for h in headers]
    assert positions == sorted(positions)


def test_lines_carry_done_command_and_dates() -> None:
    text = _render(
        [
            Task(5, "pagar luz", "2025-03-01"),
            Task(4, "llamar al médico", "2025-03-05"),
            Task(3, "comprar pan", "2025-03-06"),
            Task(6, "ir al banco", "2025-03-10"),
        ]
    )

    assert "❗ /done_5 pagar luz (vencida: 1 de marzo de 2025)" in text
    assert "🎯 HOY - miércoles 5 de marzo de 2025:" in text
    assert "• /done_4 llamar al médico" in text
    assert "📌 jueves 6 de marzo de 2025 (mañana)" in text
    assert "📌 lunes 10 de marzo de 2025 (en 5 días)" in text


def test_every_rendered_id_parses_back() -> None:
    tasks = [
        Task(12, "a", "2025-03-01"),
        Task(345, "b", "2025-03-05"),
        Task(6789, "c", "2025-04-01"),
        Task(10, "d"),
        Task(11, "e", completed=True, created_at=_ts(2025, 3, 2)),
    ]
    text = _render(tasks)

    tokens = re.findall(r"/done_\S*", text)
    ids = {parse_task_id(tok, DONE_PREFIX) for tok in tokens}
    # The footer mentions "/done_N", which must not parse as an id.
    assert ids == {12, 345, 6789, 10, 11, None}


def test_multiline_description_stays_on_one_line() -> None:
    text = _render([Task(1, "comprar\nleche   y pan")])
    assert "• /done_1 comprar leche y pan" in text


def test_completed_section_is_capped_to_most_recent() -> None:
    tasks = [Task(i, f"t{i}", completed=True, created_at=_ts(2025, 2, i)) for i in range(1, 9)]
    text = _render(tasks, completed_limit=5)

    shown = re.findall(r"✓ /done_(\d+)", text)
    assert shown == ["8", "7", "6", "5", "4"]
    assert "...y 3 tareas más..." in text
    assert "✓ /done_8 t8 (8 feb 2025)" in text


def test_completed_with_bad_created_at_still_renders() -> None:
    text = _render(
        [
            Task(1, "sin timestamp", completed=True, created_at=None),  # type: ignore[arg-type]
            Task(2, "milisegundos", completed=True, created_at=1.7e15),
            Task(3, "normal", completed=True, created_at=_ts(2025, 3, 1)),
        ]
    )

    assert "/done_1" not in text
    assert "✓ /done_2 milisegundos\n" in text
    assert "✓ /done_3 normal (1 mar 2025)" in text


def test_completed_limit_none_shows_all() -> None:
    tasks = [Task(i, f"t{i}", completed=True, created_at=_ts(2025, 2, i)) for i in range(1, 9)]
    text = _render(tasks, completed_limit=None)
    assert len(re.findall(r"✓ /done_", text)) == 8
    assert "tareas más" not in text


def test_parse_task_id() -> None:
    assert parse_task_id("/done_12", DONE_PREFIX) == 12
    assert parse_task_id(" /DELETE_7 ", DELETE_PREFIX) == 7
    assert parse_task_id("/done_", DONE_PREFIX) is None
    assert parse_task_id("/done_abc", DONE_PREFIX) is None
    assert parse_task_id("/done_-3", DONE_PREFIX) is None
    assert parse_task_id("/done_1.5", DONE_PREFIX) is None
    assert parse_task_id("/delete_3", DONE_PREFIX) is None


def test_date_helpers() -> None:
    assert format_long_date(date(2025, 1, 4)) == "sábado 4 de enero de 2025"
    assert format_long_date(date(2025, 1, 4), weekday=False) == "4 de enero de 2025"
    assert relative_days_text(date(2025, 3, 6), TODAY) == "mañana"
    assert relative_days_text(date(2025, 3, 8), TODAY) == "en 3 días"
