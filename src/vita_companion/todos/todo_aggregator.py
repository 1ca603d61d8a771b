# src/vita_companion/todos/todo_aggregator.py

"""
To-do aggregation.

Partitions a snapshot of tasks into five disjoint display buckets relative to a
local calendar day:

- completed   : completed=True (store order preserved)
- overdue     : open, due_date < today
- due_today   : open, due_date == today
- upcoming    : open, due_date > today, grouped by date (ascending ISO string)
- no_date     : open, no due_date (or an unparseable one)

Pure function of (tasks, reference_instant, offset). Malformed dates never raise;
structurally invalid records are reported in `rejected` and left out.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from ..core.clock import local_date
from ..core.errors import DataIntegrityError
from .todo_models import Task

logger = logging.getLogger(__name__)

DEFAULT_UTC_OFFSET_HOURS = -3.0


@dataclass(slots=True, frozen=True)
class DateGroup:
    date: str  # ISO "YYYY-MM-DD"
    tasks: list[Task]


@dataclass(slots=True, frozen=True)
class RejectedRecord:
    record: Any
    error: DataIntegrityError


@dataclass(slots=True)
class AggregationResult:
    today: date
    completed: list[Task] = field(default_factory=list)
    overdue: list[Task] = field(default_factory=list)
    due_today: list[Task] = field(default_factory=list)
    upcoming: list[DateGroup] = field(default_factory=list)
    no_date: list[Task] = field(default_factory=list)
    rejected: list[RejectedRecord] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.completed or self.overdue or self.due_today or self.upcoming or self.no_date)

    def total(self) -> int:
        """Number of tasks placed in a bucket (rejected records excluded)."""
        return (
            len(self.completed)
            + len(self.overdue)
            + len(self.due_today)
            + sum(len(g.tasks) for g in self.upcoming)
            + len(self.no_date)
        )

    def upcoming_tasks(self) -> list[Task]:
        return [t for g in self.upcoming for t in g.tasks]


def parse_due_date(raw: Any) -> date | None:
    """ISO date or None. Anything unparseable is None (fail-soft)."""
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    s = str(raw).strip()
    if not s:
        return None
    try:
        if len(s) == 10:
            return date.fromisoformat(s)
        # A full timestamp ("2025-03-01T00:00:00") is fine; "2025-03-01xyz" is not.
        return datetime.fromisoformat(s).date()
    except ValueError:
        return None


def validate_task(record: Any) -> Task:
    """
    Structural check for a single record.

    Raises DataIntegrityError for anything that cannot be displayed or referenced
    by id or ordered by creation time. Due dates are NOT checked here.
    """
    if not isinstance(record, Task):
        raise DataIntegrityError(f"not a Task: {type(record).__name__}")
    if isinstance(record.id, bool) or not isinstance(record.id, int):
        raise DataIntegrityError(f"task id must be an integer, got {record.id!r}")
    if not isinstance(record.description, str):
        raise DataIntegrityError(f"task {record.id}: description must be text")
    if isinstance(record.created_at, bool) or not isinstance(record.created_at, int | float):
        raise DataIntegrityError(f"task {record.id}: created_at must be a timestamp, got {record.created_at!r}")
    return record


def aggregate(
    tasks: Sequence[Task],
    reference_instant: datetime,
    *,
    utc_offset_hours: float = DEFAULT_UTC_OFFSET_HOURS,
) -> AggregationResult:
    """
    Classify every task into exactly one bucket (single pass).

    "Today" is reference_instant shifted to the fixed local offset and truncated
    to a calendar day. Upcoming groups are ordered by the ISO date string.
    """
    if tasks is None:
        raise TypeError("tasks must be a sequence, not None")

    today = local_date(reference_instant, utc_offset_hours)
    result = AggregationResult(today=today)
    by_date: dict[str, list[Task]] = {}

    for record in tasks:
        try:
            task = validate_task(record)
        except DataIntegrityError as e:
            logger.warning("Skipping malformed todo record: %s", e)
            result.rejected.append(RejectedRecord(record=record, error=e))
            continue

        if task.completed:
            result.completed.append(task)
            continue

        due = parse_due_date(task.due_date)
        if due is None:
            if task.due_date:
                logger.debug("Todo id=%s has unparseable due_date=%r; treated as no date", task.id, task.due_date)
            result.no_date.append(task)
            continue

        if due < today:
            result.overdue.append(task)
        elif due == today:
            result.due_today.append(task)
        else:
            by_date.setdefault(due.isoformat(), []).append(task)

    result.upcoming = [DateGroup(date=d, tasks=by_date[d]) for d in sorted(by_date)]
    return result
