"""Filter and sort pipeline for the task list views (no I/O)."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from functools import cmp_to_key

from .models import ListState, Task, TaskStatus


def filter_and_sort(
    tasks: Iterable[Task] | None,
    list_state: ListState | str,
    today: date,
) -> list[Task]:
    """Return the tasks visible in ``list_state``, ordered for display.

    Order: not-completed before completed, then dated before undated with
    earlier due dates first, then priority (high, medium, low).
    """
    if not tasks:
        return []
    state = _coerce_state(list_state)
    visible = [t for t in tasks if matches_list_state(t, state, today)]
    visible.sort(key=cmp_to_key(compare_tasks))
    return visible


def matches_list_state(task: Task, list_state: ListState, today: date) -> bool:
    """Whether ``task`` belongs in ``list_state``.

    The dated views keep completed tasks; only archived tasks are hidden.
    """
    if list_state is ListState.COMPLETED:
        return task.status is TaskStatus.COMPLETED
    if list_state in (ListState.TODAY, ListState.UPCOMING):
        if task.status is TaskStatus.ARCHIVED:
            return False
        position = _compare_to_day(task.due_date, today)
        if position is None:
            return False
        return position == 0 if list_state is ListState.TODAY else position > 0
    return task.status is not TaskStatus.ARCHIVED


def compare_tasks(a: Task, b: Task) -> int:
    """Three-way comparator used by :func:`filter_and_sort`."""
    if a.is_completed != b.is_completed:
        return 1 if a.is_completed else -1

    if a.due_date != b.due_date:
        if a.due_date is None:
            return 1
        if b.due_date is None:
            return -1
        order = _compare_due_dates(a.due_date, b.due_date)
        if order:
            return order

    return a.priority.rank - b.priority.rank


def _compare_due_dates(a: str, b: str) -> int:
    da, db = _parse_day(a), _parse_day(b)
    if da is not None and db is not None:
        return _cmp(da, db)
    # Malformed values: plain string order rather than failing the sort.
    return _cmp(a, b)


def _compare_to_day(due_date: str | None, today: date) -> int | None:
    """Compare a due date to ``today``; None when there is no due date."""
    if due_date is None:
        return None
    parsed = _parse_day(due_date)
    if parsed is not None:
        return _cmp(parsed, today)
    return _cmp(due_date, today.isoformat())


def _parse_day(value: str) -> date | None:
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _coerce_state(list_state: ListState | str) -> ListState:
    try:
        return ListState(list_state)
    except ValueError:
        return ListState.ALL
