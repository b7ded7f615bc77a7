"""Tests for the filter/sort pipeline (pure, no task source)."""

from datetime import date

from tasklist.models import ListState, Priority, Task, TaskStatus
from tasklist.views import compare_tasks, filter_and_sort

TODAY = date(2024, 1, 10)


def _make_task(task_id, due=None, status=TaskStatus.PENDING, priority=Priority.MEDIUM, **kwargs):
    return Task(
        id=task_id,
        title=f"Task {task_id}",
        due_date=due,
        status=status,
        priority=priority,
        **kwargs,
    )


def _ids(tasks):
    return [t.id for t in tasks]


def test_empty_input():
    assert filter_and_sort([], ListState.ALL, TODAY) == []
    assert filter_and_sort(None, ListState.TODAY, TODAY) == []


def test_priority_breaks_due_date_tie():
    tasks = [
        _make_task(1, due="2024-01-10", priority=Priority.LOW),
        _make_task(2, due="2024-01-10", priority=Priority.HIGH),
    ]
    assert _ids(filter_and_sort(tasks, ListState.ALL, TODAY)) == [2, 1]


def test_today_and_upcoming_buckets():
    tasks = [
        _make_task(1, due="2024-01-10"),
        _make_task(2, due="2024-01-11"),
        _make_task(3, due=None),
    ]
    assert _ids(filter_and_sort(tasks, ListState.TODAY, TODAY)) == [1]
    assert _ids(filter_and_sort(tasks, ListState.UPCOMING, TODAY)) == [2]


def test_past_due_tasks_are_not_today_or_upcoming():
    tasks = [_make_task(1, due="2024-01-09")]
    assert filter_and_sort(tasks, ListState.TODAY, TODAY) == []
    assert filter_and_sort(tasks, ListState.UPCOMING, TODAY) == []
    assert _ids(filter_and_sort(tasks, ListState.ALL, TODAY)) == [1]


def test_all_excludes_only_archived():
    tasks = [
        _make_task(1, status=TaskStatus.ARCHIVED, due="2024-01-10"),
        _make_task(2, status=TaskStatus.COMPLETED),
        _make_task(3),
        _make_task(4, status=TaskStatus.ARCHIVED),
    ]
    result = filter_and_sort(tasks, ListState.ALL, TODAY)
    assert sorted(_ids(result)) == [2, 3]
    assert all(t.status is not TaskStatus.ARCHIVED for t in result)


def test_completed_view():
    tasks = [
        _make_task(1, status=TaskStatus.COMPLETED),
        _make_task(2),
        _make_task(3, status=TaskStatus.ARCHIVED),
    ]
    assert _ids(filter_and_sort(tasks, ListState.COMPLETED, TODAY)) == [1]


def test_archived_tasks_never_appear_in_dated_views():
    tasks = [
        _make_task(1, status=TaskStatus.ARCHIVED, due="2024-01-10"),
        _make_task(2, status=TaskStatus.ARCHIVED, due="2024-01-11"),
    ]
    assert filter_and_sort(tasks, ListState.TODAY, TODAY) == []
    assert filter_and_sort(tasks, ListState.UPCOMING, TODAY) == []


def test_completed_task_due_today_stays_in_today_after_pending():
    tasks = [
        _make_task(1, due="2024-01-10", status=TaskStatus.COMPLETED),
        _make_task(2, due="2024-01-10"),
        _make_task(3, due="2024-01-11", status=TaskStatus.COMPLETED),
    ]
    assert _ids(filter_and_sort(tasks, ListState.TODAY, TODAY)) == [2, 1]


def test_completed_task_due_later_stays_in_upcoming():
    tasks = [
        _make_task(1, due="2024-01-11", status=TaskStatus.COMPLETED),
        _make_task(2, due="2024-01-12"),
    ]
    assert _ids(filter_and_sort(tasks, ListState.UPCOMING, TODAY)) == [2, 1]


def test_pending_sorts_before_completed():
    tasks = [
        _make_task(1, status=TaskStatus.COMPLETED, due="2024-01-01", priority=Priority.HIGH),
        _make_task(2, due="2024-03-01", priority=Priority.LOW),
    ]
    assert _ids(filter_and_sort(tasks, ListState.ALL, TODAY)) == [2, 1]


def test_dated_before_undated_and_ascending():
    tasks = [
        _make_task(1, due=None, priority=Priority.HIGH),
        _make_task(2, due="2024-02-01"),
        _make_task(3, due="2024-01-15"),
        _make_task(4, due=None),
    ]
    result = filter_and_sort(tasks, ListState.ALL, TODAY)
    assert _ids(result) == [3, 2, 1, 4]
    dated = [t.due_date for t in result if t.due_date]
    assert dated == sorted(dated)


def test_malformed_due_date_does_not_break_sort():
    tasks = [
        _make_task(1, due="someday"),
        _make_task(2, due="2024-01-12"),
        _make_task(3, due=None),
    ]
    result = filter_and_sort(tasks, ListState.ALL, TODAY)
    # "2024-..." < "someday" as strings; undated last
    assert _ids(result) == [2, 1, 3]


def test_unknown_list_state_falls_back_to_all():
    tasks = [_make_task(1), _make_task(2, status=TaskStatus.ARCHIVED)]
    assert _ids(filter_and_sort(tasks, "bogus", TODAY)) == [1]


def test_list_state_accepts_plain_strings():
    tasks = [_make_task(1, due="2024-01-10")]
    assert _ids(filter_and_sort(tasks, "today", TODAY)) == [1]


def test_input_is_not_reordered():
    tasks = [_make_task(1, due="2024-02-01"), _make_task(2, due="2024-01-11")]
    filter_and_sort(tasks, ListState.ALL, TODAY)
    assert _ids(tasks) == [1, 2]


def test_compare_tasks_equal():
    a = _make_task(1, due="2024-01-10")
    b = _make_task(2, due="2024-01-10")
    assert compare_tasks(a, b) == 0
