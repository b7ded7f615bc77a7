"""Task list manager: cached task collection, view state and mutations."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from .api_client import TaskSource
from .models import ErrorKind, ListState, Result, Task, TaskStatus
from .normalize import COMPLETION_FLAG_KEYS, canonical_fields, normalize, normalize_all, normalize_due_date
from .views import filter_and_sort

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TaskListManager:
    """Owns the in-memory task list for one session.

    Every operation returns a :class:`Result`; task source failures are
    caught here and never propagate. The cache is only written after the
    task source reports success.
    """

    def __init__(
        self,
        source: TaskSource,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.source = source
        self.clock = clock
        self.tasks: list[Task] = []
        self.list_state = ListState.TODAY
        self.show_completed = True
        self.selected_task: Task | None = None

    def _timestamp(self) -> str:
        return self.clock().isoformat()

    def today(self) -> date:
        return self.clock().date()

    def _index_of(self, task_id: Any) -> int | None:
        for i, task in enumerate(self.tasks):
            if task.id == task_id:
                return i
        return None

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def initialize(self) -> Result:
        return self.list_all(force_refresh=True)

    def list_all(self, force_refresh: bool = False) -> Result:
        """Return the current view, fetching from the task source when needed."""
        if not self.tasks or force_refresh:
            try:
                records = self.source.fetch_all_tasks()
            except Exception as e:
                logger.error("Error fetching tasks: %s", e)
                return Result.fail(str(e), ErrorKind.COLLABORATOR_FAILURE)
            if not isinstance(records, (list, tuple)):
                logger.warning(
                    "Task source returned %s instead of a list; treating as empty",
                    type(records).__name__,
                )
                records = []
            self.tasks = normalize_all(records)
            logger.debug("Loaded %d task(s) from the task source", len(self.tasks))
        else:
            logger.debug("Using %d cached task(s)", len(self.tasks))

        return Result.ok(filter_and_sort(self.tasks, self.list_state, self.today()))

    def get_by_id(self, task_id: Any) -> Task | None:
        idx = self._index_of(task_id)
        return self.tasks[idx].copy() if idx is not None else None

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create_task(self, data: Mapping[str, Any]) -> Result:
        """Create a task, then refresh the cache to pick up server-side fields."""
        fields = _plain_values(canonical_fields(data))
        now = self._timestamp()
        record = {
            "title": fields.get("title"),
            "description": fields.get("description") or "",
            "dueDate": fields.get("dueDate") or None,
            "priority": fields.get("priority") or "medium",
            "status": TaskStatus.PENDING.value,
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            response = self.source.create_task_record(record)
        except Exception as e:
            logger.error("Error creating task: %s", e)
            return Result.fail(str(e), ErrorKind.COLLABORATOR_FAILURE)

        if not isinstance(response, Mapping) or response.get("id") is None:
            logger.error("Task source returned no id for new task %r", record["title"])
            return Result.fail("Failed to create task", ErrorKind.COLLABORATOR_FAILURE)

        task_id = response["id"]
        logger.info("Created task '%s' -> %s", record["title"], task_id)

        refreshed = self.list_all(force_refresh=True)
        if refreshed.success:
            created = self.get_by_id(task_id)
            if created is not None:
                return Result.ok(created)
            logger.warning("New task %s missing from refreshed list", task_id)
        else:
            logger.warning("Refresh after creating task %s failed: %s", task_id, refreshed.error)
        return Result.ok(normalize(response))

    def update_task(self, task_id: Any, patch: Mapping[str, Any]) -> Result:
        """Merge ``patch`` onto the cached task and persist the full record."""
        idx = self._index_of(task_id)
        if idx is None:
            return Result.fail(TASK_NOT_FOUND, ErrorKind.NOT_FOUND)

        record = self.tasks[idx].to_record()
        record.update(_plain_values(canonical_fields(patch)))
        record["id"] = task_id
        record["updatedAt"] = self._timestamp()

        try:
            response = self.source.update_task_record(record)
        except Exception as e:
            logger.error("Error updating task %s: %s", task_id, e)
            return Result.fail(str(e), ErrorKind.COLLABORATOR_FAILURE)

        if not response:
            returned: dict[str, Any] = {}
        elif isinstance(response, Mapping) and response.get("id") is not None:
            returned = canonical_fields(response)
        else:
            logger.error("Task source returned no id for updated task %s", task_id)
            return Result.fail("Failed to update task", ErrorKind.COLLABORATOR_FAILURE)

        # The sent record only fills fields the response leaves out.
        merged = {**record, **returned}
        if "status" not in returned and any(k in returned for k in COMPLETION_FLAG_KEYS):
            del merged["status"]
        updated = normalize(merged)
        self.tasks[idx] = updated
        logger.info("Updated task %s (status: %s)", task_id, updated.status.value)
        return Result.ok(updated.copy())

    def delete_task(self, task_id: Any) -> Result:
        """Archive a task; nothing is ever physically removed."""
        return self.update_task(task_id, {"status": TaskStatus.ARCHIVED.value})

    def toggle_completion(self, task_id: Any) -> Result:
        idx = self._index_of(task_id)
        if idx is None:
            return Result.fail(TASK_NOT_FOUND, ErrorKind.NOT_FOUND)

        if self.tasks[idx].status is TaskStatus.COMPLETED:
            patch = {"status": TaskStatus.PENDING.value, "completedAt": None}
        else:
            patch = {"status": TaskStatus.COMPLETED.value, "completedAt": self._timestamp()}
        return self.update_task(task_id, patch)

    # ------------------------------------------------------------------
    # View state
    # ------------------------------------------------------------------

    def set_list_state(self, list_state: ListState | str) -> Result:
        try:
            self.list_state = ListState(list_state)
        except ValueError:
            return Result.fail("Invalid list state", ErrorKind.INVALID_LIST_STATE)
        return Result.ok()

    def set_selected_task(self, task: Task | Mapping[str, Any] | None) -> None:
        """Select a task (stored as a copy) or clear the selection."""
        if task is None:
            self.selected_task = None
        elif isinstance(task, Task):
            self.selected_task = task.copy()
        else:
            self.selected_task = normalize(task)

    def toggle_show_completed(self) -> bool:
        self.show_completed = not self.show_completed
        return self.show_completed


def _plain_values(fields: dict[str, Any]) -> dict[str, Any]:
    """Unwrap enum members and dates so the record stays JSON-serializable."""
    plain = {k: v.value if isinstance(v, Enum) else v for k, v in fields.items()}
    if "dueDate" in plain:
        plain["dueDate"] = normalize_due_date(plain["dueDate"])
    return plain
