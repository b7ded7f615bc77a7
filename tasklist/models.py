"""Data models for the task list binding."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class TaskStatus(str, Enum):
    """Closed task lifecycle. ``ARCHIVED`` is the soft-delete marker."""

    PENDING = "pending"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 1, Priority.MEDIUM: 2, Priority.LOW: 3}


class ListState(str, Enum):
    """Which slice of the task list the page is showing."""

    TODAY = "today"
    UPCOMING = "upcoming"
    COMPLETED = "completed"
    ALL = "all"


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    COLLABORATOR_FAILURE = "collaborator_failure"
    INVALID_LIST_STATE = "invalid_list_state"


@dataclass
class Task:
    """A single task in the internal (normalized) shape."""

    id: Any
    title: str
    description: str = ""
    due_date: str | None = None  # YYYY-MM-DD, or the raw value if unparseable
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    created_at: str | None = None
    updated_at: str | None = None
    completed_at: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED

    @property
    def is_archived(self) -> bool:
        return self.status is TaskStatus.ARCHIVED

    def copy(self) -> Task:
        """Return an owned copy; mutating it never touches the original."""
        return replace(self, extra=dict(self.extra))

    def to_record(self) -> dict[str, Any]:
        """Render the canonical record shape sent to the task source."""
        record: dict[str, Any] = dict(self.extra)
        record.update(
            {
                "id": self.id,
                "title": self.title,
                "description": self.description,
                "dueDate": self.due_date,
                "priority": self.priority.value,
                "status": self.status.value,
                "createdAt": self.created_at,
                "updatedAt": self.updated_at,
                "completedAt": self.completed_at,
            }
        )
        return record


@dataclass
class Result:
    """Outcome of a manager operation: ``{success, data | error}``."""

    success: bool
    data: Any = None
    error: str | None = None
    kind: ErrorKind | None = None

    @classmethod
    def ok(cls, data: Any = None) -> Result:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, kind: ErrorKind) -> Result:
        return cls(success=False, error=error, kind=kind)

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error}
        d: dict[str, Any] = {"success": True}
        if self.data is not None:
            d["data"] = _plain(self.data)
        return d


def _plain(value: Any) -> Any:
    if isinstance(value, Task):
        return value.to_record()
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value
