"""Adapter from raw task records to the internal Task shape."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from .models import Priority, Task, TaskStatus

logger = logging.getLogger(__name__)

# Canonical record key -> alias keys accepted from the task source.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "dueDate": ("deadline", "due_date"),
    "description": ("comment",),
    "createdAt": ("created_at",),
    "updatedAt": ("updated_at",),
    "completedAt": ("completed_at",),
}

# Boolean "is complete" flags used by the older record shape.
COMPLETION_FLAG_KEYS = ("completed", "isCompleted", "is_complete")

_KNOWN_KEYS = {"id", "title", "priority", "status", *FIELD_ALIASES, *COMPLETION_FLAG_KEYS}
for _aliases in FIELD_ALIASES.values():
    _KNOWN_KEYS.update(_aliases)


def normalize(raw: Mapping[str, Any] | None) -> Task | None:
    """Map a raw record onto a Task. Returns None for a missing record.

    The raw record is only read, never modified.
    """
    if raw is None:
        return None
    fields = canonical_fields(raw)
    return Task(
        id=fields.get("id"),
        title=str(fields.get("title") or ""),
        description=str(fields.get("description") or ""),
        due_date=normalize_due_date(fields.get("dueDate")),
        priority=_normalize_priority(fields.get("priority")),
        status=_normalize_status(fields),
        created_at=fields.get("createdAt"),
        updated_at=fields.get("updatedAt"),
        completed_at=fields.get("completedAt"),
        extra={k: v for k, v in raw.items() if k not in _KNOWN_KEYS},
    )


def normalize_all(records: Iterable[Any] | None) -> list[Task]:
    """Normalize every record, skipping ``None`` and non-mapping entries."""
    tasks: list[Task] = []
    for raw in records or []:
        if raw is None:
            continue
        if not isinstance(raw, Mapping):
            logger.warning("Skipping task record of unexpected type %s", type(raw).__name__)
            continue
        task = normalize(raw)
        if task is not None:
            tasks.append(task)
    return tasks


def canonical_fields(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``raw`` with alias keys folded into canonical keys.

    A canonical key already present wins over its aliases; among aliases
    the first one listed wins.
    """
    fields = dict(raw)
    for canonical, aliases in FIELD_ALIASES.items():
        for alias in aliases:
            if alias not in fields:
                continue
            value = fields.pop(alias)
            if canonical not in fields:
                fields[canonical] = value
    return fields


def normalize_due_date(value: Any) -> str | None:
    """Reduce a due date to ``YYYY-MM-DD``.

    Timestamps keep the calendar date they were written with. Strings that
    do not parse are returned stripped so callers can still compare them.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass
    # Timestamps fromisoformat rejects (e.g. nanosecond fractions) still
    # carry a usable date prefix.
    if len(text) > 10 and text[10] in "T ":
        try:
            return date.fromisoformat(text[:10]).isoformat()
        except ValueError:
            pass
    return text


def _normalize_priority(raw: Any) -> Priority:
    if isinstance(raw, Priority):
        return raw
    try:
        return Priority(str(raw).strip().lower())
    except ValueError:
        return Priority.MEDIUM


def _normalize_status(fields: Mapping[str, Any]) -> TaskStatus:
    """Resolve the tri-state status.

    A recognized status string wins; otherwise a boolean completion flag
    (``True`` -> completed, ``False`` -> pending) decides; otherwise pending.
    """
    raw = fields.get("status")
    if isinstance(raw, bool):
        return TaskStatus.COMPLETED if raw else TaskStatus.PENDING
    if isinstance(raw, str):
        try:
            return TaskStatus(raw.strip().lower())
        except ValueError:
            pass
    for key in COMPLETION_FLAG_KEYS:
        flag = fields.get(key)
        if isinstance(flag, bool):
            return TaskStatus.COMPLETED if flag else TaskStatus.PENDING
    return TaskStatus.PENDING
