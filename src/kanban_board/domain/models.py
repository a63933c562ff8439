"""Task model for the Kanban board.

A task sits in exactly one of three columns.  The column title doubles as the
wire value of :class:`TaskStatus`, so the board, the HTTP payloads and the
persisted documents all speak the same strings.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping


class TaskStatus(str, Enum):
    """Board column a task lives in."""

    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"

    @classmethod
    def parse(cls, raw: Any) -> "TaskStatus":
        """Coerce a column title or slug alias into a status.

        Raises ``ValueError`` for anything outside the three columns.
        """
        if isinstance(raw, cls):
            return raw
        key = str(raw or "").strip().lower()
        status = _STATUS_ALIASES.get(key)
        if status is None:
            raise ValueError(
                f"'status' must be one of {[s.value for s in KANBAN_COLUMNS]}, got '{raw}'"
            )
        return status


KANBAN_COLUMNS: tuple[TaskStatus, ...] = (TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.DONE)

_STATUS_ALIASES: dict[str, TaskStatus] = {
    "to do": TaskStatus.TODO,
    "todo": TaskStatus.TODO,
    "to-do": TaskStatus.TODO,
    "in progress": TaskStatus.IN_PROGRESS,
    "in-progress": TaskStatus.IN_PROGRESS,
    "in_progress": TaskStatus.IN_PROGRESS,
    "doing": TaskStatus.IN_PROGRESS,
    "done": TaskStatus.DONE,
}

# Fields clients may change after creation.
MUTABLE_FIELDS: tuple[str, ...] = ("title", "description", "status")


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}"


def validate_title(raw: Any) -> str:
    """Return the trimmed title, raising ``ValueError`` when it is blank."""
    title = str(raw or "").strip()
    if not title:
        raise ValueError("'title' is required and must be non-empty")
    return title


def normalize_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a partial update and coerce it to model types.

    Unknown keys (including ``id`` and the timestamps) are dropped, so a
    client can never move a task's identity or bookkeeping fields.
    """
    out: dict[str, Any] = {}
    for key in MUTABLE_FIELDS:
        if key not in changes:
            continue
        value = changes[key]
        if key == "title":
            out[key] = validate_title(value)
        elif key == "status":
            out[key] = TaskStatus.parse(value)
        else:
            out[key] = "" if value is None else str(value)
    return out


@dataclass
class Task:
    """A card on the board."""

    id: str = field(default_factory=lambda: _id("task"))
    title: str = ""
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Task":
        """Build a task from a stored document or an API payload.

        Unlike partial updates this is strict: a document without an id or
        title, or with a status outside the board, raises ``ValueError``.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Expected a task object, got {type(data).__name__}")
        task_id = str(data.get("id") or "").strip()
        if not task_id:
            raise ValueError("'id' is required")
        return cls(
            id=task_id,
            title=validate_title(data.get("title")),
            description=str(data.get("description") or ""),
            status=TaskStatus.parse(data.get("status", TaskStatus.TODO)),
            created_at=str(data.get("created_at") or now_iso()),
            updated_at=str(data.get("updated_at") or now_iso()),
        )

    def merged(self, changes: Mapping[str, Any]) -> "Task":
        """Return a copy with *changes* shallow-merged in; ``self`` is untouched."""
        known = {k: v for k, v in changes.items() if k in self.__dataclass_fields__ and k != "id"}
        if "status" in known:
            known["status"] = TaskStatus.parse(known["status"])
        return replace(self, **known)

    def touch(self) -> None:
        self.updated_at = now_iso()

