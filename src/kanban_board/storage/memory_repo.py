"""Dict-backed task repository used for ``memory://`` stores and tests."""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Any, Optional

from ..domain.models import Task, normalize_changes, now_iso
from .interfaces import TaskRepository


class MemoryTaskRepository(TaskRepository):
    def __init__(self, tasks: Optional[list[Task]] = None) -> None:
        self._lock = threading.RLock()
        self._tasks: dict[str, Task] = {}
        for task in tasks or []:
            self.insert(task)

    def list(self) -> list[Task]:
        with self._lock:
            return [replace(t) for t in self._tasks.values()]

    def get(self, task_id: str) -> Optional[Task]:
        with self._lock:
            task = self._tasks.get(task_id)
            return replace(task) if task is not None else None

    def insert(self, task: Task) -> Task:
        with self._lock:
            if task.id in self._tasks:
                raise ValueError(f"Task {task.id} already exists")
            task.created_at = task.created_at or now_iso()
            task.updated_at = now_iso()
            self._tasks[task.id] = replace(task)
        return task

    def update(self, task_id: str, changes: dict[str, Any]) -> Optional[Task]:
        clean = normalize_changes(changes)
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return None
            updated = task.merged(clean)
            updated.touch()
            self._tasks[task_id] = updated
            return replace(updated)

    def delete(self, task_id: str) -> bool:
        with self._lock:
            return self._tasks.pop(task_id, None) is not None
