"""YAML document store for tasks.

The whole collection lives in one document (``{"version": 1, "tasks": [...]}``).
Every read and write holds a cross-process file lock next to the document and
an in-process re-entrant lock, and writes go through a temp file that is
fsynced and renamed over the original.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Any, Optional

import yaml
from filelock import FileLock
from loguru import logger

from ..domain.models import Task, normalize_changes, now_iso
from .interfaces import TaskRepository

SCHEMA_VERSION = 1
LOCK_TIMEOUT = 30  # seconds


class StoreFormatError(RuntimeError):
    """The task document exists but cannot be parsed."""


class _YamlDocument:
    def __init__(self, path: Path, lock_path: Path, key: str) -> None:
        self.path = path
        self.lock = FileLock(str(lock_path), timeout=LOCK_TIMEOUT)
        self.thread_lock = threading.RLock()
        self._key = key

    def load(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise StoreFormatError(f"{self.path.name}: YAMLError: {exc}") from exc
        if raw is None:
            return []
        if not isinstance(raw, dict):
            raise StoreFormatError(f"{self.path.name}: expected mapping, got {type(raw).__name__}")
        items = raw.get(self._key) or []
        if not isinstance(items, list):
            raise StoreFormatError(f"{self.path.name}: '{self._key}' must be a list")
        return [item for item in items if isinstance(item, dict)]

    def save(self, items: list[dict[str, Any]]) -> None:
        payload = {"version": SCHEMA_VERSION, self._key: items}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(f"{self.path.suffix}.tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            yaml.safe_dump(payload, handle, sort_keys=False, allow_unicode=True)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, self.path)


class FileTaskRepository(TaskRepository):
    """Thread- and process-safe task repository backed by a YAML file."""

    def __init__(self, path: Path, lock_path: Optional[Path] = None) -> None:
        self.path = path
        self._doc = _YamlDocument(
            path,
            lock_path or path.with_suffix(".lock"),
            "tasks",
        )

    def _load(self) -> list[Task]:
        tasks: list[Task] = []
        for raw in self._doc.load():
            try:
                tasks.append(Task.from_dict(raw))
            except ValueError as exc:
                raise StoreFormatError(f"{self.path.name}: invalid task {raw.get('id')!r}: {exc}") from exc
        return tasks

    def _save(self, tasks: list[Task]) -> None:
        self._doc.save([t.to_dict() for t in tasks])

    def ping(self) -> int:
        """Parse the document once and return the number of stored tasks."""
        return len(self.list())

    def list(self) -> list[Task]:
        with self._doc.thread_lock:
            with self._doc.lock:
                return self._load()

    def get(self, task_id: str) -> Optional[Task]:
        for task in self.list():
            if task.id == task_id:
                return task
        return None

    def insert(self, task: Task) -> Task:
        with self._doc.thread_lock:
            with self._doc.lock:
                tasks = self._load()
                if any(existing.id == task.id for existing in tasks):
                    raise ValueError(f"Task {task.id} already exists")
                task.created_at = task.created_at or now_iso()
                task.updated_at = now_iso()
                tasks.append(task)
                self._save(tasks)
        logger.debug("Stored task {} in {}", task.id, self.path)
        return task

    def update(self, task_id: str, changes: dict[str, Any]) -> Optional[Task]:
        clean = normalize_changes(changes)
        with self._doc.thread_lock:
            with self._doc.lock:
                tasks = self._load()
                for idx, existing in enumerate(tasks):
                    if existing.id == task_id:
                        updated = existing.merged(clean)
                        updated.touch()
                        tasks[idx] = updated
                        self._save(tasks)
                        return updated
        return None

    def delete(self, task_id: str) -> bool:
        with self._doc.thread_lock:
            with self._doc.lock:
                tasks = self._load()
                keep = [t for t in tasks if t.id != task_id]
                if len(keep) == len(tasks):
                    return False
                self._save(keep)
        return True
