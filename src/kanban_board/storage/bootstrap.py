"""Turn a database connection string into a ready task repository."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import unquote, urlsplit

from loguru import logger

from .file_repos import FileTaskRepository, StoreFormatError
from .interfaces import TaskRepository
from .memory_repo import MemoryTaskRepository

FILE_SCHEMES = {"yaml", "file"}


class StoreConnectionError(RuntimeError):
    """The task store named by a connection string cannot be used."""


def _resolve_path(database_url: str) -> Path | None:
    parts = urlsplit(database_url)
    scheme = parts.scheme.lower()
    # "C:\\tasks.yaml" splits into a one-letter scheme
    if not scheme or len(scheme) == 1:
        return Path(database_url).expanduser()
    if scheme in FILE_SCHEMES:
        raw = unquote(parts.netloc + parts.path)
        return Path(raw).expanduser() if raw else None
    return None


def open_repository(database_url: str) -> TaskRepository:
    """Connect to the store named by *database_url*.

    Supported forms are ``memory://``, ``yaml:///abs/tasks.yaml``,
    ``file:///abs/tasks.yaml`` and a bare filesystem path.  The document is
    created when missing and parsed once so a corrupt or unreadable store
    fails here rather than on the first request.
    """
    url = (database_url or "").strip()
    if not url:
        raise StoreConnectionError("No database connection string configured")
    if url.lower().startswith("memory:"):
        logger.info("Using in-memory task store")
        return MemoryTaskRepository()

    path = _resolve_path(url)
    if path is None:
        raise StoreConnectionError(f"Unsupported database connection string: {url}")
    path = path.resolve()

    repo = FileTaskRepository(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if not path.exists():
            repo._save([])
        count = repo.ping()
    except (OSError, StoreFormatError) as exc:
        raise StoreConnectionError(f"Cannot open task store {path}: {exc}") from exc
    logger.info("Connected to task store {} ({} tasks)", path, count)
    return repo
