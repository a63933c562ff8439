from .bootstrap import StoreConnectionError, open_repository
from .file_repos import FileTaskRepository, StoreFormatError
from .interfaces import TaskRepository
from .memory_repo import MemoryTaskRepository

__all__ = [
    "TaskRepository",
    "FileTaskRepository",
    "MemoryTaskRepository",
    "StoreConnectionError",
    "StoreFormatError",
    "open_repository",
]
