from .models import KANBAN_COLUMNS, Task, TaskStatus, normalize_changes, validate_title

__all__ = [
    "Task",
    "TaskStatus",
    "KANBAN_COLUMNS",
    "normalize_changes",
    "validate_title",
]
