"""Provide the public `kanban_board` package exports."""

from __future__ import annotations

from .domain import KANBAN_COLUMNS, Task, TaskStatus

__version__ = "1.0.0"

__all__ = ["KANBAN_COLUMNS", "Task", "TaskStatus", "__version__"]
