"""Create/edit form for a single task."""

from __future__ import annotations

from typing import Callable, Optional

from loguru import logger

from ..domain.models import Task, TaskStatus
from .api import ApiError, TaskApiClient
from .state import TaskListState, add_task, replace_task

TITLE_REQUIRED = "Title is required!"
SAVE_FAILED = "Failed to save task. Please try again."


class TaskForm:
    """Form state for adding a task, or editing *existing* when given.

    Edit mode only sends ``title`` and ``description``, so the task keeps its
    id and column.
    """

    def __init__(
        self,
        api: TaskApiClient,
        state: TaskListState,
        existing: Optional[Task] = None,
        on_close: Optional[Callable[[], None]] = None,
    ) -> None:
        self.api = api
        self.state = state
        self.existing = existing
        self.on_close = on_close
        self.title = existing.title if existing else ""
        self.description = existing.description if existing else ""
        self.error = ""
        self.is_submitting = False

    @property
    def is_edit_mode(self) -> bool:
        return self.existing is not None

    @property
    def heading(self) -> str:
        return "Edit Task" if self.is_edit_mode else "Add a New Task"

    @property
    def submit_label(self) -> str:
        if self.is_submitting:
            return "Saving..."
        return "Save Changes" if self.is_edit_mode else "Add Task"

    def set_title(self, title: str) -> None:
        self.title = title
        self.error = ""

    def set_description(self, description: str) -> None:
        self.description = description

    async def submit(self) -> bool:
        if self.is_submitting:
            return False
        title = self.title.strip()
        if not title:
            self.error = TITLE_REQUIRED
            return False

        self.is_submitting = True
        try:
            if self.existing is not None:
                saved = await self.api.update_task(
                    self.existing.id, {"title": title, "description": self.description}
                )
                self.state.dispatch(replace_task(saved))
            else:
                saved = await self.api.add_task(title, self.description, TaskStatus.TODO)
                self.state.dispatch(add_task(saved))
        except ApiError as exc:
            logger.error("Failed to save task: {}", exc)
            self.error = SAVE_FAILED
            return False
        finally:
            self.is_submitting = False

        if self.on_close is not None:
            self.on_close()
        return True
