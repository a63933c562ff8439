"""Board controller: column views, drag/drop protocol and modal state.

Drag-drop and delete are applied to local state first and rolled back if the
server call fails.  Create and edit go through :class:`TaskForm`, which waits
for the server before touching state.
"""

from __future__ import annotations

from typing import Optional

from loguru import logger

from ..domain.models import KANBAN_COLUMNS, Task, TaskStatus
from .api import ApiError, TaskApiClient
from .form import TaskForm
from .state import TaskListState, delete_task, replace_task, set_tasks, update_task


class BoardController:
    def __init__(self, api: TaskApiClient, state: Optional[TaskListState] = None) -> None:
        self.api = api
        self.state = state or TaskListState()
        self.dragging_id: Optional[str] = None
        self.drag_over_column: Optional[TaskStatus] = None
        self.form: Optional[TaskForm] = None

    # -- views ----------------------------------------------------------

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self.state.tasks

    def columns(self) -> dict[TaskStatus, list[Task]]:
        """Tasks grouped by column, in board order."""
        return {column: [t for t in self.state.tasks if t.status == column] for column in KANBAN_COLUMNS}

    @property
    def modal_open(self) -> bool:
        return self.form is not None

    # -- loading --------------------------------------------------------

    async def fetch(self) -> bool:
        try:
            tasks = await self.api.get_tasks()
        except ApiError as exc:
            logger.error("Failed to fetch tasks: {}", exc)
            return False
        self.state.dispatch(set_tasks(tasks))
        return True

    # -- drag and drop --------------------------------------------------

    def drag_start(self, task_id: str) -> None:
        self.dragging_id = task_id

    def drag_enter(self, column: TaskStatus | str) -> None:
        self.drag_over_column = TaskStatus.parse(column)

    def drag_end(self) -> None:
        self.dragging_id = None
        self.drag_over_column = None

    async def drop(self, column: TaskStatus | str, task_id: Optional[str] = None) -> bool:
        """Move a task to *column*.

        The new status is shown immediately; if the server rejects the update
        the task is restored to its pre-drop snapshot.  Returns ``True`` only
        when the status actually changed on the server.
        """
        new_status = TaskStatus.parse(column)
        task_id = task_id or self.dragging_id
        self.drag_end()
        if task_id is None:
            return False
        before = self.state.find(task_id)
        if before is None or before.status == new_status:
            return False

        self.state.dispatch(update_task(task_id, status=new_status))
        try:
            saved = await self.api.update_task(task_id, {"status": new_status})
        except ApiError as exc:
            logger.error("Failed to update task status for {}: {}", task_id, exc)
            self.state.dispatch(replace_task(before))
            return False
        self.state.dispatch(replace_task(saved))
        return True

    # -- delete ---------------------------------------------------------

    async def delete(self, task_id: str) -> bool:
        """Remove a task locally, then on the server; restore it on failure."""
        index = self.state.index_of(task_id)
        if index < 0:
            return False
        removed = self.state.tasks[index]
        self.state.dispatch(delete_task(task_id))
        try:
            await self.api.delete_task(task_id)
        except ApiError as exc:
            logger.error("Failed to delete task {}: {}", task_id, exc)
            current = self.state.tasks
            if self.state.find(task_id) is None:
                index = min(index, len(current))
                self.state.dispatch(set_tasks(current[:index] + (removed,) + current[index:]))
            return False
        return True

    # -- modal ----------------------------------------------------------

    def open_create_form(self) -> TaskForm:
        self.form = TaskForm(self.api, self.state, on_close=self.close_form)
        return self.form

    def open_edit_form(self, task_id: str) -> TaskForm:
        task = self.state.find(task_id)
        if task is None:
            raise KeyError(task_id)
        self.form = TaskForm(self.api, self.state, existing=task, on_close=self.close_form)
        return self.form

    def close_form(self) -> None:
        self.form = None
