"""Client-side task collection and its reducer.

The board never mutates tasks in place.  Every change goes through
:func:`tasks_reducer`, which maps the current tuple of tasks and an
:class:`Action` to a new tuple.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional

from ..domain.models import Task

TaskList = tuple[Task, ...]


class ActionType(str, Enum):
    SET_TASKS = "SET_TASKS"
    ADD_TASK = "ADD_TASK"
    UPDATE_TASK = "UPDATE_TASK"
    DELETE_TASK = "DELETE_TASK"


@dataclass(frozen=True)
class Action:
    type: Any
    payload: Any = None


def set_tasks(tasks: Iterable[Task]) -> Action:
    return Action(ActionType.SET_TASKS, tuple(tasks))


def add_task(task: Task) -> Action:
    return Action(ActionType.ADD_TASK, task)


def update_task(task_id: str, **fields: Any) -> Action:
    """Merge *fields* into the task with *task_id*."""
    return Action(ActionType.UPDATE_TASK, {**fields, "id": task_id})


def replace_task(task: Task) -> Action:
    """Merge every field of *task* into the stored record with the same id."""
    return update_task(task.id, **{k: v for k, v in task.to_dict().items() if k != "id"})


def delete_task(task_id: str) -> Action:
    return Action(ActionType.DELETE_TASK, {"id": task_id})


def tasks_reducer(state: TaskList, action: Action) -> TaskList:
    """Return the task collection after *action*.

    Raises:
        ValueError: for an action type the reducer does not handle.
    """
    if action.type == ActionType.SET_TASKS:
        return tuple(action.payload)
    if action.type == ActionType.ADD_TASK:
        return state + (action.payload,)
    if action.type == ActionType.DELETE_TASK:
        target = action.payload["id"]
        return tuple(t for t in state if t.id != target)
    if action.type == ActionType.UPDATE_TASK:
        target = action.payload["id"]
        return tuple(t.merged(action.payload) if t.id == target else t for t in state)
    raise ValueError(f"Unhandled action type: {action.type}")


@dataclass
class TaskListState:
    """Holds the current task tuple; the only writer is :meth:`dispatch`."""

    tasks: TaskList = field(default_factory=tuple)

    def dispatch(self, action: Action) -> TaskList:
        self.tasks = tasks_reducer(self.tasks, action)
        return self.tasks

    def find(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def index_of(self, task_id: str) -> int:
        for idx, task in enumerate(self.tasks):
            if task.id == task_id:
                return idx
        return -1
