"""Board client: HTTP access, reducer state and UI controllers."""

from .api import ApiError, TaskApiClient
from .board import BoardController
from .form import TaskForm
from .state import Action, ActionType, TaskListState, tasks_reducer

__all__ = [
    "Action",
    "ActionType",
    "ApiError",
    "BoardController",
    "TaskApiClient",
    "TaskForm",
    "TaskListState",
    "tasks_reducer",
]
