"""Render the board and the task form with rich."""

from __future__ import annotations

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..domain.models import KANBAN_COLUMNS, Task, TaskStatus
from .board import BoardController
from .form import TaskForm

EMPTY_COLUMN_HINT = "Drag tasks here or create a new one."

COLUMN_STYLES: dict[TaskStatus, str] = {
    TaskStatus.TODO: "sky_blue1",
    TaskStatus.IN_PROGRESS: "yellow",
    TaskStatus.DONE: "green",
}


def render_card(task: Task) -> Panel:
    body = Text(task.title, style="bold")
    if task.description:
        body.append("\n" + task.description, style="dim")
    return Panel(
        body,
        subtitle=Text(task.id, style="dim"),
        subtitle_align="right",
        border_style=COLUMN_STYLES[task.status],
    )


def render_board(board: BoardController) -> Table:
    columns = board.columns()
    table = Table(show_header=True, expand=True, show_lines=False, title="Kanban Board")
    for column in KANBAN_COLUMNS:
        style = COLUMN_STYLES[column]
        if board.drag_over_column == column:
            style = f"reverse {style}"
        table.add_column(f"{column.value} ({len(columns[column])})", header_style=style, ratio=1)

    cells = []
    for column in KANBAN_COLUMNS:
        tasks = columns[column]
        if tasks:
            cells.append(Group(*(render_card(t) for t in tasks)))
        else:
            cells.append(Panel(Text(EMPTY_COLUMN_HINT, style="dim italic"), border_style="grey37"))
    table.add_row(*cells)
    return table


def render_form(form: TaskForm) -> Panel:
    lines = Text()
    lines.append("Title\n", style="bold")
    lines.append((form.title or "e.g., Design the new logo") + "\n\n")
    lines.append("Description\n", style="bold")
    lines.append((form.description or "Add more details... (optional)") + "\n")
    if form.error:
        lines.append("\n" + form.error + "\n", style="red")
    lines.append(f"\n[ Cancel ]  [ {form.submit_label} ]", style="dim" if form.is_submitting else "")
    return Panel(lines, title=form.heading, border_style="sky_blue1")

