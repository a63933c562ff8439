from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import httpx
from loguru import logger
from rich.console import Console

from .client import ApiError, BoardController, TaskApiClient
from .client.render import render_board, render_form
from .config import ConfigError, Settings, load_settings
from .domain.models import TaskStatus
from .logging_setup import configure_logging
from .server import create_app
from .server.api import APP_FACTORY
from .storage import StoreConnectionError, open_repository

ClientHandler = Callable[[argparse.Namespace, BoardController, Console], Awaitable[int]]


def _settings(args: argparse.Namespace) -> Settings:
    settings = load_settings(Path(args.config) if args.config else None)
    return settings.with_overrides(api_url=args.api_url, log_level=args.log_level)


def _print_json(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2) + '\n')


def _serve(args: argparse.Namespace, settings: Settings) -> int:
    try:
        import uvicorn
    except ImportError:
        sys.stderr.write("Install uvicorn to run the server: pip install uvicorn\n")
        return 1

    settings = settings.with_overrides(host=args.host, port=args.port)
    try:
        repository = open_repository(settings.database_url)
    except StoreConnectionError as exc:
        logger.error("Database connection error: {}", exc)
        return 1

    if args.reload:
        # The reloader re-imports the app in a child process that only sees the environment.
        os.environ.update(settings.to_environ())
        app: Any = APP_FACTORY
    else:
        app = create_app(settings=settings, repository=repository)
    logger.info("Connected to DB & server is running on port {}", settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        reload=args.reload,
        factory=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


async def _board(args: argparse.Namespace, board: BoardController, console: Console) -> int:
    if not await board.fetch():
        return 1
    console.print(render_board(board))
    return 0


async def _add(args: argparse.Namespace, board: BoardController, console: Console) -> int:
    form = board.open_create_form()
    form.set_title(args.title)
    form.set_description(args.description)
    if not await form.submit():
        console.print(render_form(form))
        return 1
    _print_json({'task': board.tasks[-1].to_dict()})
    return 0


async def _edit(args: argparse.Namespace, board: BoardController, console: Console) -> int:
    if not await board.fetch():
        return 1
    try:
        form = board.open_edit_form(args.task_id)
    except KeyError:
        sys.stderr.write(f"Task {args.task_id} not found\n")
        return 1
    if args.title is not None:
        form.set_title(args.title)
    if args.description is not None:
        form.set_description(args.description)
    if not await form.submit():
        console.print(render_form(form))
        return 1
    task = board.state.find(args.task_id)
    _print_json({'task': task.to_dict() if task else None})
    return 0


async def _move(args: argparse.Namespace, board: BoardController, console: Console) -> int:
    if not await board.fetch():
        return 1
    task = board.state.find(args.task_id)
    if task is None:
        sys.stderr.write(f"Task {args.task_id} not found\n")
        return 1
    column = TaskStatus.parse(args.column)
    if task.status == column:
        sys.stdout.write(f"Task {task.id} is already in {column.value}\n")
        return 0
    board.drag_start(task.id)
    board.drag_enter(column)
    moved = await board.drop(column)
    console.print(render_board(board))
    return 0 if moved else 1


async def _delete(args: argparse.Namespace, board: BoardController, console: Console) -> int:
    if not await board.fetch():
        return 1
    if board.state.find(args.task_id) is None:
        sys.stderr.write(f"Task {args.task_id} not found\n")
        return 1
    if not await board.delete(args.task_id):
        return 1
    _print_json({'deleted': args.task_id})
    return 0


async def _run_client(
    handler: ClientHandler,
    args: argparse.Namespace,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport],
) -> int:
    console = Console()
    async with TaskApiClient(settings.api_url, transport=transport) as api:
        return await handler(args, BoardController(api), console)


def _column(value: str) -> str:
    try:
        return TaskStatus.parse(value).value
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Kanban board server and terminal client')
    parser.add_argument('--config', default=None, help='YAML settings file (environment variables take precedence)')
    parser.add_argument('--api-url', default=None, help='Task API base URL (default: KANBAN_API_URL or http://localhost:5001/api)')
    parser.add_argument('--log-level', default=None, help='Log level (default: KANBAN_LOG_LEVEL or INFO)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    serve = subparsers.add_parser('serve', help='Start the Task API server')
    serve.add_argument('--host', default=None)
    serve.add_argument('--port', default=None, type=int)
    serve.add_argument('--reload', action='store_true', help='Restart the server when source files change')
    serve.set_defaults(func=_serve, client=False)

    board = subparsers.add_parser('board', help='Show the board')
    board.set_defaults(func=_board, client=True)

    add = subparsers.add_parser('add', help='Add a task to To Do')
    add.add_argument('title')
    add.add_argument('--description', default='')
    add.set_defaults(func=_add, client=True)

    edit = subparsers.add_parser('edit', help="Edit a task's title or description")
    edit.add_argument('task_id')
    edit.add_argument('--title', default=None)
    edit.add_argument('--description', default=None)
    edit.set_defaults(func=_edit, client=True)

    move = subparsers.add_parser('move', help='Move a task to another column')
    move.add_argument('task_id')
    move.add_argument('column', type=_column, help="'To Do', 'In Progress' or 'Done' (todo/in-progress/done also accepted)")
    move.set_defaults(func=_move, client=True)

    delete = subparsers.add_parser('delete', help='Delete a task')
    delete.add_argument('task_id')
    delete.set_defaults(func=_delete, client=True)

    return parser


def main(argv: list[str] | None = None, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, 'func', None)
    if handler is None:
        parser.print_help()
        return 1
    try:
        settings = _settings(args)
    except ConfigError as exc:
        sys.stderr.write(f"Invalid configuration: {exc}\n")
        return 1
    configure_logging(settings.log_level)

    if not args.client:
        return int(handler(args, settings) or 0)
    try:
        return asyncio.run(_run_client(handler, args, settings, transport))
    except ApiError as exc:
        sys.stderr.write(str(exc) + '\n')
        return 1


if __name__ == '__main__':
    sys.exit(main())
