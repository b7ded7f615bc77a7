"""CLI entry point for tasklist."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .api_client import TaskApiClient
from .manager import TASK_NOT_FOUND, TaskListManager
from .models import ErrorKind, ListState, Priority, Result, Task


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tasklist",
        description="View and edit a task list served by a JSON task API.",
    )
    parser.add_argument(
        "--api-url",
        type=str,
        default=None,
        help="Base URL of the task API (or set TASKLIST_API_URL env var)",
    )
    parser.add_argument(
        "--token",
        type=str,
        default=None,
        help="Bearer token for the task API (or set TASKLIST_API_TOKEN env var)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--output-json",
        type=str,
        default=None,
        help="Write the command result to a JSON file",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    list_cmd = commands.add_parser("list", help="List tasks in a view")
    list_cmd.add_argument(
        "--state",
        type=str,
        default=ListState.TODAY.value,
        choices=[s.value for s in ListState],
        help="Which view to show (default: today)",
    )

    add_cmd = commands.add_parser("add", help="Create a task")
    add_cmd.add_argument("title", type=str)
    _add_field_options(add_cmd)

    update_cmd = commands.add_parser("update", help="Edit a task's fields")
    update_cmd.add_argument("task_id", type=str)
    update_cmd.add_argument("--title", type=str, default=None)
    _add_field_options(update_cmd)

    for name, help_text in (
        ("toggle", "Flip a task between pending and completed"),
        ("archive", "Archive (soft-delete) a task"),
        ("show", "Show a single task"),
    ):
        cmd = commands.add_parser(name, help=help_text)
        cmd.add_argument("task_id", type=str)

    return parser


def _add_field_options(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--description", type=str, default=None)
    cmd.add_argument("--due", type=str, default=None, help="Due date (YYYY-MM-DD)")
    cmd.add_argument(
        "--priority",
        type=str,
        default=None,
        choices=[p.value for p in Priority],
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )

    api_url = args.api_url or os.environ.get("TASKLIST_API_URL")
    if not api_url:
        logging.error("No task API URL provided. Use --api-url or set TASKLIST_API_URL")
        return 1
    token = args.token or os.environ.get("TASKLIST_API_TOKEN")

    client = TaskApiClient(api_url, token=token)
    try:
        result = run_command(TaskListManager(client), args)
    finally:
        client.close()

    if result.success:
        _report(args.command, result)
    else:
        logging.error("%s failed: %s", args.command, result.error)

    if args.output_json:
        Path(args.output_json).write_text(json.dumps(result.to_dict(), indent=2))
        logging.info("Result written to %s", args.output_json)

    return 0 if result.success else 1


def run_command(manager: TaskListManager, args: argparse.Namespace) -> Result:
    """Dispatch a parsed command against ``manager``."""
    if args.command == "list":
        manager.set_list_state(args.state)
        return manager.initialize()

    if args.command == "add":
        return manager.create_task(
            {
                "title": args.title,
                "description": args.description,
                "dueDate": args.due,
                "priority": args.priority,
            }
        )

    # Remaining commands act on a cached task
    loaded = manager.initialize()
    if not loaded.success:
        return loaded
    task_id = parse_task_id(args.task_id)

    if args.command == "update":
        patch = {
            key: value
            for key, value in (
                ("title", args.title),
                ("description", args.description),
                ("dueDate", args.due),
                ("priority", args.priority),
            )
            if value is not None
        }
        return manager.update_task(task_id, patch)
    if args.command == "toggle":
        return manager.toggle_completion(task_id)
    if args.command == "archive":
        return manager.delete_task(task_id)

    task = manager.get_by_id(task_id)
    if task is None:
        return Result.fail(TASK_NOT_FOUND, ErrorKind.NOT_FOUND)
    return Result.ok(task)


def parse_task_id(raw: str) -> int | str:
    """Task ids typed on the command line are integers when they look like one."""
    return int(raw) if raw.isdigit() else raw


def format_task(task: Task) -> str:
    mark = "x" if task.is_completed else " "
    due = task.due_date or "-"
    return f"[{mark}] {task.id}  {task.title}  (due: {due}, priority: {task.priority.value})"


def _report(command: str, result: Result) -> None:
    if command == "list":
        tasks = result.data or []
        for task in tasks:
            print(format_task(task))
        logging.info("%d task(s)", len(tasks))
    elif isinstance(result.data, Task):
        print(format_task(result.data))


if __name__ == "__main__":
    sys.exit(main())
