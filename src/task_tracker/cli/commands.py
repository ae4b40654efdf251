# src/task_tracker/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..core.state import AppState
from ..tasks.task_models import Task

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """A command could not run because of how it was invoked."""


class MissingArgumentError(CommandError):
    pass


class InvalidArgumentError(CommandError):
    pass


class UnknownCommandError(CommandError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Error: Unknown command '{name}'")
        self.name = name


@dataclass(frozen=True, slots=True)
class Command:
    name: str
    handler: CommandHandler
    usage: str
    help_text: str


class CommandRegistry:
    """Verb registry used by the CLI entrypoint (add, list, mark-done, ...)."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}

    def register(self, name: str, handler: CommandHandler, usage: str, help_text: str) -> None:
        self._commands[name] = Command(name=name, handler=handler, usage=usage, help_text=help_text)

    def resolve(self, name: str) -> Command:
        command = self._commands.get(name)
        if command is None:
            raise UnknownCommandError(name)
        return command

    def handle(self, state: AppState, argv: list[str]) -> str:
        """
        Run argv[0] with argv[1:] as arguments and return the text to print.

        Verbs are matched exactly (case-sensitive).
        Raises CommandError subclasses for bad invocations; TaskStore errors propagate.
        """
        if not argv:
            raise MissingArgumentError(self.build_help())

        command = self.resolve(argv[0])

        logger.debug("Running command %s args=%s", command.name, argv[1:])
        return command.handler(state, argv[1:])

    def build_help(self, app_name: str = "task-cli") -> str:
        entries = [
            (f"{app_name} {c.name} {c.usage}", c.help_text) for c in self._commands.values()
        ]
        width = max((len(left) for left, _ in entries), default=0)
        lines = ["Usage:"]
        for left, help_text in entries:
            lines.append(f"  {left.ljust(width)} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _parse_id(raw: str) -> int:
    # ASCII digits with an optional sign only.
    digits = raw[1:] if raw.startswith(("+", "-")) else raw
    if not (digits.isascii() and digits.isdigit()):
        raise InvalidArgumentError(f"Error: Invalid task ID '{raw}'")
    return int(raw)


def _require_id(args: list[str]) -> int:
    if not args:
        raise MissingArgumentError("Error: Please provide task ID")
    return _parse_id(args[0])


def _require_text(raw: str) -> str:
    # Undecodable argv bytes arrive as lone surrogates, which the tasks file cannot hold.
    try:
        raw.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidArgumentError("Error: Task description is not valid UTF-8 text") from None
    return raw


def _format_tasks(tasks: list[Task], empty_message: str) -> str:
    if not tasks:
        return empty_message
    return "\n".join(t.describe() for t in tasks)


def cmd_add(state: AppState, args: list[str]) -> str:
    if not args:
        raise MissingArgumentError("Error: Please provide a task description")
    task_id = state.task_store.add(_require_text(args[0]))
    return f"Task added successfully (ID: {task_id})"


def cmd_update(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        raise MissingArgumentError("Error: Please provide task ID and new description")
    state.task_store.update(_parse_id(args[0]), _require_text(args[1]))
    return "Task updated successfully"


def cmd_delete(state: AppState, args: list[str]) -> str:
    state.task_store.delete(_require_id(args))
    return "Task deleted successfully"


def cmd_mark_in_progress(state: AppState, args: list[str]) -> str:
    state.task_store.mark_in_progress(_require_id(args))
    return "Task marked as in progress"


def cmd_mark_done(state: AppState, args: list[str]) -> str:
    state.task_store.mark_done(_require_id(args))
    return "Task marked as done"


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    list           -> every live task
    list <status>  -> live tasks with exactly that status (unknown status -> nothing)
    """
    if not args:
        return _format_tasks(state.task_store.list_all(), "No tasks found")

    if len(args) > 1:
        raise InvalidArgumentError("Error: list takes at most one status argument")

    status = args[0]
    return _format_tasks(
        state.task_store.list_by_status(status), f"No tasks found with status: {status}"
    )


registry.register("add", cmd_add, '"description"', "Add a new task")
registry.register("update", cmd_update, '<id> "description"', "Update task description")
registry.register("delete", cmd_delete, "<id>", "Delete a task")
registry.register("mark-in-progress", cmd_mark_in_progress, "<id>", "Mark task as in progress")
registry.register("mark-done", cmd_mark_done, "<id>", "Mark task as done")
registry.register(
    "list", cmd_list, "[todo|in-progress|done]", "List all tasks, or only those with a status"
)
