# src/task_tracker/cli/main.py

"""
CLI entrypoint.

Initializes logging, checks the verb, builds AppState, runs exactly one
command and maps the outcome to an exit code:
- 0: command succeeded (or help was requested)
- 1: bad invocation, unknown task id, unreadable/unwritable tasks file
"""

from __future__ import annotations

import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..cli.commands import CommandError, UnknownCommandError, registry
from ..config import get_settings
from ..logging_setup import setup_logging
from ..tasks.task_store import MalformedTaskFileError, TaskNotFoundError

logger = logging.getLogger(__name__)

HELP_VERBS = ("help", "-h", "--help")


def main(argv: list[str] | None = None, *, settings=None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    if settings is None:
        settings = get_settings()

    level_name = str(getattr(settings, "log_level", "WARNING")).upper()
    console_level = getattr(logging, level_name, logging.WARNING)
    setup_logging(console_level=console_level, log_dir=getattr(settings, "log_dir", None))

    app_name = str(getattr(settings, "app_name", "task-cli"))
    usage = registry.build_help(app_name)

    if not argv:
        print(usage)
        return 1

    verb = argv[0]
    if verb in HELP_VERBS:
        print(usage)
        return 0

    # Reject unknown verbs before touching the tasks file.
    try:
        registry.resolve(verb)
    except UnknownCommandError as e:
        logger.debug("Unknown command %r", verb)
        print(e)
        print(usage)
        return 1

    try:
        state = create_initial_state(settings=settings)
    except MalformedTaskFileError as e:
        logger.error("%s", e)
        print(f"Error: {e}")
        return 1
    except OSError as e:
        logger.exception("Failed to read tasks file.")
        print(f"Error: Failed to load tasks: {e}")
        return 1

    try:
        output = registry.handle(state, argv)
    except CommandError as e:
        logger.debug("Command %s rejected: %s", verb, e)
        print(e)
        return 1
    except TaskNotFoundError as e:
        logger.debug("Command %s: %s", verb, e)
        print(e)
        return 1
    except OSError as e:
        logger.exception("Failed to save tasks.")
        print(f"Error: Failed to save tasks: {e}")
        return 1

    print(output)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
