# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from task_tracker.tasks.task_store import TaskStore

from .fakes import FakeClock


@pytest.fixture()
def tasks_path(tmp_path: Path) -> Path:
    return tmp_path / "tasks.json"


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(tasks_path: Path, clock: FakeClock) -> TaskStore:
    return TaskStore(tasks_path, clock=clock)


@pytest.fixture()
def settings(tasks_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any local .env.
    """
    return SimpleNamespace(
        app_name="task-cli",
        log_level="CRITICAL",
        log_dir=None,
        tasks_file_path=tasks_path,
    )
