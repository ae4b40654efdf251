# tests/test_config.py

from __future__ import annotations

from pathlib import Path

from task_tracker.config import Settings


def test_defaults(monkeypatch) -> None:
    for name in ("APP_NAME", "LOG_LEVEL", "LOG_DIR", "TASKS_FILE"):
        monkeypatch.delenv(f"TASK_TRACKER_{name}", raising=False)

    s = Settings.from_env()
    assert s.app_name == "task-cli"
    assert s.log_level == "WARNING"
    assert s.log_dir is None
    assert s.tasks_file_path == Path("tasks.json")


def test_overrides_from_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASK_TRACKER_APP_NAME", "todo")
    monkeypatch.setenv("TASK_TRACKER_LOG_LEVEL", "debug")
    monkeypatch.setenv("TASK_TRACKER_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("TASK_TRACKER_TASKS_FILE", str(tmp_path / "mine.json"))

    s = Settings.from_env()
    assert s.app_name == "todo"
    assert s.log_level == "DEBUG"
    assert s.log_dir == tmp_path / "logs"
    assert s.tasks_file_path == tmp_path / "mine.json"


def test_blank_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("TASK_TRACKER_APP_NAME", "  ")
    monkeypatch.setenv("TASK_TRACKER_TASKS_FILE", "")
    monkeypatch.setenv("TASK_TRACKER_LOG_DIR", " ")

    s = Settings.from_env()
    assert s.app_name == "task-cli"
    assert s.tasks_file_path == Path("tasks.json")
    assert s.log_dir is None
