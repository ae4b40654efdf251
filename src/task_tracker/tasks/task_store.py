# src/task_tracker/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

Clock = Callable[[], str]

_FIELDS = ("id", "description", "status", "createdAt", "updatedAt")


class TaskStoreError(Exception):
    """Base class for task store failures."""


class MalformedTaskFileError(TaskStoreError):
    """The tasks file exists but does not hold a valid list of tasks."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Malformed tasks file {path}: {reason}")
        self.path = path
        self.reason = reason


class TaskNotFoundError(TaskStoreError, LookupError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task with ID {task_id} not found")
        self.task_id = task_id


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class TaskStore:
    """
    JSON-file task store.

    The whole collection lives in memory for the lifetime of the process:
    - the file is read once, at construction
    - every mutation rewrites the whole file (temp file + os.replace)
    - deleted tasks stay in memory as tombstones but are never written

    Ids come from a counter that only moves forward, so an id retired by
    delete is never handed out again within a run. Across runs the counter
    restarts at max(id in file) + 1.

    Timestamps come from the clock (local time, one-second resolution by
    default). Two mutations within the same second therefore share a
    timestamp: updated_at never moves backwards, but it only strictly
    advances when the clock has ticked. Pass a finer clock if that matters.

    Not safe for concurrent invocations: the last writer wins.
    """

    def __init__(self, path: str | Path = "tasks.json", *, clock: Clock | None = None) -> None:
        self._path = Path(path)
        self._clock: Clock = clock or _ts_local
        self._tasks: list[Task] = []
        self._by_id: dict[int, Task] = {}
        self._next_id = 1
        self._load()
        logger.info("TaskStore ready path=%s total=%s next_id=%s", self._path, self.count_tasks(), self._next_id)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def next_id(self) -> int:
        return self._next_id

    # ---- low-level helpers ----

    @staticmethod
    def _task_to_dict(task: Task) -> dict[str, Any]:
        return {
            "id": task.id,
            "description": task.description,
            "status": task.status.value,
            "createdAt": task.created_at,
            "updatedAt": task.updated_at,
        }

    def _dict_to_task(self, raw: Any, index: int) -> Task:
        if not isinstance(raw, dict):
            raise MalformedTaskFileError(self._path, f"entry {index} is not an object")

        missing = [name for name in _FIELDS if name not in raw]
        if missing:
            raise MalformedTaskFileError(
                self._path, f"entry {index} is missing {', '.join(missing)}"
            )

        task_id = raw["id"]
        # bool is an int subclass; reject it explicitly.
        if not isinstance(task_id, int) or isinstance(task_id, bool) or task_id < 1:
            raise MalformedTaskFileError(self._path, f"entry {index} has invalid id {task_id!r}")

        for name in ("description", "status", "createdAt", "updatedAt"):
            if not isinstance(raw[name], str):
                raise MalformedTaskFileError(
                    self._path, f"entry {index} field {name!r} must be a string"
                )

        try:
            status = TaskStatus(raw["status"])
        except ValueError:
            raise MalformedTaskFileError(
                self._path, f"entry {index} has unknown status {raw['status']!r}"
            ) from None

        return Task(
            id=task_id,
            description=raw["description"],
            status=status,
            created_at=raw["createdAt"],
            updated_at=raw["updatedAt"],
        )

    def _load(self) -> None:
        if not self._path.exists():
            logger.debug("Tasks file %s does not exist yet; starting empty.", self._path)
            return

        try:
            content = self._path.read_text("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedTaskFileError(self._path, f"not valid UTF-8 ({e})") from e

        if not content.strip():
            return

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise MalformedTaskFileError(self._path, f"invalid JSON ({e})") from e

        if not isinstance(data, list):
            raise MalformedTaskFileError(self._path, "top-level value must be a list")

        for index, raw in enumerate(data):
            task = self._dict_to_task(raw, index)
            if task.id in self._by_id:
                raise MalformedTaskFileError(self._path, f"duplicate id {task.id}")
            self._tasks.append(task)
            self._by_id[task.id] = task
            self._next_id = max(self._next_id, task.id + 1)

        # Keep listing order id-ascending even if the file was edited by hand.
        self._tasks.sort(key=lambda t: t.id)
        logger.debug("Loaded %d tasks from %s", len(self._tasks), self._path)

    def _save(self) -> None:
        live = [self._task_to_dict(t) for t in self._tasks if not t.is_deleted]

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            tmp.write_text(json.dumps(live, ensure_ascii=False, indent=2) + "\n", "utf-8")
            os.replace(tmp, self._path)
        except BaseException:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise
        logger.debug("Saved %d tasks to %s", len(live), self._path)

    def _require(self, task_id: int) -> Task:
        task = self.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    # ---- public API ----

    def count_tasks(self) -> int:
        return sum(1 for t in self._tasks if not t.is_deleted)

    def get(self, task_id: int) -> Task | None:
        """Return the live task with this id, or None (deleted tasks are invisible)."""
        task = self._by_id.get(task_id)
        if task is None or task.is_deleted:
            return None
        return task

    def add(self, description: str) -> int:
        task = Task.create(self._next_id, description, self._clock())
        self._next_id += 1
        self._tasks.append(task)
        self._by_id[task.id] = task
        self._save()
        logger.debug("Task added id=%s", task.id)
        return task.id

    def update(self, task_id: int, description: str) -> Task:
        task = self._require(task_id)
        task.set_description(description, self._clock())
        self._save()
        logger.debug("Task updated id=%s", task_id)
        return task

    def delete(self, task_id: int) -> Task:
        task = self._require(task_id)
        task.mark_deleted()
        self._save()
        logger.debug("Task deleted id=%s", task_id)
        return task

    def set_status(self, task_id: int, status: TaskStatus) -> Task:
        task = self._require(task_id)
        task.set_status(status, self._clock())
        self._save()
        logger.debug("Task status changed id=%s status=%s", task_id, status.value)
        return task

    def mark_in_progress(self, task_id: int) -> Task:
        return self.set_status(task_id, TaskStatus.IN_PROGRESS)

    def mark_done(self, task_id: int) -> Task:
        return self.set_status(task_id, TaskStatus.DONE)

    def list_all(self) -> list[Task]:
        return [t for t in self._tasks if not t.is_deleted]

    def list_by_status(self, status: str) -> list[Task]:
        """
        Live tasks whose status equals `status` exactly.

        Unknown status strings are not an error; they simply match nothing.
        """
        return [t for t in self._tasks if not t.is_deleted and t.status == status]
