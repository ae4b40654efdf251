# src/task_tracker/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Values are the exact strings stored in the tasks file and accepted by
    `task-cli list <status>`.
    """

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


@dataclass(slots=True)
class Task:
    id: int
    description: str
    status: TaskStatus
    created_at: str
    updated_at: str

    # Tombstone: set by delete, never written back to disk.
    deleted: bool = False

    @classmethod
    def create(cls, task_id: int, description: str, timestamp: str) -> Task:
        return cls(
            id=task_id,
            description=description,
            status=TaskStatus.TODO,
            created_at=timestamp,
            updated_at=timestamp,
            deleted=False,
        )

    def set_description(self, description: str, timestamp: str) -> None:
        self.description = description
        self.updated_at = timestamp

    def set_status(self, status: TaskStatus, timestamp: str) -> None:
        self.status = status
        self.updated_at = timestamp

    def mark_deleted(self) -> None:
        self.deleted = True

    @property
    def is_deleted(self) -> bool:
        return self.deleted

    def describe(self) -> str:
        """One-line rendering used by `task-cli list`."""
        return (
            f"ID: {self.id} | {self.description} | Status: {self.status.value} "
            f"| Created: {self.created_at} | Updated: {self.updated_at}"
        )
