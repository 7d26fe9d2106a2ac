# src/agency_taskbot/tasks/task_registry.py

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import replace

from .task_models import TaskRecord, TaskStatus

logger = logging.getLogger(__name__)


class DuplicateTaskError(ValueError):
    """Raised when a status message id is registered twice."""


class TaskRegistry:
    """
    In-memory task registry.

    Records are keyed by the id of the status message that represents them.
    The id is assigned by the transport after the message is sent, never by the registry.

    Ownership:
    - the registry is the only holder of mutable TaskRecord instances
    - every read returns a copy; changes go through create/transition/mark_reminder_sent

    Nothing is ever deleted: the registry lives as long as the process.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, TaskRecord] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def count(self) -> int:
        return len(self._tasks)

    def create(
        self,
        task_id: str,
        *,
        conversation_id: str,
        task_type: str,
        client: str,
        deadline: str,
        assignee: str,
        assigned_by: str,
        created_at: float,
    ) -> TaskRecord:
        if not task_id:
            raise ValueError("task_id is required")
        if task_id in self._tasks:
            raise DuplicateTaskError(f"task {task_id!r} is already registered")

        record = TaskRecord(
            id=task_id,
            conversation_id=conversation_id,
            task_type=task_type,
            client=client,
            deadline=deadline,
            assignee=assignee,
            assigned_by=assigned_by,
            status=TaskStatus.PENDING,
            created_at=float(created_at),
        )
        self._tasks[task_id] = record
        logger.debug(
            "Task registered id=%s chat=%s assignee=%s total=%d",
            task_id,
            conversation_id,
            assignee,
            len(self._tasks),
        )
        return replace(record)

    def get(self, task_id: str) -> TaskRecord | None:
        record = self._tasks.get(task_id)
        return replace(record) if record is not None else None

    def transition(
        self,
        task_id: str,
        new_status: TaskStatus,
        *,
        updated_by: str | None = None,
    ) -> TaskRecord | None:
        """
        Move a pending task to a terminal status.

        Returns None if the id is unknown.
        A task that is already terminal is returned unchanged.
        """
        if not new_status.is_terminal:
            raise ValueError(f"cannot transition to non-terminal status {new_status!r}")

        record = self._tasks.get(task_id)
        if record is None:
            return None

        if record.status.is_terminal:
            logger.debug(
                "Task %s already %s; %s ignored", task_id, record.status.value, new_status.value
            )
            return replace(record)

        record.status = new_status
        record.updated_by = updated_by
        logger.info("Task %s -> %s (by %s)", task_id, new_status.value, updated_by)
        return replace(record)

    def mark_reminder_sent(self, task_id: str) -> bool:
        """
        Flag a pending task as reminded.

        Returns False (and changes nothing) if the task is unknown, no longer pending,
        or was already reminded.
        """
        record = self._tasks.get(task_id)
        if record is None or record.status is not TaskStatus.PENDING or record.reminder_sent:
            return False
        record.reminder_sent = True
        return True

    def iter_pending(self, conversation_id: str | None = None) -> Iterator[TaskRecord]:
        """
        Lazily yield copies of pending tasks.

        The key set is snapshotted up front so mutations during iteration are safe;
        each record's status is read when it is reached, not at snapshot time.
        """
        for task_id in list(self._tasks):
            record = self._tasks.get(task_id)
            if record is None or record.status is not TaskStatus.PENDING:
                continue
            if conversation_id is not None and record.conversation_id != conversation_id:
                continue
            yield replace(record)
