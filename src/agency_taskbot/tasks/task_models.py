# src/agency_taskbot/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Notes:
    - "pending" is the only non-terminal status.
    - completed/cancelled are final: nothing moves a task out of them.
    """

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not TaskStatus.PENDING


class StatusAction(StrEnum):
    """What a user asked for via a button press or a reaction."""

    COMPLETE = "complete"
    CANCEL = "cancel"

    @property
    def target_status(self) -> TaskStatus:
        if self is StatusAction.COMPLETE:
            return TaskStatus.COMPLETED
        return TaskStatus.CANCELLED

    @classmethod
    def parse(cls, raw: str | None) -> StatusAction | None:
        if not raw:
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


@dataclass(slots=True, frozen=True)
class ChatUser:
    user_id: str
    username: str | None = None
    first_name: str | None = None
    is_bot: bool = False

    @property
    def handle(self) -> str:
        if self.username:
            return f"@{self.username}"
        if self.first_name:
            return self.first_name
        return self.user_id


@dataclass(slots=True)
class TaskRecord:
    id: str
    conversation_id: str

    task_type: str
    client: str
    deadline: str
    assignee: str
    assigned_by: str

    status: TaskStatus
    created_at: float
    reminder_sent: bool = False
    updated_by: str | None = None


@dataclass(slots=True, frozen=True)
class ParsedTask:
    task_type: str
    client: str
    deadline: str
    assignee: str


class RenderKind(StrEnum):
    SEND = "send"
    EDIT = "edit"


@dataclass(slots=True, frozen=True)
class RenderRequest:
    """
    What the core wants the transport to show.

    The core decides:
    - whether a message is sent or an existing one edited
    - the body text and which status buttons to attach

    The transport decides how to deliver it (API calls, keyboard layout, parse mode).
    """

    kind: RenderKind
    conversation_id: str
    text: str
    message_id: str | None = None
    reply_to_message_id: str | None = None
    delete_message_id: str | None = None
    actions: tuple[StatusAction, ...] = ()


@dataclass(slots=True, frozen=True)
class ActionOutcome:
    found: bool
    changed: bool
    ack_text: str
    record: TaskRecord | None = None
