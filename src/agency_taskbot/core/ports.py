# src/agency_taskbot/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the chat transport and the stores swappable and makes testing easier.
"""

from collections.abc import Iterator
from typing import Protocol

from ..tasks.task_models import ChatUser, StatusAction, TaskRecord, TaskStatus


class ChatTransport(Protocol):
    """
    Connector-side port: how the core talks to the chat.

    Message ids are opaque strings produced by the transport itself;
    the core only stores them and hands them back.
    """

    async def send_message(
            self,
            *,
            conversation_id: str,
            text: str,
            reply_to_message_id: str | None = None,
            actions: tuple[StatusAction, ...] = (),
    ) -> str: ...

    async def edit_message(
            self,
            *,
            message_id: str,
            text: str,
            actions: tuple[StatusAction, ...] = (),
    ) -> None: ...

    async def delete_message(self, *, message_id: str) -> None: ...


class TaskRepo(Protocol):
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
    ) -> TaskRecord: ...

    def get(self, task_id: str) -> TaskRecord | None: ...

    def transition(
            self,
            task_id: str,
            new_status: TaskStatus,
            *,
            updated_by: str | None = None,
    ) -> TaskRecord | None: ...

    def mark_reminder_sent(self, task_id: str) -> bool: ...
    def iter_pending(self, conversation_id: str | None = None) -> Iterator[TaskRecord]: ...


class NameDirectory(Protocol):
    def set(self, user_id: str, nickname: str) -> bool: ...
    def get(self, user_id: str) -> str | None: ...
    def display_name(self, user: ChatUser) -> str: ...
