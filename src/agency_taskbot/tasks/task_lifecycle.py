# src/agency_taskbot/tasks/task_lifecycle.py

from __future__ import annotations

"""
Task lifecycle controller.

Two entry points:
- submit_task: a structured chat message becomes a rendered status message + a registry entry
- handle_status_action: a button press or a reaction moves a task to completed/cancelled

Building what to show (RenderRequest) is pure; delivering it goes through the ChatTransport port.
Transport failures are logged here and never propagate to the connector.
"""

import logging
import time

from ..core.ports import ChatTransport, NameDirectory, TaskRepo
from .task_format import format_new_task, format_task_update
from .task_models import (
    ActionOutcome,
    ChatUser,
    ParsedTask,
    RenderKind,
    RenderRequest,
    StatusAction,
    TaskRecord,
    TaskStatus,
)

logger = logging.getLogger(__name__)

TASK_DELIMITER = "|"
TASK_SEGMENTS = 4
TASK_ACTIONS: tuple[StatusAction, ...] = (StatusAction.COMPLETE, StatusAction.CANCEL)


def parse_task_text(raw_text: str | None) -> ParsedTask | None:
    """
    "Editing | ABC Corp | 2025-10-05 | @john" -> ParsedTask.

    Any line with exactly four pipe-delimited segments is accepted; the content of each
    segment is not validated. Everything else returns None so ordinary chat passes through.
    """
    if not raw_text:
        return None
    parts = [p.strip() for p in raw_text.split(TASK_DELIMITER)]
    if len(parts) != TASK_SEGMENTS:
        return None
    task_type, client, deadline, assignee = parts
    return ParsedTask(task_type=task_type, client=client, deadline=deadline, assignee=assignee)


class TaskLifecycleController:
    def __init__(
        self,
        registry: TaskRepo,
        nicknames: NameDirectory,
        transport: ChatTransport,
    ) -> None:
        self.registry = registry
        self.nicknames = nicknames
        self.transport = transport

    # ---- display names ----

    def set_nickname(self, user_id: str, nickname: str) -> bool:
        return self.nicknames.set(user_id, nickname)

    def get_display_name(self, user: ChatUser) -> str:
        return self.nicknames.display_name(user)

    # ---- new tasks ----

    def _draft(
        self, conversation_id: str, raw_text: str | None, submitter: ChatUser
    ) -> TaskRecord | None:
        parsed = parse_task_text(raw_text)
        if parsed is None:
            return None
        return TaskRecord(
            id="",
            conversation_id=conversation_id,
            task_type=parsed.task_type,
            client=parsed.client,
            deadline=parsed.deadline,
            assignee=parsed.assignee,
            assigned_by=self.get_display_name(submitter),
            status=TaskStatus.PENDING,
            created_at=0.0,
        )

    @staticmethod
    def _submission_request(draft: TaskRecord, message_id: str | None) -> RenderRequest:
        return RenderRequest(
            kind=RenderKind.SEND,
            conversation_id=draft.conversation_id,
            text=format_new_task(draft),
            delete_message_id=message_id,
            actions=TASK_ACTIONS,
        )

    def prepare_submission(
        self,
        conversation_id: str,
        message_id: str | None,
        raw_text: str | None,
        submitter: ChatUser,
    ) -> RenderRequest | None:
        """Describe what a submission would render, or None if the text is not a task."""
        draft = self._draft(conversation_id, raw_text, submitter)
        if draft is None:
            return None
        return self._submission_request(draft, message_id)

    async def submit_task(
        self,
        conversation_id: str,
        message_id: str | None,
        raw_text: str | None,
        submitter: ChatUser,
        now: float | None = None,
    ) -> TaskRecord | None:
        """
        Render first, register second.

        The registry key is the id the transport assigns to the new status message, so the
        record can only be created once the send has succeeded. A failed delete of the
        original message does not stop the task from being posted.
        """
        draft = self._draft(conversation_id, raw_text, submitter)
        if draft is None:
            return None

        request = self._submission_request(draft, message_id)
        created_at = time.time() if now is None else float(now)

        if request.delete_message_id:
            try:
                await self.transport.delete_message(message_id=request.delete_message_id)
            except Exception:
                logger.warning(
                    "Failed to delete task source message %s; posting task anyway",
                    request.delete_message_id,
                    exc_info=True,
                )

        try:
            sent_id = await self.transport.send_message(
                conversation_id=request.conversation_id,
                text=request.text,
                actions=request.actions,
            )
        except Exception:
            logger.exception("Failed to send task message to chat %s", conversation_id)
            return None

        try:
            record = self.registry.create(
                sent_id,
                conversation_id=conversation_id,
                task_type=draft.task_type,
                client=draft.client,
                deadline=draft.deadline,
                assignee=draft.assignee,
                assigned_by=draft.assigned_by,
                created_at=created_at,
            )
        except ValueError:
            logger.exception("Failed to register task for message %s", sent_id)
            return None

        logger.info(
            "New task id=%s chat=%s type=%r assignee=%s by=%s",
            record.id,
            conversation_id,
            record.task_type,
            record.assignee,
            record.assigned_by,
        )
        return record

    # ---- status changes ----

    def build_status_update(self, record: TaskRecord, updated_by: str) -> RenderRequest:
        return RenderRequest(
            kind=RenderKind.EDIT,
            conversation_id=record.conversation_id,
            text=format_task_update(record, updated_by),
            message_id=record.id,
        )

    async def handle_status_action(
        self,
        action: StatusAction,
        target_message_id: str,
        actor: ChatUser,
    ) -> ActionOutcome:
        """
        Apply a complete/cancel action coming from a button or a reaction.

        Unknown ids (including a task rendered but not yet registered) are reported as not
        found. Terminal tasks stay as they are and the status message is left untouched.
        """
        current = self.registry.get(target_message_id)
        if current is None:
            logger.info("Status action %s on unknown task %s", action.value, target_message_id)
            return ActionOutcome(found=False, changed=False, ack_text="Task not found")

        if current.status.is_terminal:
            return ActionOutcome(
                found=True,
                changed=False,
                ack_text=f"Task is already {current.status.value}",
                record=current,
            )

        actor_name = self.get_display_name(actor)
        record = self.registry.transition(
            target_message_id, action.target_status, updated_by=actor_name
        )
        if record is None:
            return ActionOutcome(found=False, changed=False, ack_text="Task not found")

        request = self.build_status_update(record, actor_name)
        try:
            await self.transport.edit_message(message_id=record.id, text=request.text)
        except Exception:
            logger.exception("Failed to update task message %s", record.id)

        return ActionOutcome(
            found=True,
            changed=True,
            ack_text=f"Task marked as {record.status.value}",
            record=record,
        )
