# src/agency_taskbot/tasks/reminder_scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

A small polling loop that:
- scans pending tasks,
- picks the ones that have been pending for too long and were never reminded,
- flags them as reminded and sends one reminder into the task's chat.

The flag is set before the send, so a task is reminded at most once even if delivery fails.
Missed ticks (process down) are not caught up.
"""

import asyncio
import logging
import time

from ..core.ports import ChatTransport, TaskRepo
from .task_format import format_reminder
from .task_models import RenderKind, RenderRequest, TaskRecord

logger = logging.getLogger(__name__)

REMIND_AFTER_SECONDS = 24 * 3600
REMINDER_INTERVAL_SECONDS = 3600


def build_reminder(
    task: TaskRecord, *, remind_after_seconds: float = REMIND_AFTER_SECONDS
) -> RenderRequest:
    """Reminder message: posted in the task's chat as a reply to its status message."""
    return RenderRequest(
        kind=RenderKind.SEND,
        conversation_id=task.conversation_id,
        text=format_reminder(task, pending_hours=int(remind_after_seconds // 3600)),
        reply_to_message_id=task.id,
    )


class ReminderScheduler:
    def __init__(
        self,
        registry: TaskRepo,
        transport: ChatTransport,
        *,
        remind_after_seconds: float = REMIND_AFTER_SECONDS,
        interval_seconds: float = REMINDER_INTERVAL_SECONDS,
    ) -> None:
        self.registry = registry
        self.transport = transport
        self.remind_after_seconds = float(remind_after_seconds)
        self.interval_seconds = max(1.0, float(interval_seconds))

    def due_reminders(self, now: float) -> list[TaskRecord]:
        return [
            task
            for task in self.registry.iter_pending()
            if not task.reminder_sent and now - task.created_at >= self.remind_after_seconds
        ]

    async def tick(self, now: float | None = None) -> list[RenderRequest]:
        """Run one sweep. Returns the reminders that were emitted."""
        now_ts = time.time() if now is None else float(now)
        emitted: list[RenderRequest] = []

        for task in self.due_reminders(now_ts):
            if not self.registry.mark_reminder_sent(task.id):
                continue

            request = build_reminder(task, remind_after_seconds=self.remind_after_seconds)
            emitted.append(request)
            try:
                await self.transport.send_message(
                    conversation_id=request.conversation_id,
                    text=request.text,
                    reply_to_message_id=request.reply_to_message_id,
                )
                logger.info("Reminder sent for task %s to %s", task.id, task.assignee)
            except Exception:
                logger.exception("Failed to send reminder for task %s", task.id)

        return emitted

    async def run(self) -> None:
        """
        Tick every interval_seconds until cancelled.

        Ticks never overlap: the next sleep starts only after the current sweep is done.
        """
        logger.info(
            "Reminder scheduler started (interval=%.0fs, remind_after=%.0fs)",
            self.interval_seconds,
            self.remind_after_seconds,
        )
        while True:
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Reminder sweep failed")
            await asyncio.sleep(self.interval_seconds)
