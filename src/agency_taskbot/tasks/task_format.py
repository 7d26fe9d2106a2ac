# src/agency_taskbot/tasks/task_format.py

"""
Message bodies (Telegram legacy Markdown).

Pure functions: no transport, no registry access. User-supplied values are escaped so a stray
underscore or asterisk in a client name cannot break the whole message.
"""

from __future__ import annotations

from collections.abc import Iterable

from telegram.helpers import escape_markdown

from .task_models import StatusAction, TaskRecord, TaskStatus

STATUS_EMOJI: dict[TaskStatus, str] = {
    TaskStatus.PENDING: "⏳",
    TaskStatus.COMPLETED: "✅",
    TaskStatus.CANCELLED: "❌",
}

ACTION_LABELS: dict[StatusAction, str] = {
    StatusAction.COMPLETE: "✅ Mark complete",
    StatusAction.CANCEL: "❌ Mark cancelled",
}

NEW_TASK_HINT = "Tap a button below (or react with 👍 / 👎) to update the status"

HELP_TEXT = """
🤖 *Agency Task Bot*

*How to use:*
Send a task in this format:
`Task Type | Client | Deadline | @assignee`

*Example:*
`Editing | ABC Corp | 2025-10-05 | @john`

The bot will delete your message and post a formatted task card. Use the buttons under it (or react with 👍 / 👎) to mark it complete or cancelled. The assignee gets a reminder if a task is still pending after 24 hours.

*Commands:*
/setname <name> - set the name the bot shows for you
/myname - show your current display name
/tasks - list pending tasks in this chat

*Note:* Bot needs admin permissions to delete messages and read reactions!
""".strip()


def md_escape(value: str) -> str:
    return escape_markdown(value or "", version=1)


def status_line(status: TaskStatus) -> str:
    return f"{STATUS_EMOJI[status]} {status.value.capitalize()}"


def _task_fields(record: TaskRecord) -> list[str]:
    return [
        f"*Task:* {md_escape(record.task_type)}",
        f"*Client:* {md_escape(record.client)}",
        f"*Deadline:* {md_escape(record.deadline)}",
        f"*Assigned to:* {md_escape(record.assignee)}",
        f"*Assigned by:* {md_escape(record.assigned_by)}",
    ]


def format_new_task(record: TaskRecord) -> str:
    lines = ["📋 *NEW TASK*", ""]
    lines += _task_fields(record)
    lines += ["", f"*Status:* {status_line(TaskStatus.PENDING)}", "", f"_{NEW_TASK_HINT}_"]
    return "\n".join(lines)


def format_task_update(record: TaskRecord, updated_by: str) -> str:
    lines = [f"📋 *TASK {record.status.value.upper()}*", ""]
    lines += _task_fields(record)
    lines += ["", f"*Status:* {status_line(record.status)}", ""]
    # Legacy Markdown does not allow escapes inside an entity, so the name stays outside it.
    lines.append(f"_Updated by_ {md_escape(updated_by)}")
    return "\n".join(lines)


def format_reminder(record: TaskRecord, pending_hours: int = 24) -> str:
    return "\n".join(
        [
            "⏰ *REMINDER*",
            "",
            f"{md_escape(record.assignee)}, this task has been pending for more than "
            f"{pending_hours} hours:",
            "",
            f"*Task:* {md_escape(record.task_type)}",
            f"*Client:* {md_escape(record.client)}",
            f"*Deadline:* {md_escape(record.deadline)}",
        ]
    )


def format_task_list(records: Iterable[TaskRecord]) -> str:
    items = list(records)
    if not items:
        return "No pending tasks in this chat."
    lines = [f"📋 *Pending tasks ({len(items)}):*"]
    for i, r in enumerate(items, start=1):
        lines.append(
            f"{i}. {md_escape(r.task_type)} | {md_escape(r.client)} | "
            f"{md_escape(r.deadline)} | {md_escape(r.assignee)}"
        )
    return "\n".join(lines)
