# src/agency_taskbot/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..tasks.task_format import HELP_TEXT, format_task_list, md_escape
from ..tasks.task_lifecycle import TaskLifecycleController
from ..tasks.task_models import ChatUser

CommandHandler = Callable[[TaskLifecycleController, str, ChatUser, str], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/start, /setname, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    @property
    def names(self) -> list[str]:
        return list(self._handlers)

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        controller: TaskLifecycleController,
        line: str,
        user: ChatUser,
        conversation_id: str,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        head, _, rest = line[1:].partition(" ")
        # Telegram group commands may carry the bot name: /setname@agency_bot
        name = head.split("@", 1)[0].lower()
        if not name:
            return "Empty command. Use /help to list available commands."

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(controller, rest, user, conversation_id)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def cmd_start(
    controller: TaskLifecycleController,
    arg_text: str,
    user: ChatUser,
    conversation_id: str,
) -> str:
    return HELP_TEXT


def cmd_setname(
    controller: TaskLifecycleController,
    arg_text: str,
    user: ChatUser,
    conversation_id: str,
) -> str:
    """
    /setname <name>  -> use <name> instead of the Telegram handle
    """
    nickname = arg_text.strip()
    if not controller.set_nickname(user.user_id, nickname):
        return "Usage: /setname <your name>"
    return f"Got it! I'll call you {md_escape(nickname)}."


def cmd_myname(
    controller: TaskLifecycleController,
    arg_text: str,
    user: ChatUser,
    conversation_id: str,
) -> str:
    return f"Your display name is: {md_escape(controller.get_display_name(user))}"


def cmd_tasks(
    controller: TaskLifecycleController,
    arg_text: str,
    user: ChatUser,
    conversation_id: str,
) -> str:
    return format_task_list(controller.registry.iter_pending(conversation_id))


registry.register("start", cmd_start, help_text="Show how to post a task.", aliases=["help"])
registry.register("setname", cmd_setname, help_text="Set your display name: /setname <name>.")
registry.register("myname", cmd_myname, help_text="Show your current display name.")
registry.register("tasks", cmd_tasks, help_text="List pending tasks in this chat.")
