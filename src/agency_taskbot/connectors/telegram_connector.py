# src/agency_taskbot/connectors/telegram_connector.py

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Iterable
from enum import StrEnum

from telegram import Bot, InlineKeyboardButton, InlineKeyboardMarkup, ReplyParameters, Update
from telegram import User as TelegramUser
from telegram.constants import ParseMode
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    MessageReactionHandler,
    filters,
)

from ..cli.bootstrap import build_controller, build_reminder_scheduler
from ..cli.commands import CommandRegistry
from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..tasks.task_format import ACTION_LABELS
from ..tasks.task_models import ChatUser, StatusAction
from .health_server import start_health_server

logger = logging.getLogger(__name__)

CALLBACK_PREFIX = "task:"

REACTION_ACTIONS: dict[str, StatusAction] = {
    "👍": StatusAction.COMPLETE,
    "👎": StatusAction.CANCEL,
}


# ---- ids / payloads ----

def message_ref(chat_id: int | str, message_id: int | str) -> str:
    """Telegram message ids are only unique per chat, so the reference carries both."""
    return f"{chat_id}:{message_id}"


def split_message_ref(ref: str) -> tuple[int, int]:
    chat_id, sep, message_id = ref.rpartition(":")
    if not sep:
        raise ValueError(f"not a message reference: {ref!r}")
    return int(chat_id), int(message_id)


def callback_data(action: StatusAction) -> str:
    return f"{CALLBACK_PREFIX}{action.value}"


def parse_callback_data(data: str | None) -> StatusAction | None:
    if not data or not data.startswith(CALLBACK_PREFIX):
        return None
    return StatusAction.parse(data[len(CALLBACK_PREFIX):])


def action_from_reactions(reactions: Iterable[object]) -> StatusAction | None:
    """Only the first reaction counts; non-emoji reactions (custom, paid) are ignored."""
    first = next(iter(reactions), None)
    if first is None:
        return None
    return REACTION_ACTIONS.get(getattr(first, "emoji", None) or "")


def chat_user_from(user: TelegramUser) -> ChatUser:
    return ChatUser(
        user_id=str(user.id),
        username=user.username,
        first_name=user.first_name,
        is_bot=bool(user.is_bot),
    )


def build_keyboard(actions: tuple[StatusAction, ...]) -> InlineKeyboardMarkup | None:
    if not actions:
        return None
    buttons = [
        InlineKeyboardButton(ACTION_LABELS[action], callback_data=callback_data(action))
        for action in actions
    ]
    return InlineKeyboardMarkup([buttons])


# ---- transport ----

class TelegramTransport:
    """ChatTransport on top of telegram.Bot. Errors propagate to the caller."""

    def __init__(self, bot: Bot) -> None:
        self.bot = bot

    async def send_message(
        self,
        *,
        conversation_id: str,
        text: str,
        reply_to_message_id: str | None = None,
        actions: tuple[StatusAction, ...] = (),
    ) -> str:
        reply_parameters = None
        if reply_to_message_id:
            # Still deliver if the referenced message was deleted meanwhile.
            reply_parameters = ReplyParameters(
                message_id=split_message_ref(reply_to_message_id)[1],
                allow_sending_without_reply=True,
            )
        sent = await self.bot.send_message(
            chat_id=int(conversation_id),
            text=text,
            parse_mode=ParseMode.MARKDOWN,
            reply_markup=build_keyboard(actions),
            reply_parameters=reply_parameters,
        )
        return message_ref(sent.chat_id, sent.message_id)

    async def edit_message(
        self,
        *,
        message_id: str,
        text: str,
        actions: tuple[StatusAction, ...] = (),
    ) -> None:
        chat_id, msg_id = split_message_ref(message_id)
        await self.bot.edit_message_text(
            text=text,
            chat_id=chat_id,
            message_id=msg_id,
            parse_mode=ParseMode.MARKDOWN,
            reply_markup=build_keyboard(actions),
        )

    async def delete_message(self, *, message_id: str) -> None:
        chat_id, msg_id = split_message_ref(message_id)
        await self.bot.delete_message(chat_id=chat_id, message_id=msg_id)


# ---- inbound events ----

class EventKind(StrEnum):
    TEXT = "text"
    COMMAND = "command"
    BUTTON = "button"
    REACTION = "reaction"


EventHandler = Callable[[Update, ContextTypes.DEFAULT_TYPE], Awaitable[None]]


class TelegramConnector:
    """
    Routes Telegram updates into the core.

    Each event kind maps to exactly one handler (see dispatch_table). Updates are processed one
    at a time by the Application, so handlers never run concurrently with each other.
    """

    def __init__(
        self,
        state: AppState,
        transport: TelegramTransport,
        commands: CommandRegistry = command_registry,
    ) -> None:
        self.state = state
        self.transport = transport
        self.commands = commands
        self.controller = build_controller(state, transport)

    def dispatch_table(self) -> dict[EventKind, EventHandler]:
        return {
            EventKind.TEXT: self.on_text,
            EventKind.COMMAND: self.on_command,
            EventKind.BUTTON: self.on_button,
            EventKind.REACTION: self.on_reaction,
        }

    def register(self, application: Application) -> None:
        table = self.dispatch_table()
        application.add_handler(CommandHandler(self.commands.names, table[EventKind.COMMAND]))
        application.add_handler(
            MessageHandler(
                filters.UpdateType.MESSAGE & filters.TEXT & ~filters.COMMAND,
                table[EventKind.TEXT],
            )
        )
        application.add_handler(
            CallbackQueryHandler(table[EventKind.BUTTON], pattern=f"^{CALLBACK_PREFIX}")
        )
        application.add_handler(MessageReactionHandler(table[EventKind.REACTION]))
        application.add_error_handler(self.on_error)

    async def on_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.message
        if message is None or not message.text or message.from_user is None:
            return
        if message.from_user.is_bot:
            return

        chat_id = str(message.chat_id)
        await self.controller.submit_task(
            chat_id,
            message_ref(chat_id, message.message_id),
            message.text,
            chat_user_from(message.from_user),
        )

    async def on_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        user = update.effective_user
        if message is None or not message.text or user is None:
            return

        try:
            resp = self.commands.handle(
                self.controller, message.text, chat_user_from(user), str(message.chat_id)
            )
        except Exception:
            logger.exception("Command handler crashed.")
            resp = "Internal error while handling a command."

        if not resp:
            return
        try:
            await message.reply_text(resp, parse_mode=ParseMode.MARKDOWN)
        except Exception:
            logger.exception("Failed to send command reply.")

    async def on_button(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        query = update.callback_query
        if query is None:
            return

        action = parse_callback_data(query.data)
        if action is None or query.message is None:
            with contextlib.suppress(Exception):
                await query.answer()
            return

        target = message_ref(query.message.chat.id, query.message.message_id)
        outcome = await self.controller.handle_status_action(
            action, target, chat_user_from(query.from_user)
        )
        try:
            await query.answer(outcome.ack_text)
        except Exception:
            logger.warning("Failed to answer callback for %s", target, exc_info=True)

    async def on_reaction(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        reaction = update.message_reaction
        if reaction is None or reaction.user is None:
            return

        action = action_from_reactions(reaction.new_reaction)
        if action is None:
            return

        target = message_ref(reaction.chat.id, reaction.message_id)
        # Reactions have no reply channel; the outcome is only logged.
        outcome = await self.controller.handle_status_action(
            action, target, chat_user_from(reaction.user)
        )
        logger.debug("Reaction %s on %s: %s", action.value, target, outcome.ack_text)

    async def on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        logger.error("Unhandled error while processing update", exc_info=context.error)


async def run_telegram_bot(state: AppState, stop_event: asyncio.Event) -> None:
    """
    Telegram connector:

    init -> handlers -> health server -> polling -> reminder loop -> wait for stop_event
    """
    settings = state.settings
    application = Application.builder().token(settings.require_bot_token()).build()

    transport = TelegramTransport(application.bot)
    connector = TelegramConnector(state, transport)
    connector.register(application)
    scheduler = build_reminder_scheduler(state, transport)

    health_runner = await start_health_server(settings.port)
    try:
        await application.initialize()
        try:
            await application.start()
            # Reactions are only delivered when explicitly requested.
            await application.updater.start_polling(allowed_updates=Update.ALL_TYPES)

            reminder_task = asyncio.create_task(scheduler.run(), name="reminder-scheduler")
            logger.info("✅ Bot is running...")
            try:
                await stop_event.wait()
            finally:
                reminder_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await reminder_task
        finally:
            if application.updater.running:
                await application.updater.stop()
            if application.running:
                await application.stop()
            await application.shutdown()
    finally:
        await health_runner.cleanup()
        logger.info("Telegram connector stopped.")
