# src/agency_taskbot/cli/main.py

"""
CLI entrypoint.

Initializes logging, checks the bot token, builds AppState, then runs the Telegram connector
(polling + reminder loop + health endpoint) until SIGINT/SIGTERM.
"""

from __future__ import annotations

import asyncio
import logging
import signal

from ..cli.bootstrap import create_initial_state
from ..config import MissingTokenError, get_settings
from ..connectors.telegram_connector import run_telegram_bot
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(state: AppState) -> None:
    stop_event = asyncio.Event()

    def _handle_signal(*_) -> None:
        logger.info("Shutdown signal received, stopping...")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _handle_signal)
        except NotImplementedError:
            # Windows event loops do not support add_signal_handler.
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop_event.set))

    await run_telegram_bot(state, stop_event)


def main() -> None:
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    try:
        settings.require_bot_token()
    except MissingTokenError as e:
        logger.error("ERROR: %s", e)
        raise SystemExit(1) from e

    logger.info("Starting %s...", settings.app_name)
    state = create_initial_state(settings=settings)

    try:
        asyncio.run(_run(state))
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
