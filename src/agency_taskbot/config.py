# src/agency_taskbot/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time; the bot token is checked at startup.
- Prefixed names (TASKBOT_*) win; the plain BOT_TOKEN / PORT names still work.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKBOT"

DEFAULT_PORT = 3000
DEFAULT_REMINDER_INTERVAL_SECONDS = 3600
DEFAULT_REMIND_AFTER_SECONDS = 24 * 3600

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _to_int(raw: str | None, default: int) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


class MissingTokenError(RuntimeError):
    """The bot token is not configured."""


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Telegram ----
    bot_token: str | None

    # ---- Health endpoint ----
    port: int

    # ---- Reminders ----
    reminder_interval_seconds: int
    remind_after_seconds: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskbot").strip() or "taskbot"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskbot"))

        bot_token = _first_env(_k("BOT_TOKEN"), "BOT_TOKEN", default=None)
        if bot_token is not None:
            bot_token = bot_token.strip()

        port = _to_int(_first_env(_k("PORT"), "PORT"), DEFAULT_PORT)
        if not 0 < port < 65536:
            port = DEFAULT_PORT

        reminder_interval_seconds = _to_int(
            os.getenv(_k("REMINDER_INTERVAL_SECONDS")), DEFAULT_REMINDER_INTERVAL_SECONDS
        )
        remind_after_seconds = _to_int(
            os.getenv(_k("REMIND_AFTER_SECONDS")), DEFAULT_REMIND_AFTER_SECONDS
        )

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            bot_token=bot_token,
            port=port,
            reminder_interval_seconds=max(1, reminder_interval_seconds),
            remind_after_seconds=max(0, remind_after_seconds),
        )

    def require_bot_token(self) -> str:
        if not self.bot_token:
            raise MissingTokenError(
                f"{_k('BOT_TOKEN')} (or BOT_TOKEN) environment variable is not set"
            )
        return self.bot_token


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
