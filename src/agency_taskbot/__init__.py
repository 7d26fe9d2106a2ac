"""Agency task bot: structured Telegram messages -> tracked tasks with reminders."""

__version__ = "0.1.0"
