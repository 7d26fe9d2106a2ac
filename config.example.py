# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit the bot token. Put it in .env (local, gitignored) or the hosting platform's
secret settings.
"""

ENV_VARS = {
    # Telegram
    "TASKBOT_BOT_TOKEN": "Bot token from @BotFather (required; BOT_TOKEN is accepted too).",
    # Health endpoint
    "TASKBOT_PORT": "Port for the GET / liveness endpoint (default: 3000; PORT is accepted too).",
    # Reminders
    "TASKBOT_REMINDER_INTERVAL_SECONDS": "How often pending tasks are scanned (default: 3600).",
    "TASKBOT_REMIND_AFTER_SECONDS": "Pending age that triggers the reminder (default: 86400).",
    # App / logging
    "TASKBOT_APP_NAME": "App display name used in logs (default: taskbot).",
    "TASKBOT_LOG_LEVEL": "Console logging level (default: INFO).",
    "TASKBOT_DATA_DIR": "Directory for taskbot.log (default: .local/taskbot).",
}
