# src/agency_taskbot/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

_NOISY_LIBS = ("telegram", "httpx", "httpcore", "aiohttp")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - allow agency_taskbot logs
    - Telegram/HTTP client libraries only at WARNING+ (polling is chatty at INFO)
    - Python warnings (captured as 'py.warnings') only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name == "__main__" or name.startswith("agency_taskbot"):
            return True

        if name == "py.warnings":
            return record.levelno >= logging.ERROR

        if name.split(".", 1)[0] in _NOISY_LIBS:
            return record.levelno >= logging.WARNING

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path | None = ".local/taskbot",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure logging with:
    - Console handler: filtered, at console_level
    - File handler: full logs for debugging (skipped when log_dir is None)

    Call this ONCE, very early (before first logger.info).
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    if log_dir is not None:
        log_dir = Path(log_dir)
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(str(log_dir / "taskbot.log"), encoding="utf-8")
        except OSError:
            # Read-only hosting filesystems: console logging is enough.
            logging.getLogger(__name__).warning(
                "File logging disabled: cannot write to %s", log_dir
            )
        else:
            fh.setLevel(file_level)
            fh.setFormatter(fmt)
            root.addHandler(fh)

    logging.captureWarnings(True)

    for lib in _NOISY_LIBS:
        logging.getLogger(lib).setLevel(logging.INFO)
