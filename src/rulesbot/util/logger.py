"""
Process-wide logging for RulesBot.

Every logger returned by :func:`get_logger` writes to the same two handlers:
a prompt_toolkit console handler at INFO that prints above the interactive
prompt, and a single rotating file handler at DEBUG on the session log. The
handlers are created once and shared, so a rollover renames the session log
exactly once and every logger keeps writing to the new current file that the
``logs`` command reads.
"""

import logging
from logging.handlers import RotatingFileHandler
import os
import sys
from pathlib import Path
from datetime import datetime
from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import ANSI

LOGS_DIR: Path = Path(os.getenv("RULESBOT_LOGS_DIR") or Path(__file__).parents[3] / "logs").resolve()
LOGS_DIR.mkdir(parents=True, exist_ok=True)

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s:%(funcName)s:%(lineno)d] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H-%M-%S"

LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 5

# A restarted process keeps appending to a log touched this recently
SESSION_REUSE_SECONDS = 60

LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[38;5;88m",
}
RESET_COLOR = "\033[0m"

NOISY_LOGGERS = (
    "discord", "discord.gateway", "discord.client", "discord.http",
    "websockets", "aiohttp", "aiohttp.access",
)

LOG_FILEPATH: Path | None = None
_shared_handlers: tuple[logging.Handler, ...] | None = None


class ColorFormatter(logging.Formatter):
    """Wraps each formatted record in the ANSI color of its level."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        return f"{color}{message}{RESET_COLOR}" if color else message


class PromptToolkitHandler(logging.Handler):
    """Console handler that prints through prompt_toolkit so the prompt line survives."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            print_formatted_text(ANSI(self.format(record)))
        except Exception:
            self.handleError(record)


def should_use_color() -> bool:
    try:
        return sys.stderr.isatty()
    except Exception:
        return False


def get_log_filepath() -> Path:
    """
    Session log path, chosen on first call and cached for the process.

    The newest log from today is reused when it was written to within
    ``SESSION_REUSE_SECONDS`` (the previous process restarted); otherwise a
    new timestamped file name is picked.
    """
    global LOG_FILEPATH

    if LOG_FILEPATH is None:
        now = datetime.now()
        todays_logs = sorted(
            LOGS_DIR.glob(f"{now:%Y-%m-%d}*.log"),
            key=lambda path: path.stat().st_mtime,
            reverse=True,
        )
        if todays_logs and now.timestamp() - todays_logs[0].stat().st_mtime < SESSION_REUSE_SECONDS:
            LOG_FILEPATH = todays_logs[0]
        else:
            LOG_FILEPATH = LOGS_DIR / f"{now.strftime(DATE_FORMAT)}.log"

    return LOG_FILEPATH


def get_session_handlers() -> tuple[logging.Handler, ...]:
    """The console and file handlers shared by every RulesBot logger."""
    global _shared_handlers

    if _shared_handlers is None:
        plain = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        console_handler = PromptToolkitHandler(level=logging.INFO)
        console_handler.setFormatter(ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT) if should_use_color() else plain)

        file_handler = RotatingFileHandler(
            get_log_filepath(),
            encoding="utf-8",
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(plain)

        _shared_handlers = (console_handler, file_handler)

    return _shared_handlers


def setup_logger(logger_name: str) -> logging.Logger:
    """Attach the session handlers to ``logger_name`` once and return it."""
    logger = logging.getLogger(logger_name)

    if not logger.handlers:
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        for handler in get_session_handlers():
            logger.addHandler(handler)

    return logger


def get_logger(logger_name: str) -> logging.Logger:
    return setup_logger(logger_name)


def handle_exception(exception_type, exception_instance, exception_traceback) -> None:
    """``sys.excepthook`` that logs uncaught exceptions; Ctrl+C keeps its default handling."""
    if issubclass(exception_type, KeyboardInterrupt):
        sys.__excepthook__(exception_type, exception_instance, exception_traceback)
        return
    logging.error("Uncaught exception", exc_info=(exception_type, exception_instance, exception_traceback))


for noisy_logger_name in NOISY_LOGGERS:
    noisy_logger = logging.getLogger(noisy_logger_name)
    noisy_logger.setLevel(logging.ERROR)
    noisy_logger.propagate = False
    noisy_logger.handlers = []


sys.excepthook = handle_exception
