"""
Logging setup for Web Replay.

Console output goes through rich on stderr, so it never mixes with command
output on stdout. An optional file log is written either as plain text or
as one JSON object per line.
"""

import json
import logging
from typing import Iterable, Optional, TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from web_replay.config.settings import LoggingSettings

# Third-party loggers held at WARNING or above
QUIET_LOGGERS = ("asyncio", "playwright")

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JsonLineFormatter(logging.Formatter):
    """Format each record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
    quiet_loggers: Iterable[str] = QUIET_LOGGERS,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        json_format: Write the file log as JSON lines
        quiet_loggers: Loggers capped at WARNING
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    # Recorded text may contain brackets; never treat messages as markup
    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(JsonLineFormatter() if json_format else logging.Formatter(TEXT_FORMAT))
        root_logger.addHandler(file_handler)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def configure_logging(settings: "LoggingSettings", level: Optional[str] = None) -> None:
    """
    Apply the logging section of the settings.

    Args:
        settings: Logging settings
        level: Level that takes precedence over ``settings.level`` (e.g. from --verbose)
    """
    setup_logging(
        level=level or settings.level,
        log_file=settings.file,
        json_format=settings.json_format,
    )
