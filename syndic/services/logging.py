"""Logging setup for processes that embed the ledger.

Level and log file come from LedgerSettings (LOG_LEVEL, LOG_FILE) unless
passed explicitly. Records go to stdout and to the ledger log file.
"""

import logging
import sys
from pathlib import Path

from syndic.config import get_settings

LEDGER_LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
LEDGER_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_log_level(level_name: str | None = None) -> int:
    """Numeric level for a name such as "warning", or the configured level.

    Unknown names resolve to INFO.
    """
    level = logging.getLevelName((level_name or get_settings().log_level).upper())
    return level if isinstance(level, int) else logging.INFO


def setup_ledger_logging(log_file: str | None = None, level_name: str | None = None) -> None:
    """
    Send all records to stdout and the ledger log file.

    Args:
        log_file: Log file path (default: settings.log_file)
        level_name: Level name (default: settings.log_level)

    Calling it again replaces the handlers it installed.
    """
    path = Path(log_file or get_settings().log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    level = get_log_level(level_name)
    formatter = logging.Formatter(LEDGER_LOG_FORMAT, datefmt=LEDGER_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)
    for handler in (logging.StreamHandler(sys.stdout), logging.FileHandler(path, encoding="utf-8")):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    if level > logging.DEBUG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.getLogger("syndic").debug("Ledger logging to %s", path)


__all__ = ["LEDGER_LOG_FORMAT", "get_log_level", "setup_ledger_logging"]
