"""Logging configuration for chatlog-import.

Every module logs through a child of the ``chatlog_import`` logger. The CLI
attaches handlers once, at that package logger, so importer and logstore
messages from one run end up in a single file under ~/chatlog-import/logs/.
"""

import logging
import sys
from pathlib import Path

PACKAGE_LOGGER = "chatlog_import"

DEFAULT_LOG_DIR = Path.home() / "chatlog-import" / "logs"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    name: str,
    log_dir: Path | None = None,
    level: int = logging.INFO,
    console: bool = True,
) -> logging.Logger:
    """Route all chatlog-import logging to <log_dir>/<name>.log.

    Handlers from an earlier call are closed and replaced, so configuring
    twice (e.g. for a second CLI invocation in one process) never writes
    records to two files.

    Args:
        name: Log file stem, usually the command being run
        log_dir: Directory for log files (defaults to ~/chatlog-import/logs/)
        level: Logging level (defaults to INFO)
        console: Whether to also log to stderr (defaults to True)

    Returns:
        The package logger
    """
    if log_dir is None:
        log_dir = DEFAULT_LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    file_handler = logging.FileHandler(log_dir / f"{name}.log", encoding="utf-8")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a component, e.g. get_logger("importer.settings")."""
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
