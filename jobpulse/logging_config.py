"""Log handlers for jobpulse runs, driven by ``Settings``."""
import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from config.settings import Settings

PACKAGE_LOGGER = "jobpulse"
HANDLER_PREFIX = "jobpulse."

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

# Chatty at INFO during every fetch and sweep
QUIET_LOGGERS = ("aiohttp.client", "aiohttp.internal", "apscheduler.scheduler", "apscheduler.executors")


def _level(name: Optional[str]) -> int:
    level = logging.getLevelName((name or "").upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(config: Settings, level: Optional[str] = None) -> logging.Logger:
    """
    Attach console and optional file handlers to the ``jobpulse`` logger.

    Only the package logger is touched, so embedding applications keep their
    own root configuration. Calling this again replaces the handlers it
    installed earlier instead of stacking new ones.

    Args:
        config: Settings supplying ``log_level``, ``log_file`` and rotation limits
        level: Overrides ``config.log_level`` (the CLI ``--log-level`` flag)

    Returns:
        The configured package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        if (handler.get_name() or "").startswith(HANDLER_PREFIX):
            package_logger.removeHandler(handler)
            handler.close()

    package_logger.setLevel(_level(level or config.log_level))
    package_logger.propagate = False
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.set_name(HANDLER_PREFIX + "console")
    console.setFormatter(formatter)
    package_logger.addHandler(console)

    if config.log_file:
        log_path = Path(config.log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=config.log_file_max_bytes,
            backupCount=config.log_file_backups,
            encoding="utf-8",
        )
        file_handler.set_name(HANDLER_PREFIX + "file")
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return package_logger
