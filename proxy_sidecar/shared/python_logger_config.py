"""Console logging for the proxy sidecar.

The level comes from ``Config.LOG_LEVEL``. Besides the standard levels it
accepts TRACE, which the template transformations use for per-rewrite detail.
"""

import sys
import logging

# Below DEBUG
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
PACKAGE_LOGGER = "proxy_sidecar"

# Third-party loggers that only matter at WARNING and above
QUIET_LOGGERS = ("asyncio", "hypercorn.access")


class LevelColorFormatter(logging.Formatter):
    """Colors the level name only, so messages stay grep-friendly."""

    LEVEL_COLORS = {
        TRACE: '\033[90m',
        logging.DEBUG: '\033[36m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelno)
        if not color:
            return super().format(record)
        original = record.levelname
        record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def resolve_level(log_level: str) -> int:
    """Convert a level name, including TRACE, to its numeric value."""
    name = log_level.strip().upper()
    if name == "TRACE":
        return TRACE
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def setup_python_logging(log_level: str = "INFO", use_colors: bool = True) -> logging.Logger:
    """Send all records to stdout at the given level.

    Args:
        log_level: Level name, normally ``Config.LOG_LEVEL``
        use_colors: Color level names when stdout is a terminal

    Returns:
        The package logger
    """
    level = resolve_level(log_level)

    handler = logging.StreamHandler(sys.stdout)
    if use_colors and sys.stdout.isatty():
        handler.setFormatter(LevelColorFormatter(LOG_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.debug(f"Logging configured at {logging.getLevelName(level)}")
    return package_logger
