import logging
import sys
from typing import Union

# Custom level used by the query engine
TRACE_LEVEL = 5

logging.addLevelName(TRACE_LEVEL, "TRACE")


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps each record in an ANSI color picked by level."""

    COLORS = {
        "TRACE": "\033[90m",  # Gray
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)

        # Plain text when piped or redirected
        if not sys.stderr.isatty():
            return message

        level_color = self.COLORS.get(record.levelname, "")
        return f"{level_color}{message}{self.COLORS['RESET']}"


def _resolve_level(level: Union[int, str]) -> int:
    """Accept either a numeric level or a name such as "DEBUG" or "trace"."""
    if isinstance(level, int):
        return level

    resolved = logging.getLevelName(str(level).strip().upper())
    if isinstance(resolved, int):
        return resolved
    return logging.INFO


def setup_colored_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Configure colored logging on the root logger.

    Args:
        level: Logging level, numeric or by name (default: logging.INFO)
    """
    formatter = ColoredFormatter(
        fmt="%(asctime)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(_resolve_level(level))

    # Avoid duplicate output when called more than once
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


class EnhancedLogger:
    """Logger wrapper exposing the custom TRACE level."""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def trace(self, msg, *args, **kwargs):
        """Very detailed diagnostics, e.g. per-recompute timings."""
        self._logger.log(TRACE_LEVEL, msg, *args, **kwargs)

    # debug/info/warning/error/critical and the rest go straight through
    def __getattr__(self, name):
        return getattr(self._logger, name)


def get_colored_logger(name: str) -> EnhancedLogger:
    """
    Get an enhanced logger with the custom level methods.

    Args:
        name: Logger name (typically __name__)

    Returns:
        EnhancedLogger wrapping logging.getLogger(name)
    """
    return EnhancedLogger(logging.getLogger(name))
