"""Logging configuration and structured log formatting."""

import json
import logging
import sys
from typing import Any, Dict, Optional

# stdout belongs to the MCP stdio transport
root = logging.getLogger()
root.handlers = []


class ColorCodes:
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    BOLD = "\033[1m"


LEVEL_COLORS = {
    "DEBUG": ColorCodes.BLUE,
    "INFO": ColorCodes.GREEN,
    "WARNING": ColorCodes.YELLOW,
    "ERROR": ColorCodes.RED + ColorCodes.BOLD,
    "CRITICAL": ColorCodes.MAGENTA + ColorCodes.BOLD,
}


class JsonFormatter(logging.Formatter):
    """Format log records as color-coded JSON."""

    def __init__(self, color: bool = True):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        output = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            # Event dicts are kept structured instead of repr'd
            "msg": record.msg if isinstance(record.msg, dict) else record.getMessage(),
        }

        if hasattr(record, "data"):
            output["data"] = record.data

        if record.exc_info:
            output["exc"] = self.formatException(record.exc_info)

        json_str = json.dumps(output, default=str)
        if not self.color:
            return json_str
        color = LEVEL_COLORS.get(record.levelname, "")
        return f"{color}{json_str}{ColorCodes.RESET}"


def configure_logging(level: int = logging.DEBUG, color: Optional[bool] = None):
    """Set up application logging with JSON formatting."""
    app_logger = logging.getLogger("cython_forge")

    if not app_logger.handlers:
        if color is None:
            color = sys.stderr.isatty()
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter(color=color))
        handler.setLevel(level)

        app_logger.setLevel(level)
        app_logger.addHandler(handler)
        app_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    if name.startswith("cython_forge"):
        return logging.getLogger(name)
    return logging.getLogger(f"cython_forge.{name}")


def log_with_data(
    logger: logging.Logger, level: int, msg: str, data: Optional[Dict[str, Any]] = None
):
    """Log a message with optional structured data."""
    if data:
        logger.log(level, msg, extra={"data": data})
    else:
        logger.log(level, msg)
