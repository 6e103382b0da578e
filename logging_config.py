"""Centralized logging configuration.

This module provides:
- PlainFormatter for human-readable stderr output
- JSONFormatter for structured, one-object-per-line output
- setup_logging() to install either on the root logger
"""

import json
import logging
import re
import sys

TAG_PATTERN = re.compile(r'\[([A-Z_]+)\]\s*(.*)', re.DOTALL)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self, service: str = "mcp-test-server"):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        # Extract tag from message if present: [TAG] message
        tag = None
        message = record.getMessage()
        tag_match = TAG_PATTERN.match(message)
        if tag_match:
            tag = tag_match.group(1)
            message = tag_match.group(2)

        log_entry = {
            "timestamp": self.formatTime(record),
            "service": self.service,
            "level": record.levelname,
            "logger": record.name,
            "tag": tag,
            "message": message,
            "extra": {
                "function": record.funcName,
                "line": record.lineno,
            }
        }

        if record.exc_info:
            log_entry["extra"]["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


class PlainFormatter(logging.Formatter):
    """Plain text formatter for stderr output (local debugging)."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def setup_logging(level: str = "info", json_format: bool = False) -> logging.Logger:
    """Configure the root logger.

    Args:
        level: Log level name (debug, info, warning, ...). Unknown names
            fall back to INFO.
        json_format: Emit JSON lines instead of plain text.

    Returns:
        Configured root logger.
    """
    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(log_level)
    stderr_handler.setFormatter(JSONFormatter() if json_format else PlainFormatter())
    root_logger.addHandler(stderr_handler)

    # Suppress noisy HTTP client logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"[STARTUP] Logging configured (level: {logging.getLevelName(log_level)}, "
                f"format: {'json' if json_format else 'plain'})")

    return root_logger
