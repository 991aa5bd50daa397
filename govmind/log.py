"""Console logging with a consistent pipe-separated format."""

import logging
import os

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RESERVED = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}


class PipeFormatter(logging.Formatter):
    """timestamp | LEVEL | logger | message | key=value extras"""

    def format(self, record):
        timestamp = self.formatTime(record, self.datefmt or "%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)
        name = record.name.split(".")[-1][:20].ljust(20)
        line = f"{timestamp} | {level} | {name} | {record.getMessage()}"

        extras = [
            f"{key}={str(value)[:100]}"
            for key, value in record.__dict__.items()
            if key not in _RESERVED and value is not None
        ]
        if extras:
            line += f" | {' '.join(extras)}"

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def configure_logger(name: str | None = None) -> logging.Logger:
    """Return a logger with the level taken from LOG_LEVEL (default INFO).

    A console handler is attached once per logger name.
    """
    logger = logging.getLogger(name or "govmind")

    level = LOG_LEVELS.get(os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(PipeFormatter())
        logger.addHandler(handler)

    return logger
