"""Centralized logging configuration for chain-restyler.

All module loggers live under the ``chain_restyler`` namespace; the CLI
calls ``setup_logging`` once, library users configure logging themselves.
Supports plain text or structured JSON output and an optional rotating
log file.
"""

import json
import logging
import logging.config
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

ROOT_LOGGER = "chain_restyler"


class LogCategory(Enum):
    """Log categories for component-level filtering."""

    ENGINE = "rules.engine"
    CATALOG = "rules.catalog"
    BATCH = "batch"
    CLI = "cli"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Rewrite context passed through ``extra`` (rule id, pass number, file
    path, timing) is copied into the entry when present.
    """

    EXTRA_FIELDS = ("rule_id", "pass_number", "file_path", "duration_ms")

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        for name in self.EXTRA_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logging(
    level: str = "WARNING",
    quiet: bool = False,
    verbose: bool = False,
    log_file: Path | None = None,
    log_format: str = "text",
    rotation_count: int = 3,
    max_bytes: int = 10485760,
) -> logging.Logger:
    """Setup logging for the ``chain_restyler`` namespace.

    Args:
        level: Base console level (DEBUG, INFO, WARNING, ERROR).
        quiet: Only report errors on the console.
        verbose: Enable debug-level console output.
        log_file: Optional log file; always receives DEBUG records.
        log_format: "text" or "json" (applies to console and file).
        rotation_count: Number of backup files kept.
        max_bytes: Max file size before rotation (default 10MB).

    Returns:
        The configured package logger.
    """
    if quiet:
        effective_level = "ERROR"
    elif verbose:
        effective_level = "DEBUG"
    else:
        effective_level = level.upper()

    json_output = log_format == "json"
    config: dict = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "simple": {"format": "%(levelname)s | %(message)s"},
            "json": {"()": JSONFormatter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json" if json_output else "simple",
                "level": effective_level,
                "stream": "ext://sys.stderr",
            }
        },
        "loggers": {
            ROOT_LOGGER: {"handlers": ["console"], "level": "DEBUG", "propagate": False}
        },
    }

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json" if json_output else "detailed",
            "level": "DEBUG",
            "filename": str(log_file),
            "maxBytes": max_bytes,
            "backupCount": rotation_count,
        }
        config["loggers"][ROOT_LOGGER]["handlers"].append("file")

    logging.config.dictConfig(config)
    return logging.getLogger(ROOT_LOGGER)


def get_logger() -> logging.Logger:
    """Get the package logger."""
    return logging.getLogger(ROOT_LOGGER)


def get_category_logger(category: LogCategory) -> logging.Logger:
    """Get the logger for one component.

    Example:
        >>> logger = get_category_logger(LogCategory.BATCH)
        >>> logger.info("Batch finished")
    """
    return logging.getLogger(f"{ROOT_LOGGER}.{category.value}")
