"""Logging helpers for zk-trylock."""

import atexit
import json
import logging
import os
import re
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from zk_trylock.core.constants import DEFAULT_LOG_LEVEL, ENV_LOG_LEVEL, LOG_FILE_BACKUP_COUNT, LOG_FILE_MAX_BYTES

_LOG_RECORD_RESERVED_FIELDS = set(logging.makeLogRecord({}).__dict__.keys()) | {"message", "asctime"}
# Extras that may hold the session's auth data
_SENSITIVE_FIELD_NAMES = {"auth", "auth_data", "credential"}
_REDACTED_VALUE = "[REDACTED]"
# digest auth looks like "digest:user:password"; the password is the last part
_DIGEST_CREDENTIAL_PATTERN = re.compile(r"(?i)\b(digest):([^:\s,'\"]+):([^\s,'\")\]]+)")


def _redact_message(message: str) -> str:
    return _DIGEST_CREDENTIAL_PATTERN.sub(rf"\1:\2:{_REDACTED_VALUE}", message)


def _extra_fields(record: logging.LogRecord) -> dict[str, object]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _LOG_RECORD_RESERVED_FIELDS and not key.startswith("_")
    }


class SensitiveDataFilter(logging.Filter):
    """Redact session credentials from messages and extras.

    Attached to every handler, so formatters only ever see redacted records.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            message = f"{record.msg} [log-message-format-error]"
        record.msg = _redact_message(message)
        record.args = ()

        for key, value in _extra_fields(record).items():
            if key.lower() in _SENSITIVE_FIELD_NAMES:
                record.__dict__[key] = _REDACTED_VALUE
            elif isinstance(value, str):
                record.__dict__[key] = _redact_message(value)
        return True


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging output.

    One JSON object per line, with context fields (lock_path, attempt)
    merged in from the record's extras.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process": record.process,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        log_entry.update(_extra_fields(record))
        return json.dumps(log_entry, default=str)


_atexit_registered = False


class ContextLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges contextual fields into record extras."""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = kwargs.get("extra")
        merged_extra = dict(self.extra)
        if isinstance(extra, dict):
            merged_extra.update(extra)
        kwargs["extra"] = merged_extra
        return msg, kwargs


def _unwrap_logger(logger: logging.Logger | logging.LoggerAdapter | None) -> logging.Logger | None:
    current = logger
    while isinstance(current, logging.LoggerAdapter):
        current = current.logger
    if isinstance(current, logging.Logger):
        return current
    return None


def with_log_context(
    logger: logging.Logger | logging.LoggerAdapter | object, **context: object
) -> logging.Logger | logging.LoggerAdapter | object:
    """Return a logger enriched with persistent contextual fields."""
    if not isinstance(logger, (logging.Logger, logging.LoggerAdapter)):
        # Preserve test doubles/mocks that may not satisfy logging interfaces.
        return logger

    base_logger = _unwrap_logger(logger)
    if base_logger is None:
        return logger

    existing_context = {}
    if isinstance(logger, logging.LoggerAdapter):
        existing_context = dict(getattr(logger, "extra", {}))

    existing_context.update({k: v for k, v in context.items() if v is not None})
    return ContextLoggerAdapter(base_logger, existing_context)


def setup_logging(
    log_level: str | None = None,
    log_format: str = "text",
    log_file: str | None = None,
    max_bytes: int = LOG_FILE_MAX_BYTES,
    backup_count: int = LOG_FILE_BACKUP_COUNT,
) -> logging.Logger:
    """Setup logging to stderr and, optionally, a rotating log file.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format - "text" (default) or "json" for structured logging
        log_file: Optional path of a rotating log file
        max_bytes: Size at which the log file rotates
        backup_count: Number of rotated log files to keep

    Returns:
        Configured logger instance

    Priority: 1) Passed parameter, 2) Environment variable LOG_LEVEL, 3) Default WARNING

    stdout is left to outcome lines and the locked command's own output.
    """
    global _atexit_registered

    if not _atexit_registered:
        atexit.register(logging.shutdown)
        _atexit_registered = True

    if log_level is None:
        log_level = os.environ.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL)

    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if log_level.upper() not in valid_levels:
        print(f"Warning: Invalid log level '{log_level}', using {DEFAULT_LOG_LEVEL}", file=sys.stderr)
        log_level = DEFAULT_LOG_LEVEL

    numeric_level = getattr(logging, log_level.upper(), logging.WARNING)

    # Clear any existing handlers from root logger
    for handler in logging.root.handlers[:]:
        handler.close()
        logging.root.removeHandler(handler)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_path = Path(log_file)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count))
        except OSError as e:
            print(f"Warning: Cannot open log file {log_file}: {e}. Logging to console only.", file=sys.stderr)

    if log_format.lower() == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(numeric_level)
        handler.addFilter(SensitiveDataFilter())
        logging.root.addHandler(handler)

    logging.root.setLevel(numeric_level)

    # kazoo logs every reconnect at WARNING; keep it one level quieter than ours
    logging.getLogger("kazoo").setLevel(max(numeric_level, logging.ERROR))

    logger = logging.getLogger("zk_trylock")
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    logger.debug("Logging initialized (level=%s, format=%s, file=%s)", log_level.upper(), log_format, log_file)
    return logger
