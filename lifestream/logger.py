"""
Structured JSON Logging Module.

One JSON object per line, written to stdout and to a size-rotated file.
Services never create loggers themselves: the composition root builds a
``StructuredLogger`` per subsystem and injects it.

Credentials are scrubbed at format time, so a careless ``extra`` field
or an echoed ``Authorization`` header never reaches a log sink.
"""

import json
import logging
import re
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional, TextIO

_MASK = "***"

# Extra-field names whose values are always masked.
_REDACTED_KEYS: frozenset[str] = frozenset({
    "access_token",
    "authorization",
    "card_number",
    "client_secret",
    "cvc",
    "password",
    "refresh_token",
    "token",
})

_BEARER_RE = re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=\-]+")
_CLIENT_SECRET_RE = re.compile(r"(pi_[A-Za-z0-9]+_secret_)[A-Za-z0-9]+")


def scrub(text: str) -> str:
    """Mask bearer tokens and payment-intent client secrets in *text*."""
    text = _BEARER_RE.sub(rf"\g<1>{_MASK}", text)
    return _CLIENT_SECRET_RE.sub(rf"\g<1>{_MASK}", text)


class JSONFormatter(logging.Formatter):
    """Renders a ``LogRecord`` as a single JSON line.

    Keys: ``timestamp`` (UTC, ISO-8601), ``level``, ``logger_name``,
    ``message``; ``extra`` when the caller attached fields and
    ``exception`` when a traceback is present.
    """

    _STANDARD_ATTRS: frozenset[str] = frozenset(
        logging.LogRecord(
            name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
        ).__dict__.keys()
    ) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": scrub(record.getMessage()),
        }

        extra = {
            key: _MASK if key.lower() in _REDACTED_KEYS else scrub(str(value))
            for key, value in record.__dict__.items()
            if key not in self._STANDARD_ATTRS
        }
        if extra:
            entry["extra"] = extra

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        return json.dumps(entry, ensure_ascii=False)


def _resolve_level(level: Optional[int], configured: str) -> int:
    if level is not None:
        return level
    named = logging.getLevelName(configured.upper())
    return named if isinstance(named, int) else logging.INFO


def _file_handler(path: str, max_bytes: int, backup_count: int) -> RotatingFileHandler:
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(log_path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )


class StructuredLogger:
    """Injectable wrapper around a named ``logging.Logger``.

    Handlers are attached the first time a name is used; later instances
    with the same name share them.  When the log file cannot be opened
    the logger keeps writing to the console.

    Usage::

        log = StructuredLogger(name="lifestream.requests")
        log.info("Request created", extra={"request_id": "65f0c2"})
    """

    def __init__(
        self,
        name: str = "lifestream",
        level: Optional[int] = None,
        stream: Optional[TextIO] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        # Lazy import to avoid circular dependency at module level
        from lifestream.config import get_config
        cfg = get_config()

        resolved_level = _resolve_level(level, cfg.LOG_LEVEL)
        self._logger: logging.Logger = logging.getLogger(name)
        self._logger.setLevel(resolved_level)

        if self._logger.handlers:
            return

        formatter = JSONFormatter()
        console = logging.StreamHandler(stream or sys.stdout)
        console.setFormatter(formatter)
        self._logger.addHandler(console)

        path = log_file or cfg.LOG_FILE
        try:
            rotating = _file_handler(
                path,
                max_bytes if max_bytes is not None else cfg.LOG_MAX_BYTES,
                backup_count if backup_count is not None else cfg.LOG_BACKUP_COUNT,
            )
        except OSError as exc:
            self._logger.warning(
                "Could not open log file '%s': %s. Logging to the console only.", path, exc,
            )
            return
        rotating.setFormatter(formatter)
        self._logger.addHandler(rotating)

    @property
    def logger(self) -> logging.Logger:
        """The underlying ``logging.Logger``."""
        return self._logger

    def debug(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.critical(msg, *args, **kwargs)


def get_logger(name: str = "lifestream") -> StructuredLogger:
    """Shorthand for ``StructuredLogger(name=name)`` with configured defaults."""
    return StructuredLogger(name=name)
