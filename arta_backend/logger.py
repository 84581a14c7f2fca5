"""
Structured JSON Logging Module.

Every log line is one JSON object on stdout (collected by the hosting
platform) and in a rotating local file.  Services tag notable records
with ``extra={"event": "..."}``; the event name is lifted to the top
level so log queries can filter on it directly.

uvicorn's own loggers are routed through the same formatter by
:func:`configure_server_logging` so that access and error lines share
the format.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional, TextIO

SERVER_LOGGERS: tuple[str, ...] = ("uvicorn", "uvicorn.error", "uvicorn.access")


class JSONFormatter(logging.Formatter):
    """Formats log records as structured JSON objects.

    Keys: ``timestamp`` (ISO-8601, UTC), ``level``, ``logger_name``,
    ``message``, then ``event`` when the caller supplied one, ``extra``
    for any other caller-supplied fields and ``exception`` for tracebacks.
    """

    _RESERVED: frozenset[str] = frozenset(
        logging.LogRecord(
            name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
        ).__dict__.keys()
    ) | {"message", "asctime", "color_message"}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
        }

        extra = {k: v for k, v in record.__dict__.items() if k not in self._RESERVED}
        event = extra.pop("event", None)
        if event is not None:
            entry["event"] = str(event)
        if extra:
            entry["extra"] = extra

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        # Non-JSON values (datetimes, enums, ...) are rendered with str().
        return json.dumps(entry, ensure_ascii=False, default=str)


def _build_handlers(
    level: int,
    stream: Optional[TextIO],
    log_file: str,
    max_bytes: int,
    backup_count: int,
) -> tuple[list[logging.Handler], Optional[OSError]]:
    """Console handler plus a rotating file handler when the file is writable."""
    formatter = JSONFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]

    file_error: Optional[OSError] = None
    try:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                filename=str(log_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        )
    except OSError as exc:
        file_error = exc

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers, file_error


class StructuredLogger:
    """Injectable logger.

    Wraps a named ``logging.Logger`` configured with :class:`JSONFormatter`.
    Unset arguments fall back to ``LOG_LEVEL``, ``LOG_FILE``,
    ``LOG_MAX_BYTES`` and ``LOG_BACKUP_COUNT`` from ``AppConfig``.

    Usage::

        log = StructuredLogger(name="arta")
        log.warning("Last-login update failed", extra={"event": "LAST_LOGIN_FAILED"})
    """

    def __init__(
        self,
        name: str = "arta",
        level: Optional[int] = None,
        stream: Optional[TextIO] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        # Lazy import: config logs through the standard logging module.
        from arta_backend.config import get_config
        cfg = get_config()

        resolved_level: int = level if level is not None else cfg.log_level
        self._logger: logging.Logger = logging.getLogger(name)
        self._logger.setLevel(resolved_level)

        # Loggers are process-wide; configure each name once.
        if self._logger.handlers:
            return

        handlers, file_error = _build_handlers(
            resolved_level,
            stream,
            log_file or cfg.LOG_FILE,
            max_bytes if max_bytes is not None else cfg.LOG_MAX_BYTES,
            backup_count if backup_count is not None else cfg.LOG_BACKUP_COUNT,
        )
        for handler in handlers:
            self._logger.addHandler(handler)
        if file_error is not None:
            self._logger.warning(
                "Could not create log file: %s. Continuing with console logging only.",
                file_error,
            )

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


def get_logger(name: str = "arta") -> StructuredLogger:
    """Return a ``StructuredLogger`` for *name* with configured defaults."""
    return StructuredLogger(name=name)


def configure_server_logging(level: Optional[int] = None) -> None:
    """Send uvicorn's loggers through :class:`JSONFormatter` on stdout.

    Call before ``uvicorn.run(..., log_config=None)``.
    """
    from arta_backend.config import get_config
    resolved_level = level if level is not None else get_config().log_level

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = [handler]
        server_logger.setLevel(resolved_level)
        server_logger.propagate = False
