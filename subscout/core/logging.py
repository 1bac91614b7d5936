"""Logging configuration."""

from __future__ import annotations

import json
import linecache
import logging
import sys
import traceback
from datetime import UTC, datetime
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from structlog.types import EventDict

# Type for exception info tuple (from sys.exc_info())
ExcInfo = tuple[type[BaseException] | None, BaseException | None, TracebackType | None]

# Type for traceback frame information
TracebackFrame = dict[str, str | int | None]

# Type for structured exception details
ExceptionDetails = dict[
    str,
    None | str | list[TracebackFrame],
]

APP_LOG_FILENAME = "subscout.json.log"
HTTP_LOG_FILENAME = "subscout.http.json.log"

# Outbound HTTP client loggers, routed to their own file
HTTP_CLIENT_LOGGERS = ("httpx", "httpcore", "httpcore.connection", "httpcore.http11")

# Server loggers, always on stdout and never in the JSON app log
SERVER_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")


def format_exception_for_json(
    exc_info: ExcInfo | None,
) -> ExceptionDetails:
    """Format exception information for JSON logging.

    Args:
        exc_info: Exception info tuple from sys.exc_info() or None

    Returns:
        Dictionary with exception details:
        - exception_type: Exception class name (str or None)
        - exception_message: Exception message (str or None)
        - exception_module: Module where exception occurred (str or None)
        - traceback_frames: List of traceback frames
        - traceback_text: Full traceback as text (for reference)
    """
    if exc_info is None or exc_info == (None, None, None):
        return {}

    exc_type, exc_value, exc_tb = exc_info

    details: ExceptionDetails = {
        "exception_type": exc_type.__name__ if exc_type else None,
        "exception_message": str(exc_value) if exc_value else None,
        "exception_module": exc_type.__module__ if exc_type else None,
    }

    if exc_tb:
        frames: list[TracebackFrame] = []
        for frame, lineno in traceback.walk_tb(exc_tb):
            frame_info: TracebackFrame = {
                "filename": frame.f_code.co_filename,
                "lineno": lineno,
                "function": frame.f_code.co_name,
            }
            line = linecache.getline(frame.f_code.co_filename, lineno)
            if line:
                frame_info["source_line"] = line.strip()
            frames.append(frame_info)

        details["traceback_frames"] = frames
        details["traceback_text"] = "".join(
            traceback.format_exception(exc_type, exc_value, exc_tb)
        )

    return details


def exception_processor(
    logger: structlog.BoundLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that turns ``exc_info`` into structured fields.

    Handles ``exc_info=True`` (current exception), an exc_info tuple, and an
    exception instance passed as ``exception=``.
    """
    exc_info = event_dict.pop("exc_info", None)
    if exc_info is True:
        exc_info = sys.exc_info()
    elif isinstance(exc_info, BaseException):
        exc_info = (type(exc_info), exc_info, exc_info.__traceback__)

    if exc_info and exc_info != (None, None, None):
        details = format_exception_for_json(exc_info)  # type: ignore[arg-type]
        if details:
            event_dict["exception"] = details
            exc_type = details.get("exception_type")
            exc_msg = details.get("exception_message")
            if exc_type and exc_msg:
                event_dict["exception_summary"] = f"{exc_type}: {exc_msg}"

    if isinstance(event_dict.get("exception"), BaseException):
        exc = event_dict.pop("exception")
        details = format_exception_for_json((type(exc), exc, exc.__traceback__))
        if details:
            event_dict["exception"] = details

    return event_dict


class JSONFormatter(logging.Formatter):
    """JSON formatter for standard library logging (used for HTTP client logs)."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = format_exception_for_json(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, ensure_ascii=False)


def _route_logger(name: str, handler: logging.Handler, level: int | None = None) -> None:
    """Send a stdlib logger exclusively to ``handler``."""
    target = logging.getLogger(name)
    target.propagate = False
    for existing in target.handlers[:]:
        existing.close()
    target.handlers.clear()
    target.addHandler(handler)
    if level is not None:
        target.setLevel(level)


def setup_logging(debug: bool = False, logs_dir: Path | None = None) -> None:
    """Setup structured logging with structlog.

    Configures:
    - Application logs: stdout (pretty in debug, JSON otherwise), or a JSON
      file when ``logs_dir`` is given
    - HTTP client logs (httpx/httpcore): separate JSON file, WARNING level
    - Uvicorn logs: always stdout

    Args:
        debug: Enable debug logging
        logs_dir: Optional directory for log files
    """
    log_level = logging.DEBUG if debug else logging.INFO

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(log_level)

    app_file_handler: logging.Handler | None = None
    http_file_handler: logging.Handler | None = None
    if logs_dir:
        try:
            logs_dir.mkdir(parents=True, exist_ok=True)

            app_file_handler = logging.FileHandler(logs_dir / APP_LOG_FILENAME, encoding="utf-8")
            app_file_handler.setLevel(log_level)

            http_file_handler = logging.FileHandler(
                logs_dir / HTTP_LOG_FILENAME, encoding="utf-8"
            )
            http_file_handler.setLevel(logging.DEBUG)
            http_file_handler.setFormatter(JSONFormatter())
        except OSError as e:
            # File logging is optional; keep running on stdout
            sys.stderr.write(f"Warning: Failed to setup file logging: {e}\n")
            app_file_handler = None
            http_file_handler = None

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=[app_file_handler or stdout_handler],
        force=True,
    )

    for name in SERVER_LOGGERS:
        _route_logger(name, stdout_handler)

    if http_file_handler:
        for name in HTTP_CLIENT_LOGGERS:
            _route_logger(name, http_file_handler, logging.WARNING)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,  # trace_id and other request context
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        exception_processor,
        structlog.processors.format_exc_info,
    ]

    # File logs are always JSON; the console is pretty only in debug mode
    if debug and not app_file_handler:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.getLogger().setLevel(log_level)

    structlog.get_logger("subscout.logging").info(
        "Logging configured",
        level=logging.getLevelName(log_level),
        debug=debug,
        app_log_file=str(logs_dir / APP_LOG_FILENAME) if app_file_handler and logs_dir else None,
        http_log_file=str(logs_dir / HTTP_LOG_FILENAME) if http_file_handler and logs_dir else None,
        http_loggers_configured=list(HTTP_CLIENT_LOGGERS) if http_file_handler else [],
    )
