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

ExceptionDetails = dict[str, None | str | list[TracebackFrame]]

# Loggers of the HTTP stack used to talk to remote indexers
HTTP_CLIENT_LOGGERS = ("httpx", "httpcore", "httpcore.connection", "httpcore.http11")


def format_exception_for_json(exc_info: ExcInfo | None) -> ExceptionDetails:
    """Format exception information for JSON logging.

    Args:
        exc_info: Exception info tuple from sys.exc_info() or None

    Returns:
        Dictionary with exception_type, exception_message, exception_module,
        traceback_frames and traceback_text. Empty when there is no exception.
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
        current_tb: TracebackType | None = exc_tb
        while current_tb is not None:
            code = current_tb.tb_frame.f_code
            frame_info: TracebackFrame = {
                "filename": code.co_filename,
                "lineno": current_tb.tb_lineno,
                "function": code.co_name,
            }
            line = linecache.getline(code.co_filename, current_tb.tb_lineno)
            if line:
                frame_info["source_line"] = line.strip()
            frames.append(frame_info)
            current_tb = current_tb.tb_next

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
    """Replace ``exc_info`` with structured exception fields.

    Indexer failures are logged with ``exc_info`` attached (for example a
    capabilities download that timed out); this keeps them readable in JSON.
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

        return json.dumps(log_data, ensure_ascii=False)


def _close_handlers(logger: logging.Logger) -> None:
    """Close and drop all handlers of a logger."""
    for handler in logger.handlers[:]:
        handler.close()
    logger.handlers.clear()


def setup_logging(
    debug: bool = False,
    logs_dir: Path | None = None,
    log_level: str | None = None,
) -> None:
    """Setup structured logging with structlog.

    Configures:
    - Application logs: stdout (pretty in debug, JSON otherwise), or a JSON
      file when logs_dir is given
    - httpx/httpcore logs: WARNING and above, routed to their own JSON file
      when logs_dir is given

    Args:
        debug: Enable debug mode (console renderer, DEBUG level)
        logs_dir: Directory for log files; stdout only when None
        log_level: Explicit level name overriding the debug default
    """
    level = logging.DEBUG if debug else logging.INFO
    if log_level:
        level = logging.getLevelName(log_level.upper())

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(level)

    app_handlers: list[logging.Handler] = []
    app_file_handler: logging.Handler | None = None
    http_file_handler: logging.Handler | None = None

    if logs_dir:
        try:
            logs_dir.mkdir(parents=True, exist_ok=True)

            app_file_handler = logging.FileHandler(logs_dir / "torznarr.json.log", encoding="utf-8")
            app_file_handler.setLevel(level)
            app_handlers.append(app_file_handler)

            http_file_handler = logging.FileHandler(
                logs_dir / "torznarr.http.json.log", encoding="utf-8"
            )
            http_file_handler.setLevel(logging.DEBUG)
            http_file_handler.setFormatter(JSONFormatter())
        except OSError as e:
            # Fall back to stdout only
            sys.stderr.write(f"Warning: Failed to setup file logging: {e}\n")
            app_file_handler = None
            http_file_handler = None
            app_handlers = []

    if not app_file_handler:
        app_handlers.append(stdout_handler)

    logging.basicConfig(format="%(message)s", level=level, handlers=app_handlers, force=True)

    # Indexer HTTP traffic is noisy; only warnings and errors are kept
    for name in HTTP_CLIENT_LOGGERS:
        http_logger = logging.getLogger(name)
        http_logger.setLevel(logging.WARNING)
        _close_handlers(http_logger)
        if http_file_handler:
            http_logger.propagate = False
            http_logger.addHandler(http_file_handler)
        else:
            http_logger.propagate = True

    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.propagate = False
        _close_handlers(uvicorn_logger)
        uvicorn_logger.addHandler(stdout_handler)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,  # trace_id and other context
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        exception_processor,
    ]

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

    logging.getLogger().setLevel(level)

    structlog.get_logger("torznarr.logging").info(
        "Logging configured",
        level=logging.getLevelName(level),
        debug=debug,
        app_log_file=str(logs_dir / "torznarr.json.log") if app_file_handler else None,
        http_log_file=str(logs_dir / "torznarr.http.json.log") if http_file_handler else None,
    )
