"""
Centralized logging configuration for structured JSON logging.
Provides helpers for consistent structured logging across the store, the API and the CLI.
"""

import asyncio
import functools
import json
import logging
import logging.handlers
import time
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

# Request ID of the HTTP request (or CLI invocation) being served
_request_id: ContextVar[Optional[str]] = ContextVar('request_id', default=None)

# Name of the store operation being executed
_operation: ContextVar[Optional[str]] = ContextVar('operation', default=None)

LOG_BACKUP_DAYS = 30


def _context_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    request_id = _request_id.get()
    if request_id:
        fields["request_id"] = request_id
    operation = _operation.get()
    if operation:
        fields["operation"] = operation
    event = getattr(record, "event", None)
    if event:
        fields["event"] = event
    return fields


class StructuredJSONFormatter(logging.Formatter):
    """Formatter that writes one JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
        }
        log_data.update(_context_fields(record))
        log_data["message"] = record.getMessage()

        context = getattr(record, "context", None)
        if context:
            log_data["context"] = context

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            log_data["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        return json.dumps(log_data, ensure_ascii=False, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Formatter for developers tailing the plain-text log."""

    max_value_length = 500

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        lines = [
            f"{timestamp} {record.levelname:8s} [{record.name}] {record.funcName}() - {record.getMessage()}"
        ]

        for key, value in _context_fields(record).items():
            lines.append(f"  {key}: {value}")

        context = getattr(record, "context", None)
        if isinstance(context, dict):
            for key, value in context.items():
                if isinstance(value, (dict, list)):
                    rendered = json.dumps(value, indent=2, ensure_ascii=False, default=str)
                    lines.append(f"  {key}:")
                    lines.extend('    ' + line for line in rendered.split('\n'))
                else:
                    text = str(value)
                    if len(text) > self.max_value_length:
                        text = text[:self.max_value_length] + "... (truncated)"
                    lines.append(f"  {key}: {text}")
        elif context:
            lines.append(f"  context: {context}")

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            lines.append(f"  exception_type: {exc_type.__name__ if exc_type else 'Unknown'}")
            lines.append(f"  exception_message: {exc_value if exc_value else 'N/A'}")
            if exc_tb:
                lines.append("  traceback:")
                for chunk in traceback.format_exception(exc_type, exc_value, exc_tb):
                    lines.extend(f"    {line}" for line in chunk.rstrip().split('\n'))

        return '\n'.join(lines)


def default_log_dir() -> Path:
    """Project-level logs/ directory next to the prompt_library package."""
    return Path(__file__).resolve().parent.parent.parent / "logs"


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(path),
        when='midnight',
        interval=1,
        backupCount=LOG_BACKUP_DAYS,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(log_level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    """
    Initialize the logging system with dual file output:
    - application.log.json: structured JSON lines
    - application.log: human-readable text

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files. If None, uses <project>/logs/
    """
    log_dir = Path(log_dir) if log_dir is not None else default_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    level = getattr(logging, log_level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    json_log_file = log_dir / "application.log.json"
    text_log_file = log_dir / "application.log"
    root_logger.addHandler(_rotating_handler(json_log_file, level, StructuredJSONFormatter()))
    root_logger.addHandler(_rotating_handler(text_log_file, level, HumanReadableFormatter()))

    log_event(
        level="INFO",
        logger=__name__,
        function="setup_logging",
        operation="logging_setup",
        event="logging_initialized",
        message="Logging system initialized",
        context={
            "log_level": log_level,
            "log_dir": str(log_dir),
            "json_log_file": str(json_log_file),
            "text_log_file": str(text_log_file),
        }
    )


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return _request_id.get()


def set_request_id(request_id: Optional[str]) -> None:
    """Set the request ID in context."""
    _request_id.set(request_id)


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return f"req_{uuid.uuid4().hex[:12]}"


def get_operation() -> Optional[str]:
    """Get the current operation name from context."""
    return _operation.get()


def log_event(
    level: str,
    logger: str,
    function: str,
    operation: Optional[str] = None,
    event: Optional[str] = None,
    message: str = "",
    context: Optional[Dict[str, Any]] = None,
    exc_info: Optional[BaseException] = None
) -> None:
    """
    Log a structured event.

    Args:
        level: Log level name
        logger: Logger name (usually module path)
        function: Function name where the log originated
        operation: Store or HTTP operation name
        event: Specific event type (operation_start, operation_error, ...)
        message: Human-readable message
        context: Operation-specific data
        exc_info: Exception to attach
    """
    logger_instance = logging.getLogger(logger)
    log_method = getattr(logger_instance, level.lower(), logger_instance.info)

    extra: Dict[str, Any] = {}
    if event:
        extra['event'] = event
    if context:
        extra['context'] = context

    token = _operation.set(operation) if operation else None
    try:
        log_method(message, extra=extra, exc_info=exc_info)
    finally:
        if token is not None:
            _operation.reset(token)


def log_operation_start(
    logger: str,
    function: str,
    operation: str,
    message: str = "",
    context: Optional[Dict[str, Any]] = None
) -> None:
    """Log the start of an operation."""
    log_event(
        level="INFO",
        logger=logger,
        function=function,
        operation=operation,
        event="operation_start",
        message=message or f"Starting {operation}",
        context=context
    )


def log_operation_complete(
    logger: str,
    function: str,
    operation: str,
    message: str = "",
    context: Optional[Dict[str, Any]] = None,
    duration: Optional[float] = None
) -> None:
    """Log the completion of an operation."""
    context = dict(context or {})
    if duration is not None:
        context["duration_seconds"] = duration

    log_event(
        level="INFO",
        logger=logger,
        function=function,
        operation=operation,
        event="operation_complete",
        message=message or f"Completed {operation}",
        context=context
    )


def log_operation_error(
    logger: str,
    function: str,
    operation: str,
    error: BaseException,
    message: str = "",
    context: Optional[Dict[str, Any]] = None
) -> None:
    """Log an operation error."""
    context = dict(context or {})
    context["error_type"] = type(error).__name__
    context["error_message"] = str(error)

    log_event(
        level="ERROR",
        logger=logger,
        function=function,
        operation=operation,
        event="operation_error",
        message=message or f"Error in {operation}",
        context=context,
        exc_info=error
    )


def _call_context(args: tuple, kwargs: dict) -> Dict[str, Any]:
    # First positional argument of a bound method is `self`
    shown_args = args[1:] if args and hasattr(args[0], "__dict__") else args
    return {
        "args": str(shown_args)[:500] if shown_args else None,
        "kwargs": {k: str(v)[:200] for k, v in kwargs.items()} if kwargs else None,
    }


def operation_logger(operation_name: str) -> Callable:
    """
    Decorator to log operation start/complete/error around sync or async callables.

    Usage:
        @operation_logger("toggle_history_active")
        async def toggle_history_active(self, history_id):
            ...
    """
    def decorator(func):
        logger_name = func.__module__
        function_name = func.__name__

        def _started(args, kwargs) -> float:
            log_operation_start(
                logger=logger_name,
                function=function_name,
                operation=operation_name,
                context=_call_context(args, kwargs)
            )
            return time.perf_counter()

        def _completed(result: Any, started_at: float) -> None:
            log_operation_complete(
                logger=logger_name,
                function=function_name,
                operation=operation_name,
                context={"result_type": type(result).__name__},
                duration=time.perf_counter() - started_at
            )

        def _failed(error: BaseException, started_at: float) -> None:
            log_operation_error(
                logger=logger_name,
                function=function_name,
                operation=operation_name,
                error=error,
                context={"duration_seconds": time.perf_counter() - started_at}
            )

        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                started_at = _started(args, kwargs)
                token = _operation.set(operation_name)
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _failed(e, started_at)
                    raise
                finally:
                    _operation.reset(token)
                _completed(result, started_at)
                return result

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            started_at = _started(args, kwargs)
            token = _operation.set(operation_name)
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _failed(e, started_at)
                raise
            finally:
                _operation.reset(token)
            _completed(result, started_at)
            return result

        return wrapper
    return decorator
