"""
Application Logger

This module provides the project logger hierarchy. Every module logs under
the ``patient_dashboard`` logger, either through ``app_logger.getChild`` or
``get_logger(__name__)``. ``configure_logger`` is called once at startup with
the level, format and optional file from the settings.

Each record carries the id of the request being served (``-`` outside a
request), so lines written while handling one request can be grouped.
"""

import contextvars
import datetime
import functools
import inspect
import json
import logging
import os
import sys
import time
from typing import Any, Callable, Optional, TypeVar, Union

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-40s | [%(request_id)s] %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Root name for every logger in the project
APP_LOGGER_NAME = "patient_dashboard"

NO_REQUEST_ID = "-"

F = TypeVar('F', bound=Callable[..., Any])

__all__ = [
    'app_logger',
    'bind_request_id',
    'configure_logger',
    'current_request_id',
    'get_logger',
    'JsonFormatter',
    'log_execution_time',
    'RequestContextFilter',
    'reset_request_id',
]

_request_id: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default=NO_REQUEST_ID)


def bind_request_id(request_id: str) -> contextvars.Token:
    """Set the request id for the current context; pass the token to ``reset_request_id``."""
    return _request_id.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id.reset(token)


def current_request_id() -> str:
    return _request_id.get()


class RequestContextFilter(logging.Filter):
    """Adds ``request_id`` to every record passing through a handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = current_request_id()
        return True


class JsonFormatter(logging.Formatter):
    """
    Formatter that writes one JSON object per record.

    Structured fields passed as ``extra={"data": {...}}`` are merged into
    the object, which is how the request log emits method, path and status.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_object = {
            "timestamp": datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "requestId": getattr(record, "request_id", NO_REQUEST_ID),
            "message": record.getMessage(),
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_object["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        data = getattr(record, "data", None)
        if isinstance(data, dict):
            log_object.update(data)

        return json.dumps(log_object, default=str)


def _build_handler(handler: logging.Handler, formatter: logging.Formatter) -> logging.Handler:
    handler.setFormatter(formatter)
    handler.addFilter(RequestContextFilter())
    return handler


def configure_logger(
    level: Union[str, int] = logging.INFO,
    use_json: bool = False,
    log_file: Optional[str] = None,
    name: str = APP_LOGGER_NAME,
) -> logging.Logger:
    """
    Configure the project logger. Calling it again replaces the handlers.

    Args:
        level: Log level name or number
        use_json: Write JSON objects instead of the plain format
        log_file: Also write to this file, creating its directory
        name: Logger to configure

    Returns:
        The configured logger
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter: logging.Formatter = (
        JsonFormatter() if use_json else logging.Formatter(DEFAULT_LOG_FORMAT, DEFAULT_DATE_FORMAT)
    )
    logger.addHandler(_build_handler(logging.StreamHandler(sys.stdout), formatter))

    if log_file:
        try:
            directory = os.path.dirname(log_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            logger.addHandler(_build_handler(logging.FileHandler(log_file), formatter))
        except OSError as e:
            logger.warning(f"Could not open log file {log_file}: {e}")

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger inside the project hierarchy.

    Module names (``patient_dashboard.x.y``) are used as they are; any other
    name becomes a child of the project logger.
    """
    if name == APP_LOGGER_NAME or name.startswith(APP_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return app_logger.getChild(name)


app_logger = logging.getLogger(APP_LOGGER_NAME)


def log_execution_time(logger: Optional[logging.Logger] = None) -> Callable[[F], F]:
    """
    Decorator logging how long a function or coroutine took.

    Successful calls are logged at DEBUG, failures at ERROR; the exception
    is re-raised.

    Args:
        logger: Logger to write to, the project logger when omitted
    """
    target = logger or app_logger

    def decorator(func: F) -> F:
        def report(started: float, error: Optional[BaseException] = None) -> None:
            elapsed = time.perf_counter() - started
            if error is None:
                target.debug(f"{func.__qualname__} executed in {elapsed:.3f} seconds")
            else:
                target.error(f"{func.__qualname__} failed after {elapsed:.3f} seconds: {error}")

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    report(started, e)
                    raise
                report(started)
                return result

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                report(started, e)
                raise
            report(started)
            return result

        return wrapper  # type: ignore[return-value]

    return decorator
