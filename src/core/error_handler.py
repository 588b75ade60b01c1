"""
Error reporting for the registration GUI.

ErrorHandler turns exceptions into BaseAppError instances, writes them to a
rotating log file in the app data directory and announces them to the UI.
"""

from __future__ import annotations

import logging
import logging.handlers
from typing import Any

from PySide6.QtCore import QObject, Signal

from .config import DEFAULT_CONFIG, get_logs_dir
from .errors import BaseAppError, map_exception

ERROR_LOGGER_NAME = "registration_gui.errors"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | code=%(app_code)s | %(message)s"
SENSITIVE_KEYS = ("password", "contrasena", "token", "key", "secret")
MAX_CONTEXT_VALUE = 200

_handler: ErrorHandler | None = None


class ErrorHandler(QObject):
    """Normalizes, logs and broadcasts application errors."""

    errorOccurred = Signal(object)  # BaseAppError

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._logger = _error_logger()

    def capture(self, exception: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
        """Normalize an exception, merging redacted context into it."""
        app_error = map_exception(exception)
        for key, value in redact(context or {}).items():
            app_error.context.setdefault(key, value)
        if not app_error.technical_message:
            app_error.technical_message = f"{type(exception).__name__}: {exception}"
        return app_error

    def handle(self, exception: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
        """Capture, log and emit an error, returning it for display."""
        app_error = self.capture(exception, context)
        self._logger.error(
            f"[{app_error.type.value}] {app_error.user_message} ({app_error.technical_message})",
            extra={"app_code": app_error.code.value},
            exc_info=exception if exception.__traceback__ else None,
        )
        self.errorOccurred.emit(app_error)
        return app_error

    def to_user_message(self, app_error: BaseAppError) -> str:
        """Message for the form's status label."""
        message = app_error.user_message
        if app_error.retriable and "try again" not in message.lower():
            message += " You can try again."
        return message


def redact(context: dict[str, Any]) -> dict[str, Any]:
    """Hide sensitive values and shorten long ones."""
    safe: dict[str, Any] = {}
    for key, value in context.items():
        if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
            safe[key] = "[REDACTED]"
        else:
            text = value if isinstance(value, str) else repr(value)
            safe[key] = text if len(text) <= MAX_CONTEXT_VALUE else text[:MAX_CONTEXT_VALUE] + "..."
    return safe


def _error_logger() -> logging.Logger:
    error_logger = logging.getLogger(ERROR_LOGGER_NAME)
    if error_logger.handlers:
        return error_logger

    error_logger.setLevel(logging.DEBUG)
    error_logger.propagate = False
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    try:
        logs_dir = get_logs_dir()
        logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            logs_dir / "app.log", maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        error_logger.addHandler(file_handler)
    except OSError as e:
        logging.getLogger(__name__).warning(f"Error log file unavailable: {e}")

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.WARNING)
    error_logger.addHandler(console_handler)
    return error_logger


def get_error_handler() -> ErrorHandler:
    """Return the application-wide ErrorHandler, creating it on first use."""
    global _handler
    if _handler is None:
        _handler = ErrorHandler()
    return _handler


def init_logging(level: str | None = None) -> None:
    """
    Configure root logging and the error log.

    Args:
        level: Log level name, defaults to DEFAULT_CONFIG["log_level"]
    """
    logging.basicConfig(
        level=getattr(logging, (level or DEFAULT_CONFIG["log_level"]).upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    get_error_handler()
