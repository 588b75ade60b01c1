"""
Error taxonomy for the registration GUI.

Submission checks, backend rejections and configuration problems are raised as
BaseAppError subclasses; anything else is normalized by map_exception before it
reaches the UI or the log.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    """Where an error came from."""

    VALIDATION = "validation"
    SUBMISSION = "submission"
    CONFIG = "config"
    SYSTEM = "system"


class ErrorCode(Enum):
    """Specific error codes for common scenarios."""

    # Validation errors
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_FORMAT = "INVALID_FORMAT"
    REQUIRED_FIELD_MISSING = "REQUIRED_FIELD_MISSING"
    PASSWORD_MISMATCH = "PASSWORD_MISMATCH"

    # Submission errors
    BACKEND_REJECTED = "BACKEND_REJECTED"
    BACKEND_FAILURE = "BACKEND_FAILURE"

    # Configuration errors
    CONFIG_INVALID = "CONFIG_INVALID"
    CONFIG_PARSE_ERROR = "CONFIG_PARSE_ERROR"

    OS_ERROR = "OS_ERROR"
    UNKNOWN = "UNKNOWN"


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class BaseAppError(Exception):
    """
    Application error with structured metadata.

    Carries what the UI needs to show a message and what the log needs to
    diagnose it. Subclasses fix the error type.
    """

    type: ClassVar[ErrorType] = ErrorType.SYSTEM

    code: ErrorCode
    user_message: str
    technical_message: str | None = None
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    retriable: bool = False
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.user_message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.type.value}, code={self.code.value}, message='{self.user_message}')"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "type": self.type.value,
            "code": self.code.value,
            "user_message": self.user_message,
            "technical_message": self.technical_message,
            "severity": self.severity.value,
            "retriable": self.retriable,
            "context": self.context,
        }


class ValidationError(BaseAppError):
    """A form value failed a submission-time check."""

    type = ErrorType.VALIDATION

    def __init__(self, code: ErrorCode, user_message: str, field: str | None = None, **kwargs: Any):
        kwargs.setdefault("severity", ErrorSeverity.LOW)
        super().__init__(code, user_message, **kwargs)
        if field:
            self.context["field"] = field

    @property
    def field(self) -> str | None:
        """Name of the offending form field."""
        return self.context.get("field")


@dataclass
class SubmissionError(BaseAppError):
    """The registration backend refused or failed the request."""

    type: ClassVar[ErrorType] = ErrorType.SUBMISSION

    retriable: bool = True


@dataclass
class ConfigError(BaseAppError):
    """Stored settings could not be used."""

    type: ClassVar[ErrorType] = ErrorType.CONFIG


@dataclass
class UnexpectedError(BaseAppError):
    """Failure outside the registration flow's own checks."""

    type: ClassVar[ErrorType] = ErrorType.SYSTEM

    severity: ErrorSeverity = ErrorSeverity.HIGH


# Checked in order; TimeoutError and ConnectionError are OSError subclasses
_EXCEPTION_MAPPING: dict[type[Exception], tuple[type[BaseAppError], ErrorCode, str]] = {
    ValueError: (ValidationError, ErrorCode.INVALID_INPUT, "Invalid input provided."),
    TimeoutError: (SubmissionError, ErrorCode.BACKEND_FAILURE, "The server did not answer in time."),
    ConnectionError: (SubmissionError, ErrorCode.BACKEND_FAILURE, "Could not reach the server."),
    OSError: (UnexpectedError, ErrorCode.OS_ERROR, "System error occurred."),
}


def map_exception(exc: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
    """
    Normalize any exception into a BaseAppError.

    Application errors are returned unchanged.
    """
    if isinstance(exc, BaseAppError):
        return exc

    technical = f"{type(exc).__name__}: {exc}"
    for mapped_type, (error_class, code, default_message) in _EXCEPTION_MAPPING.items():
        if isinstance(exc, mapped_type):
            return error_class(code, str(exc) or default_message, technical_message=technical, context=dict(context or {}))

    logger.warning(f"Unmapped exception {technical}")
    return UnexpectedError(
        ErrorCode.UNKNOWN,
        "An unexpected error occurred",
        technical_message=technical,
        context=dict(context or {}),
    )
