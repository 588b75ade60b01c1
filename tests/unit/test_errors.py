"""
Tests for the error taxonomy and the centralized error handler.
"""

from core.error_handler import ErrorHandler, get_error_handler, redact
from core.errors import (
    BaseAppError,
    ErrorCode,
    ErrorSeverity,
    ErrorType,
    SubmissionError,
    UnexpectedError,
    ValidationError,
    map_exception,
)


class TestErrorMapping:
    """Test mapping of built-in exceptions."""

    def test_app_errors_pass_through(self):
        """Application errors are returned unchanged."""
        error = ValidationError(code=ErrorCode.INVALID_FORMAT, user_message="Bad", field="username")
        assert map_exception(error) is error

    def test_value_error(self):
        """ValueError maps to an input validation error."""
        result = map_exception(ValueError("bad value"))
        assert isinstance(result, ValidationError)
        assert result.code == ErrorCode.INVALID_INPUT
        assert result.user_message == "bad value"

    def test_connection_error(self):
        """Connection failures map to retriable backend failures."""
        result = map_exception(ConnectionError())
        assert isinstance(result, SubmissionError)
        assert result.code == ErrorCode.BACKEND_FAILURE
        assert result.user_message == "Could not reach the server."
        assert result.retriable

    def test_timeout_error(self):
        """Timeouts map to backend failures."""
        result = map_exception(TimeoutError("slow"))
        assert result.type == ErrorType.SUBMISSION

    def test_unknown_exception(self):
        """Unknown exceptions map to a generic system error."""
        result = map_exception(RuntimeError("boom"))
        assert isinstance(result, UnexpectedError)
        assert result.code == ErrorCode.UNKNOWN
        assert result.technical_message == "RuntimeError: boom"
        assert result.type == ErrorType.SYSTEM

    def test_os_error(self):
        """Other OS errors map to unexpected errors with their own code."""
        result = map_exception(PermissionError(""), {"path": "logs"})
        assert isinstance(result, UnexpectedError)
        assert result.code == ErrorCode.OS_ERROR
        assert result.user_message == "System error occurred."
        assert result.context == {"path": "logs"}


class TestBaseAppError:
    """Test BaseAppError helpers."""

    def test_to_dict_and_str(self):
        """Errors serialize and print their user message."""
        error = ValidationError(code=ErrorCode.PASSWORD_MISMATCH, user_message="Passwords do not match.", field="confirm_password")

        assert str(error) == "Passwords do not match."
        assert error.to_dict()["code"] == "PASSWORD_MISMATCH"
        assert error.to_dict()["type"] == "validation"
        assert error.severity == ErrorSeverity.LOW
        assert error.to_dict()["context"] == {"field": "confirm_password"}
        assert "PASSWORD_MISMATCH" in repr(error)


class TestErrorHandler:
    """Test the shared error handler."""

    def test_singleton(self):
        """The accessor always returns the same instance."""
        assert get_error_handler() is get_error_handler()
        assert isinstance(get_error_handler(), ErrorHandler)

    def test_handle_emits_signal(self, qtbot):
        """Handled errors are emitted for the UI."""
        handler = get_error_handler()
        error = SubmissionError(code=ErrorCode.BACKEND_REJECTED, user_message="Taken", retriable=False)

        with qtbot.waitSignal(handler.errorOccurred, timeout=1000) as blocker:
            result = handler.handle(error)

        assert result is error
        assert blocker.args == [error]

    def test_sensitive_context_redacted(self):
        """Passwords never reach the error context."""
        handler = get_error_handler()
        result = handler.capture(RuntimeError("boom"), {"password": "hunter2", "form": "registration"})

        assert result.context["password"] == "[REDACTED]"
        assert result.context["form"] == "registration"
        assert result.technical_message == "RuntimeError: boom"

    def test_long_context_values_shortened(self):
        """Long context values are cut so log lines stay bounded."""
        safe = redact({"value": "x" * 500, "count": 3, "api_key": "abc"})

        assert safe["value"] == "x" * 200 + "..."
        assert safe["count"] == "3"
        assert safe["api_key"] == "[REDACTED]"

    def test_user_message_retriable_hint(self):
        """Retriable errors invite the user to try again once."""
        handler = get_error_handler()

        retriable = SubmissionError(code=ErrorCode.BACKEND_FAILURE, user_message="Server down.")
        assert handler.to_user_message(retriable) == "Server down. You can try again."

        already = SubmissionError(code=ErrorCode.BACKEND_FAILURE, user_message="Unknown error. Please try again.")
        assert handler.to_user_message(already) == "Unknown error. Please try again."

        final = BaseAppError(code=ErrorCode.INVALID_INPUT, user_message="Bad input.")
        assert handler.to_user_message(final) == "Bad input."
