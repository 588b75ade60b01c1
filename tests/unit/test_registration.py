"""
Tests for submission checks, record assembly and backend error translation.
"""

from unittest.mock import Mock

import pytest

from core.errors import ErrorCode, ErrorType, SubmissionError, ValidationError
from core.registration import (
    UNKNOWN_BACKEND_ERROR,
    DryRunBackend,
    RegistrationRecord,
    backend_rejection,
    build_record,
    check_submission,
    passwords_match,
    submit,
    translate_backend_error,
)


@pytest.fixture
def form_values():
    """Raw values of a correctly filled form."""
    return {
        "name": "José Pérez ",
        "username": "juan.perez",
        "password": " s3cret ",
        "confirm_password": " s3cret ",
        "phone_prefix": "+57",
        "phone_number": "3001234567",
        "document_type": " cc ",
        "document_number": "1020304050",
    }


class TestCheckSubmission:
    """Test the checks deferred to submission time."""

    def test_valid_form_passes(self, form_values):
        """A correctly filled form raises nothing."""
        check_submission(form_values)

    def test_password_mismatch(self, form_values):
        """Differing passwords are reported first."""
        form_values["confirm_password"] = "other"
        form_values["name"] = ""

        with pytest.raises(ValidationError) as exc_info:
            check_submission(form_values)

        assert exc_info.value.code == ErrorCode.PASSWORD_MISMATCH
        assert exc_info.value.field == "confirm_password"
        assert str(exc_info.value) == "Passwords do not match."

    @pytest.mark.parametrize("username", ["juan.", "juan_"])
    def test_username_trailing_separator(self, form_values, username):
        """Usernames ending in a separator are rejected at submission."""
        form_values["username"] = username

        with pytest.raises(ValidationError) as exc_info:
            check_submission(form_values)

        assert exc_info.value.code == ErrorCode.INVALID_FORMAT
        assert exc_info.value.field == "username"

    def test_missing_field(self, form_values):
        """Empty grammar fields are reported as missing."""
        form_values["document_number"] = "   "

        with pytest.raises(ValidationError) as exc_info:
            check_submission(form_values)

        assert exc_info.value.code == ErrorCode.REQUIRED_FIELD_MISSING
        assert exc_info.value.field == "document_number"

    @pytest.mark.parametrize(
        "key,value",
        [("phone_number", "300123"), ("phone_prefix", "+5"), ("document_number", "0123")],
    )
    def test_incomplete_field(self, form_values, key, value):
        """Fields that are only prefixes are reported as invalid format."""
        form_values[key] = value

        with pytest.raises(ValidationError) as exc_info:
            check_submission(form_values)

        assert exc_info.value.code == ErrorCode.INVALID_FORMAT
        assert exc_info.value.field == key
        assert exc_info.value.type == ErrorType.VALIDATION

    def test_passwords_match(self):
        """Password comparison is exact."""
        assert passwords_match({"password": "a", "confirm_password": "a"})
        assert not passwords_match({"password": "a ", "confirm_password": "a"})


class TestBuildRecord:
    """Test assembly of the record sent to the backend."""

    def test_values_trimmed_except_password(self, form_values):
        """Every value is trimmed except the password."""
        record = build_record(form_values, "Acme")

        assert record == RegistrationRecord(
            name="José Pérez",
            username="juan.perez",
            password=" s3cret ",
            country_code="+57",
            phone="3001234567",
            document_type="CC",
            document_number="1020304050",
            organization="Acme",
        )

    def test_to_dict(self, form_values):
        """Records serialize to a plain dictionary."""
        data = build_record(form_values, "Acme").to_dict()
        assert data["country_code"] == "+57"
        assert data["organization"] == "Acme"


class TestBackendErrors:
    """Test translation of backend rejections."""

    def test_string_payload(self):
        """String payloads are shown as they are."""
        assert translate_backend_error("Username already exists") == "Username already exists"

    def test_mapping_with_message(self):
        """Mappings carrying 'mensaje' show that message."""
        assert translate_backend_error({"mensaje": "Document already registered"}) == "Document already registered"

    @pytest.mark.parametrize("payload", [None, {}, {"error": "x"}, {"mensaje": ""}, 500])
    def test_unknown_payload(self, payload):
        """Anything else falls back to a generic message."""
        assert translate_backend_error(payload) == UNKNOWN_BACKEND_ERROR

    def test_backend_rejection_known(self):
        """Known rejections are not retriable."""
        error = backend_rejection({"mensaje": "Taken"}, status=409)

        assert isinstance(error, SubmissionError)
        assert error.code == ErrorCode.BACKEND_REJECTED
        assert error.user_message == "Taken"
        assert error.context == {"status": 409}
        assert not error.retriable

    def test_backend_rejection_unknown(self):
        """Unknown rejections are retriable backend failures."""
        error = backend_rejection(None)

        assert error.code == ErrorCode.BACKEND_FAILURE
        assert error.retriable


class TestSubmit:
    """Test the submission flow."""

    def test_submit_hands_record_to_backend(self, form_values):
        """A valid form reaches the backend and returns its message."""
        backend = DryRunBackend()

        message = submit(form_values, "Acme", backend)

        assert message == "Manager juan.perez registered."
        assert len(backend.records) == 1
        assert backend.records[0].document_type == "CC"

    def test_failed_check_skips_backend(self, form_values):
        """The backend is not called when a check fails."""
        backend = Mock()
        form_values["confirm_password"] = "nope"

        with pytest.raises(ValidationError):
            submit(form_values, "Acme", backend)

        backend.register.assert_not_called()

    def test_backend_error_propagates(self, form_values):
        """Backend rejections propagate to the caller."""
        backend = Mock()
        backend.register.side_effect = backend_rejection("Duplicate")

        with pytest.raises(SubmissionError, match="Duplicate"):
            submit(form_values, "Acme", backend)
