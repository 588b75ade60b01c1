"""
Submission-time checks and record assembly for the registration form.

The incremental engine keeps every guarded field a valid prefix while the user
types. This module performs the checks that only make sense once the user asks
to submit, builds the record handed to the backend, and turns a backend
rejection into a message for the user.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any, Protocol

from .engine import is_complete
from .errors import ErrorCode, SubmissionError, ValidationError
from .grammars import USERNAME_SEPARATORS, FieldId, grammar_for

logger = logging.getLogger(__name__)

PASSWORD = "password"
CONFIRM_PASSWORD = "confirm_password"
DOCUMENT_TYPE = "document_type"

UNKNOWN_BACKEND_ERROR = "Unknown error. Please try again."

FIELD_LABELS: dict[FieldId, str] = {
    FieldId.NAME: "Name",
    FieldId.USERNAME: "Username",
    FieldId.DOCUMENT_NUMBER: "Document number",
    FieldId.PHONE_PREFIX: "Phone prefix",
    FieldId.PHONE_NUMBER: "Phone number",
}


@dataclass(frozen=True)
class RegistrationRecord:
    """Validated record handed to the registration backend."""

    name: str
    username: str
    password: str
    country_code: str
    phone: str
    document_type: str
    document_number: str
    organization: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)


class RegistrationBackend(Protocol):
    """External collaborator that performs the actual registration."""

    def register(self, record: RegistrationRecord) -> str:
        """
        Register a record.

        Returns:
            Success message from the backend

        Raises:
            SubmissionError: If the backend rejects the record
        """
        ...


def passwords_match(values: Mapping[str, str]) -> bool:
    """Check that the password and its confirmation are identical."""
    return values.get(PASSWORD, "") == values.get(CONFIRM_PASSWORD, "")


def check_submission(values: Mapping[str, str]) -> None:
    """
    Run the checks deferred to submission time.

    Args:
        values: Raw form values keyed by FieldId value, "password",
            "confirm_password" and "document_type"

    Raises:
        ValidationError: On the first failing check
    """
    if not passwords_match(values):
        raise ValidationError(
            code=ErrorCode.PASSWORD_MISMATCH,
            user_message="Passwords do not match.",
            field=CONFIRM_PASSWORD,
        )

    for field_id in FieldId:
        value = values.get(field_id.value, "").strip()
        label = FIELD_LABELS[field_id]

        if not value:
            raise ValidationError(
                code=ErrorCode.REQUIRED_FIELD_MISSING,
                user_message=f"{label} is required.",
                field=field_id.value,
            )

        if field_id is FieldId.USERNAME and value.endswith(USERNAME_SEPARATORS):
            raise ValidationError(
                code=ErrorCode.INVALID_FORMAT,
                user_message="Username cannot end with '.' or '_'.",
                field=field_id.value,
                context={"value": value},
            )

        if not is_complete(grammar_for(field_id), value):
            raise ValidationError(
                code=ErrorCode.INVALID_FORMAT,
                user_message=f"{label} is incomplete or has an invalid format.",
                field=field_id.value,
                context={"value": value},
            )


def build_record(values: Mapping[str, str], organization: str) -> RegistrationRecord:
    """
    Assemble the record sent to the backend.

    Every value is trimmed except the password, and the document type is
    upper-cased.
    """
    return RegistrationRecord(
        name=values.get(FieldId.NAME.value, "").strip(),
        username=values.get(FieldId.USERNAME.value, "").strip(),
        password=values.get(PASSWORD, ""),
        country_code=values.get(FieldId.PHONE_PREFIX.value, "").strip(),
        phone=values.get(FieldId.PHONE_NUMBER.value, "").strip(),
        document_type=values.get(DOCUMENT_TYPE, "").strip().upper(),
        document_number=values.get(FieldId.DOCUMENT_NUMBER.value, "").strip(),
        organization=organization,
    )


def translate_backend_error(payload: Any) -> str:
    """
    Turn a backend rejection payload into a message for the user.

    Args:
        payload: Error body returned by the backend

    Returns:
        The payload itself if it is a string, its "mensaje" entry if it is a
        mapping carrying one, otherwise a generic message
    """
    if isinstance(payload, str):
        return payload
    if isinstance(payload, Mapping) and payload.get("mensaje"):
        return str(payload["mensaje"])
    return UNKNOWN_BACKEND_ERROR


def backend_rejection(payload: Any, status: int | None = None) -> SubmissionError:
    """Build the SubmissionError for a backend rejection payload."""
    message = translate_backend_error(payload)
    context: dict[str, Any] = {}
    if status is not None:
        context["status"] = status

    return SubmissionError(
        code=ErrorCode.BACKEND_REJECTED if message != UNKNOWN_BACKEND_ERROR else ErrorCode.BACKEND_FAILURE,
        user_message=message,
        technical_message=f"Backend rejected registration: {payload!r}",
        retriable=message == UNKNOWN_BACKEND_ERROR,
        context=context,
    )


def submit(values: Mapping[str, str], organization: str, backend: RegistrationBackend) -> str:
    """
    Check the form values, build the record and hand it to the backend.

    Returns:
        The backend's success message

    Raises:
        ValidationError: If a submission check fails
        SubmissionError: If the backend rejects the record
    """
    check_submission(values)
    record = build_record(values, organization)
    logger.info(f"Submitting registration for username '{record.username}'")
    return backend.register(record)


class DryRunBackend:
    """Backend that logs records instead of sending them anywhere."""

    def __init__(self) -> None:
        self.records: list[RegistrationRecord] = []

    def register(self, record: RegistrationRecord) -> str:
        self.records.append(record)
        logger.info(f"Dry run: registration for '{record.username}' not sent")
        return f"Manager {record.username} registered."
