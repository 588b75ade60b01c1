"""
Qt validators for the guarded registration fields.

This module adapts field grammars to QValidator so widgets can report whether
a whole value is complete, still being typed, or impossible.
"""

from __future__ import annotations

from typing import Any

from PySide6.QtGui import QValidator
from PySide6.QtWidgets import QWidget

from core.engine import is_complete, is_valid_prefix
from core.errors import ErrorCode, ValidationError
from core.grammars import FieldId, Grammar, grammar_for


class GrammarValidator(QValidator):
    """
    Validator backed by a field grammar.

    Complete values are Acceptable, valid prefixes are Intermediate, and
    anything that could not have been typed is Invalid.
    """

    def __init__(self, grammar: Grammar | FieldId | str, parent: QWidget | None = None):
        super().__init__(parent)
        self.grammar = grammar if isinstance(grammar, Grammar) else grammar_for(grammar)

    def validate(self, input_text: str, pos: int) -> tuple[QValidator.State, str, int]:
        """Validate a whole field value."""
        if not input_text:
            return QValidator.State.Intermediate, input_text, pos

        if is_complete(self.grammar, input_text):
            return QValidator.State.Acceptable, input_text, pos

        if is_valid_prefix(self.grammar, input_text):
            return QValidator.State.Intermediate, input_text, pos

        return QValidator.State.Invalid, input_text, pos

    def error_message(self) -> str:
        """Describe the complete values this validator accepts."""
        return ERROR_MESSAGES[self.grammar.kind]


ERROR_MESSAGES: dict[FieldId, str] = {
    FieldId.NAME: "Only letters and spaces are allowed",
    FieldId.USERNAME: "Letters, digits, '.' and '_' only; cannot start or end with '.' or '_'",
    FieldId.DOCUMENT_NUMBER: "Digits only, not starting with 0",
    FieldId.PHONE_PREFIX: "Prefix must be +57",
    FieldId.PHONE_NUMBER: "Phone number must have 10 digits and start with 3",
}


def create_validation_error(field: str, message: str, value: Any = None) -> ValidationError:
    """Build the ValidationError logged when a field holds a value its grammar rejects."""
    return ValidationError(
        ErrorCode.INVALID_FORMAT,
        message,
        field=field,
        technical_message=f"Field '{field}' holds a value outside its grammar: {message}",
        context={"value": value} if value is not None else {},
    )
