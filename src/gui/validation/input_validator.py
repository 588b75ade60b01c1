"""
Debounced completeness tracking for the registration form.

Guarded line edits keep each field a valid prefix while the user types; this
module tells the form when every field also holds a complete value and marks
incomplete fields with the ``hasError`` style property.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from PySide6.QtCore import QObject, QTimer, Signal
from PySide6.QtGui import QValidator
from PySide6.QtWidgets import QLineEdit

from core.config import DEFAULT_CONFIG
from core.error_handler import get_error_handler

from .validators import GrammarValidator, create_validation_error

REQUIRED_MESSAGE = "This field is required"
INCOMPLETE_MESSAGE = "Input is incomplete"

FieldCheck = Callable[[str], tuple[bool, str]]


@dataclass
class TrackedField:
    """A registered input and its last validation outcome."""

    widget: QLineEdit
    check: GrammarValidator | FieldCheck
    required: bool
    timer: QTimer
    last_value: str | None = None
    message: str = ""
    is_valid: bool = False


class InputValidator(QObject):
    """
    Tracks whether every registered field holds a complete value.

    Emits fieldValidityChanged when a field's message changes and
    overallValidityChanged when the form as a whole flips.
    """

    fieldValidityChanged = Signal(str, bool, str)  # key, valid, message
    overallValidityChanged = Signal(bool)

    def __init__(self, parent: QObject | None = None, debounce_delay: int | None = None):
        super().__init__(parent)
        self._fields: dict[str, TrackedField] = {}
        self._debounce_delay = DEFAULT_CONFIG["debounce_ms"] if debounce_delay is None else debounce_delay
        self._overall_valid: bool | None = None

    def register_field(
        self, key: str, widget: QLineEdit, check: GrammarValidator | FieldCheck, required: bool = True
    ) -> None:
        """
        Start tracking a field.

        Args:
            key: Field name used in signals and lookups
            widget: The input to watch
            check: GrammarValidator, or a callable returning (valid, message)
            required: Whether an empty value is invalid
        """
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.timeout.connect(lambda: self._validate(key))
        self._fields[key] = TrackedField(widget, check, required, timer, is_valid=not required)

        widget.textChanged.connect(lambda: self._schedule(key))
        widget.editingFinished.connect(lambda: self.validate_now(key))
        widget.setProperty("originalToolTip", widget.toolTip())

        self._validate(key)

    def validate_now(self, key: str) -> bool:
        """Validate a field immediately, bypassing the debounce. Unknown keys are valid."""
        field = self._fields.get(key)
        if field is None:
            return True

        field.timer.stop()
        field.last_value = None
        self._validate(key)
        return field.is_valid

    def validate_all(self) -> bool:
        """Validate every field immediately."""
        for key in self._fields:
            self.validate_now(key)
        return all(field.is_valid for field in self._fields.values())

    def is_field_valid(self, key: str) -> bool:
        field = self._fields.get(key)
        return field.is_valid if field else True

    def get_field_error(self, key: str) -> str:
        field = self._fields.get(key)
        return field.message if field else ""

    def cleanup(self) -> None:
        """Stop pending validations and forget every field."""
        for field in self._fields.values():
            field.timer.stop()
            field.timer.deleteLater()
        self._fields.clear()

    def _schedule(self, key: str) -> None:
        field = self._fields.get(key)
        if field is not None:
            field.timer.start(self._debounce_delay)

    def _validate(self, key: str) -> None:
        field = self._fields.get(key)
        if field is None:
            return

        value = field.widget.text()
        if value == field.last_value:
            return
        field.last_value = value

        field.is_valid, message = self._evaluate(key, field, value)
        if message != field.message:
            field.message = message
            self._update_styling(field.widget, field.is_valid, message)
            self.fieldValidityChanged.emit(key, field.is_valid, message)

        overall = all(tracked.is_valid for tracked in self._fields.values())
        if overall != self._overall_valid:
            self._overall_valid = overall
            self.overallValidityChanged.emit(overall)

    def _evaluate(self, key: str, field: TrackedField, value: str) -> tuple[bool, str]:
        if not value.strip():
            return (False, REQUIRED_MESSAGE) if field.required else (True, "")

        if not isinstance(field.check, GrammarValidator):
            return field.check(value)

        state = field.check.validate(value, 0)[0]
        if state == QValidator.State.Acceptable:
            return True, ""
        if state == QValidator.State.Intermediate:
            return False, INCOMPLETE_MESSAGE

        # Only programmatic setText can bypass the guard
        message = field.check.error_message()
        get_error_handler().handle(create_validation_error(key, message, value))
        return False, message

    def _update_styling(self, widget: QLineEdit, is_valid: bool, message: str) -> None:
        widget.blockSignals(True)
        try:
            widget.setProperty("hasError", not is_valid)
            widget.setToolTip((widget.property("originalToolTip") or "") if is_valid else f"Error: {message}")
            widget.style().polish(widget)
        finally:
            widget.blockSignals(False)
