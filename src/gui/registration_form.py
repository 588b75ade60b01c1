"""
Registration form for organization managers.

This module contains the RegistrationForm widget: guarded inputs for the
grammar-checked fields, password fields, submission to an external backend,
and the result message.
"""

from __future__ import annotations

import logging

from PySide6.QtCore import QTimer, Signal
from PySide6.QtWidgets import (
    QFormLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from core.config import DEFAULT_CONFIG, load_selected_organization
from core.error_handler import get_error_handler
from core.errors import ConfigError
from core.grammars import FieldId
from core.registration import (
    CONFIRM_PASSWORD,
    DOCUMENT_TYPE,
    FIELD_LABELS,
    PASSWORD,
    RegistrationBackend,
    passwords_match,
    submit,
)
from gui.utils.styling import StyleSheets, apply_status_style
from gui.validation import GrammarValidator, GuardedLineEdit, InputValidator


class RegistrationForm(QWidget):
    """
    Form collecting a manager's registration data.

    Guarded fields only ever hold valid prefixes of their grammar; the submit
    button is enabled once every field is complete.
    """

    registered = Signal(str)  # backend success message
    navigateRequested = Signal()  # emitted after the post-registration pause

    def __init__(self, backend: RegistrationBackend, parent: QWidget | None = None, organization: str | None = None):
        super().__init__(parent)
        self._logger = logging.getLogger(__name__)
        self._backend = backend
        self._error_handler = get_error_handler()
        self.organization = organization if organization is not None else self._load_organization()

        self.guarded_inputs: dict[FieldId, GuardedLineEdit] = {field_id: GuardedLineEdit(field_id) for field_id in FieldId}
        self.password_input = QLineEdit()
        self.password_input.setEchoMode(QLineEdit.EchoMode.Password)
        self.confirm_password_input = QLineEdit()
        self.confirm_password_input.setEchoMode(QLineEdit.EchoMode.Password)
        self.document_type_input = QLineEdit()
        self.submit_button = QPushButton("Register")
        self.message_label = QLabel("")
        self.organization_label = QLabel(self.organization)

        self._redirect_timer = QTimer(self)
        self._redirect_timer.setSingleShot(True)
        self._redirect_timer.timeout.connect(self.navigateRequested)

        self._setup_ui()

        self.input_validator = InputValidator(self, debounce_delay=DEFAULT_CONFIG["debounce_ms"])
        self._register_fields()
        self.submit_button.clicked.connect(self.on_submit_clicked)

    def _load_organization(self) -> str:
        try:
            return load_selected_organization()
        except ConfigError as e:
            self._error_handler.handle(e, {"source": "organization settings"})
            return ""

    def _setup_ui(self) -> None:
        """Build the form layout."""
        self.setWindowTitle("Register manager")
        self.setStyleSheet(StyleSheets.get_form_style())

        layout = QVBoxLayout(self)
        form = QFormLayout()
        form.addRow("Organization", self.organization_label)
        form.addRow(FIELD_LABELS[FieldId.NAME], self.guarded_inputs[FieldId.NAME])
        form.addRow(FIELD_LABELS[FieldId.USERNAME], self.guarded_inputs[FieldId.USERNAME])
        form.addRow("Password", self.password_input)
        form.addRow("Confirm password", self.confirm_password_input)
        form.addRow(FIELD_LABELS[FieldId.PHONE_PREFIX], self.guarded_inputs[FieldId.PHONE_PREFIX])
        form.addRow(FIELD_LABELS[FieldId.PHONE_NUMBER], self.guarded_inputs[FieldId.PHONE_NUMBER])
        form.addRow("Document type", self.document_type_input)
        form.addRow(FIELD_LABELS[FieldId.DOCUMENT_NUMBER], self.guarded_inputs[FieldId.DOCUMENT_NUMBER])
        layout.addLayout(form)

        self.guarded_inputs[FieldId.PHONE_PREFIX].setPlaceholderText("+57")
        self.guarded_inputs[FieldId.PHONE_NUMBER].setPlaceholderText("3001234567")

        layout.addWidget(self.submit_button)
        layout.addWidget(self.message_label)
        self.submit_button.setEnabled(False)

    def _register_fields(self) -> None:
        """Register every input with the completeness tracker."""
        for field_id, widget in self.guarded_inputs.items():
            self.input_validator.register_field(field_id.value, widget, GrammarValidator(field_id, self))

        self.input_validator.register_field(PASSWORD, self.password_input, lambda value: (True, ""))
        self.input_validator.register_field(CONFIRM_PASSWORD, self.confirm_password_input, self._check_confirmation)
        self.input_validator.register_field(DOCUMENT_TYPE, self.document_type_input, lambda value: (True, ""))

        self.password_input.textChanged.connect(lambda: self.input_validator.validate_now(CONFIRM_PASSWORD))
        self.input_validator.overallValidityChanged.connect(self.submit_button.setEnabled)
        self.submit_button.setEnabled(self.input_validator.validate_all())

    def _check_confirmation(self, value: str) -> tuple[bool, str]:
        if passwords_match(self.values()):
            return True, ""
        return False, "Passwords do not match"

    def values(self) -> dict[str, str]:
        """Current raw form values keyed by field name."""
        values = {field_id.value: widget.text() for field_id, widget in self.guarded_inputs.items()}
        values[PASSWORD] = self.password_input.text()
        values[CONFIRM_PASSWORD] = self.confirm_password_input.text()
        values[DOCUMENT_TYPE] = self.document_type_input.text()
        return values

    def on_submit_clicked(self) -> None:
        """Check the form and hand the record to the backend."""
        self._set_message("", "default")
        self.submit_button.setEnabled(False)

        try:
            response = submit(self.values(), self.organization, self._backend)
        except Exception as e:  # Validation and backend failures end up as a message
            self._show_error(e)
            return

        self._logger.info("Registration accepted by backend")
        self._set_message(response, "success")
        self.clear()
        self.registered.emit(response)
        self._redirect_timer.start(DEFAULT_CONFIG["redirect_delay_ms"])

    def clear(self) -> None:
        """Reset every input to empty."""
        for widget in (*self.guarded_inputs.values(), self.password_input, self.confirm_password_input, self.document_type_input):
            widget.clear()
        self.input_validator.validate_all()

    def _show_error(self, exception: Exception) -> None:
        app_error = self._error_handler.handle(exception, {"form": "registration"})
        self._set_message(self._error_handler.to_user_message(app_error), "error")
        self.submit_button.setEnabled(self.input_validator.validate_all())

    def _set_message(self, message: str, status: str) -> None:
        self.message_label.setText(message)
        apply_status_style(self.message_label, status)
