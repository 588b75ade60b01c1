"""
Tests for the debounced completeness tracker.
"""

from PySide6.QtWidgets import QLineEdit

from core.error_handler import get_error_handler
from core.errors import ErrorCode
from core.grammars import FieldId
from gui.validation.guarded_line_edit import GuardedLineEdit
from gui.validation.input_validator import InputValidator
from gui.validation.validators import GrammarValidator


class TestInputValidator:
    """Test field registration and validation."""

    def setup_method(self):
        """Set up test fixtures."""
        self.validator = InputValidator(debounce_delay=10)
        self.phone = GuardedLineEdit(FieldId.PHONE_NUMBER)

    def teardown_method(self):
        """Release timers."""
        self.validator.cleanup()

    def test_initialization(self):
        """Debounce delay and empty registry."""
        assert self.validator._debounce_delay == 10
        assert self.validator._fields == {}

    def test_default_debounce(self):
        """The default debounce comes from configuration."""
        assert InputValidator()._debounce_delay == 200

    def test_required_field_starts_invalid(self, qtbot):
        """An empty required field is invalid."""
        qtbot.addWidget(self.phone)
        self.validator.register_field("phone", self.phone, GrammarValidator(FieldId.PHONE_NUMBER))

        assert not self.validator.is_field_valid("phone")
        assert self.validator.get_field_error("phone") == "This field is required"

    def test_partial_then_complete(self, qtbot):
        """Partial values are incomplete, complete ones valid."""
        qtbot.addWidget(self.phone)
        self.validator.register_field("phone", self.phone, GrammarValidator(FieldId.PHONE_NUMBER))

        self.phone.paste_text("3001234567")
        assert self.validator.validate_now("phone")
        assert self.validator.get_field_error("phone") == ""
        assert self.phone.property("hasError") is False

        self.phone.setText("300")
        assert not self.validator.validate_now("phone")
        assert self.validator.get_field_error("phone") == "Input is incomplete"
        assert self.phone.property("hasError") is True
        assert self.phone.toolTip() == "Error: Input is incomplete"

    def test_debounced_validation(self, qtbot):
        """Typing triggers validation after the debounce delay."""
        qtbot.addWidget(self.phone)
        self.validator.register_field("phone", self.phone, GrammarValidator(FieldId.PHONE_NUMBER))

        qtbot.keyClicks(self.phone, "3001234567")
        qtbot.waitUntil(lambda: self.validator.is_field_valid("phone"), timeout=1000)

    def test_overall_validity_signal(self, qtbot):
        """Overall validity is emitted when it changes."""
        qtbot.addWidget(self.phone)
        self.validator.register_field("phone", self.phone, GrammarValidator(FieldId.PHONE_NUMBER))

        with qtbot.waitSignal(self.validator.overallValidityChanged, timeout=1000) as blocker:
            self.phone.paste_text("3001234567")
            self.validator.validate_all()

        assert blocker.args == [True]

    def test_callable_validator(self, qtbot):
        """Callable validators return (valid, message)."""
        edit = QLineEdit()
        qtbot.addWidget(edit)
        self.validator.register_field("code", edit, lambda value: (value == "ok", "Must be ok"))

        edit.setText("no")
        assert not self.validator.validate_now("code")
        assert self.validator.get_field_error("code") == "Must be ok"

        edit.setText("ok")
        assert self.validator.validate_now("code")

    def test_optional_empty_field(self, qtbot):
        """Empty optional fields are valid."""
        edit = QLineEdit()
        qtbot.addWidget(edit)
        self.validator.register_field("optional", edit, lambda value: (False, "never"), required=False)

        assert self.validator.is_field_valid("optional")

    def test_unknown_key(self):
        """Unknown keys are treated as valid."""
        assert self.validator.validate_now("missing")
        assert self.validator.is_field_valid("missing")
        assert self.validator.get_field_error("missing") == ""

    def test_value_set_in_code_reported(self, qtbot):
        """A value the grammar could never produce is reported through the error handler."""
        qtbot.addWidget(self.phone)
        self.validator.register_field("phone", self.phone, GrammarValidator(FieldId.PHONE_NUMBER))

        with qtbot.waitSignal(get_error_handler().errorOccurred, timeout=1000) as blocker:
            self.phone.setText("400")
            assert not self.validator.validate_now("phone")

        assert self.validator.get_field_error("phone") == "Phone number must have 10 digits and start with 3"
        assert blocker.args[0].field == "phone"
        assert blocker.args[0].code == ErrorCode.INVALID_FORMAT
