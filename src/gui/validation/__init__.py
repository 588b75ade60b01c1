"""
Input guarding and validation for the registration form.

This package provides line edits that veto illegal keystrokes and pastes,
QValidator adapters for the field grammars, and debounced completeness tracking.
"""

from .guarded_line_edit import GuardedLineEdit
from .input_validator import InputValidator
from .validators import GrammarValidator

__all__ = [
    "GrammarValidator",
    "GuardedLineEdit",
    "InputValidator",
]
