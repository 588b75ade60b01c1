"""
Shared styling utilities for the registration GUI.

This module contains the color palette and stylesheets used by the form.
"""

from typing import Any, Protocol


class StyleableWidget(Protocol):
    """Protocol for widgets that can be styled."""

    def setStyleSheet(self, styleSheet: str) -> None: ...
    def style(self) -> Any: ...


class AccessiblePalette:
    """Centralized color palette with WCAG AA contrast."""

    BORDER_DEFAULT = "#dee2e6"  # Light border
    BORDER_FOCUS = "#0d6efd"  # Blue focus indicator
    BORDER_ERROR = "#dc3545"  # Error state border

    BACKGROUND_DEFAULT = "#ffffff"
    TEXT_PRIMARY = "#212529"

    STATUS_SUCCESS_TEXT = "#198754"
    STATUS_ERROR_TEXT = "#721c24"
    STATUS_DEFAULT_TEXT = "#495057"


class StyleSheets:
    """Stylesheet builders for form widgets."""

    @staticmethod
    def get_form_style() -> str:
        """Stylesheet for the registration form; fields flagged hasError get a red border."""
        return f"""
            QLineEdit {{
                border: 1px solid {AccessiblePalette.BORDER_DEFAULT};
                border-radius: 4px;
                padding: 6px;
                background-color: {AccessiblePalette.BACKGROUND_DEFAULT};
                color: {AccessiblePalette.TEXT_PRIMARY};
            }}
            QLineEdit:focus {{
                border: 2px solid {AccessiblePalette.BORDER_FOCUS};
            }}
            QLineEdit[hasError="true"] {{
                border: 2px solid {AccessiblePalette.BORDER_ERROR};
            }}
        """

    @staticmethod
    def get_status_label_style(status: str = "default") -> str:
        """Stylesheet for the submission message label."""
        colors = {
            "success": AccessiblePalette.STATUS_SUCCESS_TEXT,
            "error": AccessiblePalette.STATUS_ERROR_TEXT,
        }
        color = colors.get(status, AccessiblePalette.STATUS_DEFAULT_TEXT)
        return f"QLabel {{ color: {color}; font-weight: bold; }}"


def apply_status_style(widget: StyleableWidget, status: str = "default") -> None:
    """
    Apply status-based styling to a widget.

    Args:
        widget: The widget to style
        status: Status type ("default", "success", "error")
    """
    widget.setStyleSheet(StyleSheets.get_status_label_style(status))
