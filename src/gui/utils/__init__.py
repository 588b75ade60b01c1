"""
GUI-specific utilities for the registration application.
"""

from .styling import StyleSheets, apply_status_style

__all__ = [
    "StyleSheets",
    "apply_status_style",
]
