"""
Shared pytest configuration for the registration GUI tests.
"""

import os

# Set offscreen platform to prevent display errors on headless systems
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest  # noqa: E402
from PySide6.QtCore import QStandardPaths  # noqa: E402

# Keep logs and settings out of the real user directories
QStandardPaths.setTestModeEnabled(True)


@pytest.fixture(scope="session", autouse=True)
def qapp_session(qapp):
    """Make sure a QApplication exists before widgets are built in setup methods."""
    return qapp
