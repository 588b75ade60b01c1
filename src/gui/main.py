"""
Main entry point for the registration GUI application.
"""

import sys

from PySide6.QtWidgets import QApplication

from core.config import setup_qsettings
from core.error_handler import init_logging
from core.registration import DryRunBackend
from gui.registration_form import RegistrationForm


def main() -> int:
    """Main application entry point."""
    app = QApplication(sys.argv)
    setup_qsettings()
    init_logging()

    # No network transport here; records are logged by the dry-run backend
    form = RegistrationForm(DryRunBackend())
    form.navigateRequested.connect(app.quit)
    form.show()

    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
