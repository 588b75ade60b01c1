"""
Configuration for the registration GUI.

This module provides application identifiers, defaults, and access to the
organization selected on the previous screen, which is stored in QSettings.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema
from PySide6.QtCore import QCoreApplication, QSettings, QStandardPaths

from .errors import ConfigError, ErrorCode

logger = logging.getLogger(__name__)

# Application identifiers for QSettings
APP_ORGANIZATION = "RegistroClientes"
APP_NAME = "RegistrationGUI"

# Settings key written by the organization selection screen
ORGANIZATION_SETTINGS_KEY = "orgSeleccionada"

DEFAULT_CONFIG: dict[str, Any] = {
    "debounce_ms": 200,  # Delay before completeness is re-checked after typing
    "log_level": "INFO",  # Options: "DEBUG", "INFO", "WARNING", "ERROR"
    "redirect_delay_ms": 1500,  # Pause after a successful registration
}

# JSON Schema for the stored organization (draft-07)
ORGANIZATION_JSON_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Selected organization",
    "type": "object",
    "properties": {
        "nombre": {"type": "string", "description": "Organization display name"},
    },
}


def setup_qsettings() -> None:
    """
    Configure QSettings with application identifiers.

    This should be called early in application startup to ensure
    QSettings uses the correct organization and application names.
    """
    QCoreApplication.setOrganizationName(APP_ORGANIZATION)
    QCoreApplication.setApplicationName(APP_NAME)


def get_app_data_dir() -> Path:
    """
    Get the writable application data directory.

    Returns:
        Path to the app data directory, falling back to the config location
    """
    app_data_location = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppDataLocation)
    if app_data_location:
        return Path(app_data_location)

    config_location = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.ConfigLocation)
    return Path(config_location) / APP_ORGANIZATION / APP_NAME


def get_logs_dir() -> Path:
    """Get the directory where log files are written."""
    return get_app_data_dir() / "logs"


def load_selected_organization(settings: QSettings | None = None) -> str:
    """
    Read the name of the organization chosen before registration.

    Args:
        settings: QSettings to read from (defaults to the application settings)

    Returns:
        The trimmed organization name, or an empty string if none is stored

    Raises:
        ConfigError: If the stored value is not valid JSON or not an organization object
    """
    settings = settings if settings is not None else QSettings()
    raw = settings.value(ORGANIZATION_SETTINGS_KEY, "")
    if isinstance(raw, list):
        # INI-backed settings split unquoted values on commas
        raw = ",".join(raw)
    if not raw:
        return ""

    try:
        data = json.loads(str(raw))
    except json.JSONDecodeError as e:
        raise ConfigError(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            user_message="The selected organization could not be read",
            technical_message=f"Invalid JSON under '{ORGANIZATION_SETTINGS_KEY}': {e}",
        ) from e

    try:
        jsonschema.validate(data, ORGANIZATION_JSON_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ConfigError(
            code=ErrorCode.CONFIG_INVALID,
            user_message="The selected organization is invalid",
            technical_message=f"Organization validation failed: {e.message}",
        ) from e

    name = str(data.get("nombre") or "").strip()
    logger.debug(f"Loaded selected organization '{name}'")
    return name
