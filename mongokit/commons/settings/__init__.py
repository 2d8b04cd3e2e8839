"""Settings management module."""

from mongokit.commons.settings.loader import (
    get_settings,
    load_settings,
    reset_settings,
)
from mongokit.commons.settings.models import (
    AppSettings,
    DocumentDBSettings,
    Settings,
    TelemetrySettings,
)

__all__ = [
    # Loader
    "get_settings",
    "load_settings",
    "reset_settings",
    # Models
    "Settings",
    "AppSettings",
    "DocumentDBSettings",
    "TelemetrySettings",
]
