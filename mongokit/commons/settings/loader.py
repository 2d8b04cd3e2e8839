"""Settings loading from appsettings files, validated before first use."""

import json
import os
from pathlib import Path
from typing import Any

from mongokit.commons.infrastructure.documentdb.client import get_database_name
from mongokit.commons.settings.models import Settings
from mongokit.commons.telemetry.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_DIR = Path("config")
ENVIRONMENT_VARIABLE = "MONGOKIT__APP__ENVIRONMENT"


def merge_config(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively overlay ``override`` on ``base`` without mutating either."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def read_config_files(config_dir: Path, environment: str) -> dict[str, Any]:
    """Read ``appsettings.json`` overlaid with ``appsettings.{environment}.json``.

    Missing files are skipped.
    """
    config: dict[str, Any] = {}
    for filename in ("appsettings.json", f"appsettings.{environment}.json"):
        path = config_dir / filename
        if not path.exists():
            continue
        with path.open(encoding="utf-8") as f:
            config = merge_config(config, json.load(f))
        logger.debug("Loaded config file", extra={"path": str(path)})
    return config


def load_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
) -> Settings:
    """Load settings and check the connection URI.

    Precedence (highest to lowest): ``MONGOKIT__`` environment variables,
    ``appsettings.{environment}.json``, ``appsettings.json``, defaults.

    Args:
        config_dir: Directory holding the appsettings files.
            Defaults to ``config`` in the working directory.
        environment: Environment name selecting the overlay file.
            Defaults to ``MONGOKIT__APP__ENVIRONMENT`` or ``dev``.

    Returns:
        Validated settings.

    Raises:
        ConfigurationException: If the document database URI is invalid.
        DatabaseNameNotFoundException: If the URI names no database.
    """
    environment = environment or os.getenv(ENVIRONMENT_VARIABLE, "dev")
    file_config = read_config_files(config_dir or DEFAULT_CONFIG_DIR, environment)

    settings = Settings(**file_config)
    get_database_name(settings.document_db.uri)

    return settings


class _SettingsHolder:
    """Holder for the settings singleton to avoid global statements."""

    instance: Settings | None = None


def get_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    *,
    reload: bool = False,
) -> Settings:
    """Get or load the process-wide settings.

    Args:
        config_dir: Optional config directory override.
        environment: Optional environment override.
        reload: Load again even if settings are cached.
    """
    if _SettingsHolder.instance is None or reload:
        _SettingsHolder.instance = load_settings(config_dir, environment)
    return _SettingsHolder.instance


def reset_settings() -> None:
    """Forget the cached settings (for testing)."""
    _SettingsHolder.instance = None
