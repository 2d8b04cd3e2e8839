"""Unit tests for settings models and loader."""

import json
from pathlib import Path

import pytest

from mongokit.commons.settings.loader import (
    get_settings,
    load_settings,
    merge_config,
    reset_settings,
)
from mongokit.commons.settings.models import (
    AppSettings,
    DocumentDBSettings,
    Settings,
    TelemetrySettings,
)
from mongokit.domain.exceptions import (
    ConfigurationException,
    DatabaseNameNotFoundException,
)


class TestAppSettings:
    """Tests for AppSettings model."""

    def test_default_values(self):
        settings = AppSettings()
        assert settings.name == "mongokit"
        assert settings.environment == "dev"
        assert settings.debug is False
        assert settings.log_level == "INFO"

    def test_invalid_environment(self):
        with pytest.raises(ValueError):
            AppSettings(environment="invalid")  # type: ignore[arg-type]

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            AppSettings(log_level="TRACE")  # type: ignore[arg-type]


class TestDocumentDBSettings:
    """Tests for DocumentDBSettings model."""

    def test_default_values(self):
        settings = DocumentDBSettings()
        assert settings.uri == "mongodb://localhost:27017/app"
        assert settings.ping is False
        assert settings.timeout_seconds == 5.0

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError):
            DocumentDBSettings(timeout_seconds=0)


class TestRootSettings:
    """Tests for root Settings model."""

    def test_default_values(self):
        settings = Settings()
        assert isinstance(settings.app, AppSettings)
        assert isinstance(settings.document_db, DocumentDBSettings)
        assert isinstance(settings.telemetry, TelemetrySettings)
        assert settings.telemetry.log_format == "json"

    def test_env_vars_override_constructor_values(self, monkeypatch):
        monkeypatch.setenv("MONGOKIT__DOCUMENT_DB__PING", "true")

        settings = Settings(
            document_db={"uri": "mongodb://db:27017/orders", "ping": False}
        )

        assert settings.document_db.ping is True
        assert settings.document_db.uri == "mongodb://db:27017/orders"


def _write_json(path: Path, data: dict) -> None:
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f)


class TestLoadSettings:
    """Tests for load_settings."""

    def test_load_empty_config(self, tmp_path):
        settings = load_settings(config_dir=tmp_path, environment="dev")
        assert settings.app.name == "mongokit"
        assert settings.document_db.uri == "mongodb://localhost:27017/app"

    def test_environment_file_overrides_base(self, tmp_path):
        _write_json(
            tmp_path / "appsettings.json",
            {
                "app": {"name": "orders"},
                "document_db": {"uri": "mongodb://db:27017/orders"},
            },
        )
        _write_json(
            tmp_path / "appsettings.prod.json",
            {"document_db": {"ping": True, "timeout_seconds": 2.5}},
        )

        settings = load_settings(config_dir=tmp_path, environment="prod")

        assert settings.app.name == "orders"
        assert settings.document_db.uri == "mongodb://db:27017/orders"
        assert settings.document_db.ping is True
        assert settings.document_db.timeout_seconds == 2.5

    def test_env_vars_take_precedence_over_files(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MONGOKIT__DOCUMENT_DB__TIMEOUT_SECONDS", "1.5")
        _write_json(
            tmp_path / "appsettings.json",
            {"document_db": {"uri": "mongodb://db/orders", "timeout_seconds": 9}},
        )

        settings = load_settings(config_dir=tmp_path, environment="dev")

        assert settings.document_db.timeout_seconds == 1.5
        assert settings.document_db.uri == "mongodb://db/orders"

    def test_environment_from_env_var(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MONGOKIT__APP__ENVIRONMENT", "staging")
        _write_json(tmp_path / "appsettings.staging.json", {"app": {"debug": True}})

        settings = load_settings(config_dir=tmp_path)

        assert settings.app.debug is True
        assert settings.app.environment == "staging"

    def test_invalid_uri_fails_at_load(self, tmp_path):
        _write_json(
            tmp_path / "appsettings.json",
            {"document_db": {"uri": "postgres://db/orders"}},
        )

        with pytest.raises(ConfigurationException):
            load_settings(config_dir=tmp_path, environment="dev")

    def test_uri_without_database_fails_at_load(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MONGOKIT__DOCUMENT_DB__URI", "mongodb://db:27017/")

        with pytest.raises(DatabaseNameNotFoundException):
            load_settings(config_dir=tmp_path, environment="dev")

    def test_merge_config(self):
        base = {"a": {"b": 1, "c": 2}, "d": 3}
        override = {"a": {"b": 10, "e": 4}, "f": 5}

        result = merge_config(base, override)

        assert result == {"a": {"b": 10, "c": 2, "e": 4}, "d": 3, "f": 5}
        assert base == {"a": {"b": 1, "c": 2}, "d": 3}


class TestGetSettings:
    """Tests for get_settings function."""

    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()

    def test_get_settings_cached(self, tmp_path):
        settings1 = get_settings(config_dir=tmp_path)
        settings2 = get_settings(config_dir=tmp_path)
        assert settings1 is settings2

    def test_get_settings_reload(self, tmp_path):
        settings1 = get_settings(config_dir=tmp_path)
        settings2 = get_settings(config_dir=tmp_path, reload=True)
        assert settings1 is not settings2
