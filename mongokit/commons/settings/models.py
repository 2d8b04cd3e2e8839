"""Pydantic settings models for application configuration."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "mongokit"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class DocumentDBSettings(BaseModel):
    """Document database settings (MongoDB).

    The database name, read/write concerns and read preference all come
    from the connection URI.
    """

    uri: str = "mongodb://localhost:27017/app"
    ping: bool = False
    timeout_seconds: float = Field(default=5.0, gt=0)


class TelemetrySettings(BaseModel):
    """Logging settings."""

    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"


class Settings(BaseSettings):
    """Root settings container with environment loading.

    ``MONGOKIT__`` environment variables (``MONGOKIT__DOCUMENT_DB__URI``)
    override constructor values, so file-based configuration passed in by
    the loader stays overridable per deployment.
    """

    app: AppSettings = Field(default_factory=AppSettings)
    document_db: DocumentDBSettings = Field(default_factory=DocumentDBSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MONGOKIT__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            env_settings,
            dotenv_settings,
            init_settings,
            file_secret_settings,
        )
