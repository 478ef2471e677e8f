"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key used to verify the JWT bearer tokens", min_length=1
    )
    jwt_algorithm: str = Field(
        default="HS256", description="Algorithm used to sign the bearer tokens"
    )
    directory_base_url: str | None = Field(
        default=None,
        description="Base URL of the user directory service that owns the user roster",
    )
    directory_timeout_seconds: float = Field(
        default=30.0,
        description="Upper bound for a single directory lookup during fan-out",
        gt=0,
    )
    upload_dir: str = Field(
        default="uploads",
        description="Local directory used when attachments cannot be sent to blob storage",
        min_length=1,
    )
    public_base_url: str = Field(
        default="",
        description="Public URL prefix used to build links to locally stored attachments",
    )
    azure_storage_connection_string: str | None = Field(
        default=None,
        description="Connection string for the Azure Blob Storage account holding attachments",
    )
    azure_storage_container_name: str | None = Field(
        default=None,
        description="Blob container where attachments are uploaded",
    )
    max_attachment_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum size accepted for a single attachment",
        gt=0,
    )
    max_attachments: int = Field(
        default=5, description="Maximum number of attachments per announcement", gt=0
    )
    app_timezone: str = Field(
        default="UTC", description="Timezone used for persisted timestamps"
    )
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma separated list of origins allowed by CORS",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    @model_validator(mode="after")
    def _validate_azure_pair(self) -> "Settings":
        if bool(self.azure_storage_connection_string) ^ bool(
            self.azure_storage_container_name
        ):
            raise ValueError(
                "AZURE_STORAGE_CONNECTION_STRING and AZURE_STORAGE_CONTAINER_NAME "
                "must both be provided to enable blob storage"
            )
        return self

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def blob_storage_enabled(self) -> bool:
        return bool(self.azure_storage_connection_string and self.azure_storage_container_name)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
