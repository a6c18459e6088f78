"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils import slugify


DEFAULT_STORAGE_NAMESPACE = "cineshelf"


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="CineShelf", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    metadata_api_url: HttpUrl = Field(
        default="https://api.imdbapi.dev", alias="METADATA_API_URL"
    )
    # Unset means requests are allowed to take as long as the remote needs.
    http_timeout_seconds: float | None = Field(
        default=None, alias="HTTP_TIMEOUT_SECONDS", gt=0
    )

    database_url: str = Field(
        default="sqlite:///./cineshelf.db", alias="DATABASE_URL"
    )
    storage_namespace: str = Field(
        default=DEFAULT_STORAGE_NAMESPACE, alias="STORAGE_NAMESPACE"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )
    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("storage_namespace", mode="before")
    @classmethod
    def _normalise_namespace(cls, value: object) -> str:
        """Storage keys are built from the namespace, so keep it slug-shaped."""

        if value is None:
            return DEFAULT_STORAGE_NAMESPACE
        slug = slugify(str(value))
        return slug or DEFAULT_STORAGE_NAMESPACE

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def metadata_base_url(self) -> str:
        """Return the metadata origin without a trailing slash."""

        return str(self.metadata_api_url).rstrip("/")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
