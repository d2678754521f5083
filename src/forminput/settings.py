"""Runtime settings loaded from `.env` and environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from forminput.exceptions import SettingsError

DEFAULT_SIZE_LIMIT = 255
DEFAULT_MIN_KEY = 0
DEFAULT_MAX_KEY = (1 << 64) - 1


class Settings(BaseSettings):
    """Package settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    project_name: str = "forminput"
    app_env: str = Field(
        default="dev",
        validation_alias="APP_ENV",
        description="Application environment, e.g. 'dev', 'prod'.",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level, e.g. 'INFO', 'DEBUG'.",
    )
    log_json: bool = Field(
        default=True,
        validation_alias="LOG_JSON",
        description="Enable JSON formatted logs.",
    )
    log_file: str | None = Field(
        default=None,
        validation_alias="LOG_FILE",
        description="File path for log output.",
    )

    default_size_limit: int = Field(
        default=DEFAULT_SIZE_LIMIT,
        gt=0,
        validation_alias="FORM_DEFAULT_SIZE_LIMIT",
        description="Character and byte limit applied to fields without explicit size.",
    )
    default_min_key: int = Field(
        default=DEFAULT_MIN_KEY,
        validation_alias="FORM_DEFAULT_MIN_KEY",
        description="Smallest integer key accepted by hash fields by default.",
    )
    default_max_key: int = Field(
        default=DEFAULT_MAX_KEY,
        validation_alias="FORM_DEFAULT_MAX_KEY",
        description="Largest integer key accepted by hash fields by default.",
    )

    @model_validator(mode="after")
    def _validate_key_bounds(self) -> Settings:
        """Ensure the default hash key range is not empty.

        Raises:
            ValueError: If the minimum key exceeds the maximum key.

        Returns:
            Settings: Validated settings.
        """
        if self.default_min_key > self.default_max_key:
            raise ValueError("FORM_DEFAULT_MIN_KEY must not exceed FORM_DEFAULT_MAX_KEY")  # noqa: TRY003
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance.

    Raises:
        SettingsError: If settings cannot be loaded or validated.

    Returns:
        Settings: The loaded settings instance.
    """
    try:
        return Settings()
    except Exception as exc:
        raise SettingsError(exc=exc) from exc
