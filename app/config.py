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
        description="SQLAlchemy URL of the store backing users and notifications",
        min_length=1,
    )
    public_url: str = Field(
        default="http://localhost:3000",
        description="Public URL of the dashboard, used for CORS and notification links",
    )
    anon_key: str = Field(
        description="Public API key that grants the unprivileged client",
        min_length=1,
    )
    service_role_key: str | None = Field(
        default=None,
        description="Privileged API key; when absent every privileged operation is unavailable",
    )
    jwt_secret: str = Field(
        description="Secret used to sign session tokens", min_length=1
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before session tokens expire",
        gt=0,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used when exposing store timestamps",
    )
    notification_fetch_limit: int = Field(
        default=10,
        description="How many recent notifications a realtime session loads on start",
        gt=0,
    )
    user_list_page_size: int = Field(
        default=1000,
        description="Page size used when walking the user directory",
        gt=0,
    )

    @model_validator(mode="after")
    def _validate_keys(self) -> "Settings":
        if self.service_role_key is not None and not self.service_role_key.strip():
            self.service_role_key = None
        if self.service_role_key and self.service_role_key == self.anon_key:
            raise ValueError("SERVICE_ROLE_KEY must differ from ANON_KEY")
        return self

    @property
    def privileged_enabled(self) -> bool:
        """Return ``True`` when a service role key has been configured."""

        return bool(self.service_role_key)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
