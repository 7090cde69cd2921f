"""
Configuration for data clients.

Settings are read from ``DATA_CLIENT_*`` environment variables or a ``.env``
file and can always be overridden by passing explicit values.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DataClientSettings(BaseSettings):
    """Connection and paging defaults shared by data clients."""

    model_config = SettingsConfigDict(
        env_prefix="DATA_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Transport
    base_url: str = Field(default="http://localhost:8080")
    api_prefix: str = Field(default="/api/v1/data")
    user_namespace: str = Field(default="users")
    timeout_seconds: float = Field(default=30.0, gt=0)
    verify_ssl: bool = Field(default=True)
    user_agent: str = Field(default="data-client/0.3.0")
    auth_token: Optional[str] = Field(default=None)

    # Paging
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    @field_validator("api_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        value = value.strip().strip("/")
        return f"/{value}" if value else ""

    @field_validator("user_namespace")
    @classmethod
    def _normalize_namespace(cls, value: str) -> str:
        value = value.strip().strip("/")
        if not value:
            raise ValueError("user_namespace must not be empty")
        return value

    @model_validator(mode="after")
    def _check_page_sizes(self) -> "DataClientSettings":
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size cannot exceed max_page_size")
        return self


@lru_cache()
def get_settings() -> DataClientSettings:
    """Get cached settings instance."""
    return DataClientSettings()


def reset_settings() -> None:
    """Clear the cached settings so the environment is read again."""
    get_settings.cache_clear()
