"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from `CONTACT_BINDING_*` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CONTACT_BINDING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Global search behaviour
    search_debounce_ms: int = Field(default=250, ge=0)
    search_min_query_length: int = Field(default=1, ge=1)
    search_cancel_in_flight: bool = Field(default=True)

    # Global search endpoint
    search_api_url: str = Field(default="http://localhost:3000")
    search_path: str = Field(default="/api/clients/search")
    search_timeout_seconds: float = Field(default=10.0, gt=0)
    search_result_limit: int = Field(default=20, ge=1)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_format: Literal["json", "text"] = Field(default="json")

    @property
    def search_debounce_seconds(self) -> float:
        return self.search_debounce_ms / 1000.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
