"""Library configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fb_messenger.constants import (
    DEFAULT_API_VERSION,
    FACEBOOK_API_TIMEOUT_SECONDS,
    FACEBOOK_GRAPH_URL,
)


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # Load .env first, then .env.local (for local/test overrides)
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Facebook Configuration
    facebook_page_access_token: str | None = Field(
        default=None, description="Facebook Page access token"
    )
    facebook_verify_token: str | None = Field(
        default=None, description="Webhook verification token"
    )
    facebook_api_version: str = Field(
        default=DEFAULT_API_VERSION,
        description="Graph API version, with or without the leading 'v'",
    )
    facebook_graph_url: str = Field(
        default=FACEBOOK_GRAPH_URL, description="Graph API base URL"
    )
    facebook_api_timeout_seconds: float = Field(
        default=FACEBOOK_API_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout for Facebook Graph API calls (seconds)",
    )

    # Environment
    env: Literal["local", "railway", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(default="INFO", description="Python logging level")

    # Logfire Configuration
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token for cloud logging"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
