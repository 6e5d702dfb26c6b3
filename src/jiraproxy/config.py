# Settings: environment-driven configuration for the proxy.
# Created: 2026-10-14
#
# Variable names match the ones the board front-end deployment already uses
# (JIRA_BASE_URL, JIRA_EMAIL, JIRA_API_TOKEN), so no prefix is applied.

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Proxy configuration.

    Values come from the process environment first, then from a ``.env`` file
    in the working directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Service-mode credentials, used when the caller has no OAuth cookies
    jira_base_url: str = Field(
        default="https://your-domain.atlassian.net",
        description="Jira site URL for Basic-auth requests.",
    )
    jira_email: str = Field(default="", description="Account email for Basic auth.")
    jira_api_token: str = Field(default="", description="API token for Basic auth.")

    jira_cloud_api_url: str = Field(
        default="https://api.atlassian.com/ex/jira",
        description="Gateway prefix for OAuth (3LO) requests; the cloud id is appended.",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for each upstream request (seconds).",
    )

    api_cors_allowed_origins: list[str] = Field(default_factory=list)
    web_host: str = "127.0.0.1"
    web_port: int = Field(default=8888, ge=1, le=65535)
    log_level: str = "INFO"

    @property
    def has_basic_auth(self) -> bool:
        return bool(self.jira_email and self.jira_api_token)

    @classmethod
    def load(cls) -> Settings:
        """Build a fresh settings instance from the current environment."""
        return cls()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings (loaded once)."""
    return Settings.load()
