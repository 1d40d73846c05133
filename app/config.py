"""
Load settings from the environment / .env. Never log or expose secret values.
BRAVE_API_KEY has no default: start-up fails if it is missing.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tools.brave_search import BRAVE_API_BASE_URL, DEFAULT_TIMEOUT_SEC
from tools.rate_limit import DEFAULT_PER_MONTH, DEFAULT_PER_SECOND


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Brave Search
    brave_api_key: str = Field(min_length=1, description="Brave Search API subscription token")
    brave_api_base_url: str = Field(default=BRAVE_API_BASE_URL, description="Brave Search API base URL")
    request_timeout: float = Field(default=DEFAULT_TIMEOUT_SEC, gt=0, description="Upstream request timeout (s)")

    # Rate limiter
    rate_limit_per_second: int = Field(default=DEFAULT_PER_SECOND, ge=1, description="Upstream calls per second")
    rate_limit_per_month: int = Field(default=DEFAULT_PER_MONTH, ge=1, description="Upstream calls per month")

    # HTTP transports
    api_host: str = Field(default="0.0.0.0", description="HTTP bind host")
    session_idle_timeout: Optional[float] = Field(
        default=None, gt=0, description="Terminate /mcp sessions idle for this many seconds"
    )
    json_response: bool = Field(default=False, description="Answer /mcp requests with JSON instead of SSE")

    # App
    log_level: str = Field(default="INFO", description="Log level")


@lru_cache
def get_settings() -> Settings:
    return Settings()
