"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - cms_url is server-side only; public_cms_url is the only base URL
      that may be exposed to browsers

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://sitefeed:sitefeed@db:5432/sitefeed"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # CMS — server-side base URL (build step, this service)
    cms_url: str = "http://localhost:1337"
    # CMS — client-exposed base URL (browser-side media/asset links)
    public_cms_url: str = "http://localhost:1337"

    @field_validator("cms_url", "public_cms_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    cms_api_token: str | None = None
    cms_timeout_seconds: float = 10.0
    cms_max_retries: int = 2
    cms_base_delay_ms: int = 250
    cms_max_delay_ms: int = 4_000
    cms_page_size: int = 100

    # Webhook / build trigger
    webhook_secret: str = ""
    build_hook_url: str | None = None
    build_hook_timeout_seconds: float = 10.0
    build_debounce_seconds: int = 30
    build_trigger_events: list[str] = ["entry.publish", "entry.unpublish"]

    # API
    cors_origins: list[str] = ["http://localhost:4321"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
