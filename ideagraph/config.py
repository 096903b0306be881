"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CrawlerSettings(BaseSettings):
    """Fetch and graph-expansion budgets."""

    model_config = SettingsConfigDict(
        env_prefix="CRAWLER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_depth: int = Field(default=10, description="Deepest level a node may be expanded from")
    max_nodes: int = Field(default=200, description="Max nodes materialized per crawl session")
    request_delay: float = Field(default=0.3, description="Delay between edge fetches in seconds")
    fetch_timeout: float = Field(default=35.0, description="Upper bound per page fetch in seconds")
    fetch_retries: int = Field(default=1, description="Retries for connection-level fetch errors")
    batch_delay_min: float = Field(default=2.0, description="Min delay between batch scrapes in seconds")
    batch_delay_max: float = Field(default=3.0, description="Max delay between batch scrapes in seconds")

    @field_validator("max_depth", "max_nodes")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("budget must be at least 1")
        return v


class ScrapeSettings(BaseSettings):
    """Scrape defaults applied by the driver."""

    model_config = SettingsConfigDict(
        env_prefix="SCRAPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_language: str = Field(default="de", description="Language used when none is given")
    recent_scrape_minutes: int = Field(
        default=60,
        description="Stored records scraped within this window are reused when skip_if_recent is set",
    )


class DatabaseSettings(BaseSettings):
    """Database settings."""

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: str = Field(default="sqlite+aiosqlite:///data/ideagraph.db", description="SQLAlchemy async URL")
    echo: bool = Field(default=False, description="Log SQL statements")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    @property
    def crawler(self) -> CrawlerSettings:
        return CrawlerSettings()

    @property
    def scrape(self) -> ScrapeSettings:
        return ScrapeSettings()

    @property
    def database(self) -> DatabaseSettings:
        return DatabaseSettings()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reload_settings() -> Settings:
    """Reload settings (clear cache and return new instance).

    Call this when .env file is updated to pick up new values.
    """
    get_settings.cache_clear()
    return get_settings()
