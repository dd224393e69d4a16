"""Application configuration using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Scraping settings
    scrape_timeout: int = 30  # seconds, per HTTP request
    adapter_timeout: int = 60  # seconds, per theater including detail pages
    horizon_days: int = 14
    max_detail_pages: int = 10
    detail_concurrency: int = 5
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
    )

    # API settings
    showtimes_cache_seconds: int = 3600
    notify_secret: str = ""
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"


# Global settings instance
settings = Settings()
