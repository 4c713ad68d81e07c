"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "postgresql+asyncpg://localhost/shoppinglist"

    # Redis (Celery broker)
    redis_url: str = "redis://localhost:6379/0"

    # OpenAI price enrichment
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    ai_request_timeout: float = 30.0
    ai_max_retries: int = 3
    ai_cost_per_token: float = 0.00003

    # Backups
    backup_dir: str = "backups"
    backup_hour: int = 3  # Hour of day for the nightly export
    backup_keep: int = 14  # Number of nightly exports to retain

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000,http://localhost:8000"

    @property
    def sync_database_url(self) -> str:
        """Database URL for the synchronous engine used by batch jobs."""
        url = self.database_url.replace("+asyncpg", "+psycopg2")
        if url.startswith("postgresql://"):
            url = "postgresql+psycopg2://" + url.removeprefix("postgresql://")
        return url

    @property
    def origins(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
