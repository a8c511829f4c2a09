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

    # Smart merge collaborator (optional, disabled when the URL is empty)
    smart_merge_url: str = ""
    smart_merge_api_key: str = ""
    smart_merge_timeout: float = 30.0  # request timeout in seconds
    smart_merge_max_retries: int = 2

    # Staples a new pantry starts with
    default_pantry_items: list[str] = ["salt", "pepper", "water"]

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000,http://localhost:8000"

    @property
    def smart_merge_enabled(self) -> bool:
        """Check if a smart merge endpoint is configured."""
        return bool(self.smart_merge_url)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
