"""Application configuration using pydantic-settings."""
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database (SQLite through the aiosqlite async driver)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./bookmarks.db",
        validation_alias="DATABASE_URL",
    )

    # Static per-deployment API token. Empty means every API request is rejected.
    api_token: str = Field(default="", validation_alias="API_TOKEN")

    # Server bind address
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=3000, validation_alias="PORT")

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(default="*", validation_alias="CORS_ORIGINS")

    # Pagination - clients have been seen asking for limit=100000
    default_page_limit: int = Field(default=100, validation_alias="DEFAULT_PAGE_LIMIT")
    max_page_limit: int = Field(default=100_000, validation_alias="MAX_PAGE_LIMIT")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @model_validator(mode="after")
    def validate_page_limits(self) -> "Settings":
        """Keep the default page size within the configured cap."""
        if self.max_page_limit < 1:
            raise ValueError("MAX_PAGE_LIMIT must be at least 1")
        if not 1 <= self.default_page_limit <= self.max_page_limit:
            raise ValueError(
                f"DEFAULT_PAGE_LIMIT must be between 1 and MAX_PAGE_LIMIT "
                f"({self.max_page_limit:,}), got {self.default_page_limit:,}.",
            )
        return self

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def is_sqlite(self) -> bool:
        """True when the configured database is SQLite."""
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
