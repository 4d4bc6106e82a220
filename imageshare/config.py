"""Configuration management for the application."""

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    The instance is frozen: it is read once at startup and handed to the
    services that need it.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True
    )

    # Database
    database_url: str = Field(default="sqlite:///./imageshare.db")

    # JWT
    jwt_secret: str
    jwt_algorithm: str = Field(default="HS256")
    jwt_expiration_minutes: int = Field(default=60, gt=0)

    # Password hashing
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    # Uploads
    upload_dir: str = Field(default="uploads")
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, gt=0)

    # Server
    host: str = Field(default="0.0.0.0")  # noqa: S104
    port: int = Field(default=3000)
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, value: str) -> str:
        """Refuse to start without a usable signing secret."""
        if not value.strip():
            raise ValueError("JWT_SECRET must not be empty")
        return value

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production has secure settings."""
        if self.environment == "production" and "localhost" in self.database_url:
            raise ValueError("DATABASE_URL should not use localhost in production")
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
