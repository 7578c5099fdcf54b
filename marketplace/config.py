"""
Configuration management using Pydantic settings.
Handles database URL, JWT secrets, uploads and environment variables.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import make_url
from typing import Optional, List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application configuration
    app_name: str = "Property Marketplace API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False

    # Database configuration
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/property_marketplace"
    database_echo: bool = False

    # JWT configuration
    jwt_secret_key: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 7 * 24 * 60  # 7 days

    # File upload configuration
    upload_dir: str = "./uploads"
    uploads_url_path: str = "/uploads"
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    max_files_per_upload: int = 10
    allowed_file_types: List[str] = ["image/jpeg", "image/png", "image/webp"]

    # Base URL used to make stored image paths absolute. Falls back to the
    # request's own base URL when unset.
    public_base_url: Optional[str] = None

    # API configuration
    api_prefix: str = "/api"
    cors_origins: List[str] = ["http://localhost:3000"]

    # Pagination defaults
    default_page_size: int = 10
    max_page_size: int = 100

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 5000

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure an async driver is used."""
        if not v:
            raise ValueError("DATABASE_URL is required")
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret_key(cls, v):
        """Validate JWT secret key strength."""
        if not v:
            raise ValueError("JWT_SECRET_KEY is required")
        if len(v) < 32 and v != "your-secret-key-change-in-production":
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "testing", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @field_validator("public_base_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        if v:
            return v.rstrip("/")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def is_sqlite_memory(self) -> bool:
        """In-memory SQLite: no database path, ``:memory:`` or ``mode=memory``."""
        if not self.is_sqlite:
            return False
        database = make_url(self.database_url).database
        return not database or database == ":memory:" or "mode=memory" in self.database_url

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Used by the application factory when no settings are passed explicitly.
    """
    return Settings()
