"""
Environment configuration for the hostel ledger.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    # Application configuration
    APP_NAME: str = Field(default="Hostel Ledger", alias="PROJECT_NAME")
    VERSION: str = Field(default="0.1.0", alias="PROJECT_VERSION")
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: List[str] = Field(default=["*"], alias="BACKEND_CORS_ORIGINS")

    # Database configuration - support both individual fields and DATABASE_URL
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "hostel_ledger"
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False

    # Cache configuration
    CACHE_BACKEND: str = "memory"
    REDIS_URL: str = "redis://localhost:6379/0"
    SUMMARY_CACHE_TTL_SECONDS: int = 10

    # Billing and subscriptions
    DEFAULT_CURRENCY: str = Field(default="UGX", alias="CURRENCY")
    SUBSCRIPTION_PROVISIONAL_DAYS: int = 30
    SUBSCRIPTION_WARNING_DAYS: int = 30
    SEED_DEFAULT_PLANS: bool = True

    # Email configuration
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT: int = 10
    EMAIL_FROM_ADDRESS: str = Field(default="noreply@hostel.local", alias="FROM_EMAIL")
    EMAIL_FROM_NAME: str = "Hostel Ledger"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "colored"
    LOG_FILE: Optional[str] = None

    @field_validator("CACHE_BACKEND")
    @classmethod
    def validate_cache_backend(cls, v: str) -> str:
        """Only in-process and redis caches are supported"""
        v = v.lower()
        if v not in {"memory", "redis"}:
            raise ValueError("CACHE_BACKEND must be 'memory' or 'redis'")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid LOG_LEVEL: {v}")
        return v

    @field_validator("DEFAULT_CURRENCY")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) != 3:
            raise ValueError("Currency must be a 3-letter ISO code")
        return v

    @field_validator("SUMMARY_CACHE_TTL_SECONDS", "SUBSCRIPTION_PROVISIONAL_DAYS", "SUBSCRIPTION_WARNING_DAYS")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    def get_database_url(self) -> str:
        """Get database URL, constructing from individual fields if needed"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    @property
    def email_enabled(self) -> bool:
        return bool(self.SMTP_HOST)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
