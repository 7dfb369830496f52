"""
Application configuration management
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Meetly"
    APP_VERSION: str = "1.0.0"
    APP_ENV: str = "development"
    DEBUG: bool = False  # Default to production-safe
    API_PREFIX: str = "/api/v1"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 9186

    # Database
    DATABASE_URL: str  # Must be provided via environment

    @field_validator('DATABASE_URL')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if v.startswith('postgresql://'):
            v = v.replace('postgresql://', 'postgresql+asyncpg://', 1)
        elif v.startswith('sqlite://') and not v.startswith('sqlite+aiosqlite://'):
            v = v.replace('sqlite://', 'sqlite+aiosqlite://', 1)
        return v
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 40
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_ECHO: bool = False

    # JWT
    JWT_SECRET_KEY: str  # Must be provided via environment
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    @field_validator('JWT_SECRET_KEY')
    @classmethod
    def validate_jwt_secret_key(cls, v: str) -> str:
        if not v or v == "your-secret-key-change-this-in-production":
            raise ValueError("JWT_SECRET_KEY must be set to a secure value")
        if len(v) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long")
        return v

    # Notifications
    NOTIFICATION_BACKEND: str = "log"  # "sendgrid" or "log"
    SENDGRID_API_KEY: str = ""
    FROM_EMAIL: str = "no-reply@meetly.app"
    FROM_NAME: str = "Meetly"

    @field_validator('NOTIFICATION_BACKEND')
    @classmethod
    def validate_notification_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in ("sendgrid", "log"):
            raise ValueError("NOTIFICATION_BACKEND must be 'sendgrid' or 'log'")
        return v

    # Requests
    REQUEST_TIMEOUT_SECONDS: float = 10.0
    MEETUPS_DEFAULT_LIMIT: Optional[int] = None

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Monitoring
    PROMETHEUS_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    # Seeding
    SEED_ON_STARTUP: bool = False

    @field_validator("CORS_ORIGINS", mode="before")
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @property
    def is_testing(self) -> bool:
        return self.APP_ENV == "testing"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


# Create global settings instance
settings = Settings()
