from decimal import Decimal
from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production", "test"] = "local"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "Africa/Lagos"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./unit_wallets.db"
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800
    # Seconds a SQLite writer waits on the database lock before failing
    SQLITE_BUSY_TIMEOUT: int = 30

    # Auth
    # Default placeholder keeps local/test runs from failing when no secret
    # is configured. Real deployments must override via env.
    JWT_SECRET: str = "test-jwt-secret"
    JWT_ALGORITHM: str = "HS256"

    # Microservices URLs
    MEMBERS_SERVICE_URL: str = "http://members-service:8001"

    # VPay (payment rail feeding unit wallets)
    VPAY_WEBHOOK_SECRET: str = "test-vpay-webhook-secret"
    VPAY_FEE_RATE: Decimal = Decimal("0.015")
    PLATFORM_COMMISSION_RATE: Decimal = Decimal("0.005")

    # Unit wallets
    WALLET_RECENT_ACTIVITY_LIMIT: int = 20

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
            if v.startswith("sqlite://"):
                return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
