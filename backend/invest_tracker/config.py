"""Application configuration using Pydantic settings."""

from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Invest Tracker"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # Tokens live for a week

    # Price sources
    PRICE_SOURCE_TIMEOUT_SECONDS: float = 10.0
    DCDS_NAV_URL: str = "https://www.dragoncapital.com.vn/individual/vi/webruntime/api/apex/execute"
    GOLD_PRICE_URL: str = "https://api.vnappmob.com/api/v2/gold/sjc"
    GOLD_PRICE_API_KEY: Optional[str] = None  # Bearer token for the gold price API
    USD_RATE_URL: str = "https://www.vietcombank.com.vn/api/exchangerates"

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Monitoring
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # 'text' or 'json' (json for production)
    ENVIRONMENT: str = "development"  # development, staging, production

    # Prometheus Metrics
    METRICS_ENABLED: bool = True
    METRICS_ADMIN_PORT: int = 9090
    METRICS_USERNAME: str = "admin"
    METRICS_PASSWORD: str = "metrics_admin"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Validate SECRET_KEY is not using insecure defaults in production."""
        insecure_defaults = [
            "dev-secret-key-change-in-production",
            "your-secret-key-here",
            "change-me",
            "secret",
        ]

        # Read ENVIRONMENT directly, Settings is not fully initialized yet
        import os

        environment = os.getenv("ENVIRONMENT", "development")

        if environment == "production" and (v in insecure_defaults or len(v) < 32):
            raise ValueError(
                "Insecure SECRET_KEY detected in production! "
                "Generate a secure key with: openssl rand -hex 32"
            )

        return v

    @field_validator("METRICS_PASSWORD")
    @classmethod
    def validate_metrics_password(cls, v: str) -> str:
        """Refuse the development metrics password in production."""
        import os

        if os.getenv("ENVIRONMENT", "development") == "production" and v == "metrics_admin":
            raise ValueError("METRICS_PASSWORD must be overridden in production")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
