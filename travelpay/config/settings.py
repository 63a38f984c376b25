"""
Configuration settings for travelpay
Handles environment variables and application settings
"""
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields from .env file
    )

    # Application
    APP_NAME: str = "travelpay"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    APP_URL: str = "http://localhost:5000"

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:5000",
        "http://localhost:5173",
    ]

    # Stripe (cards + international wallets)
    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_PUBLISHABLE_KEY: Optional[str] = None
    STRIPE_WEBHOOK_SECRET: Optional[str] = None

    # Razer Merchant Services (Malaysian banking, e-wallets and QR)
    RAZER_MERCHANT_ID: Optional[str] = None
    RAZER_VERIFY_KEY: Optional[str] = None
    RAZER_SECRET_KEY: Optional[str] = None
    RAZER_SANDBOX: bool = True
    RAZER_SIGNATURE_ALGORITHM: str = "md5"

    # Outbound gateway calls
    GATEWAY_TIMEOUT_SECONDS: float = 8.0

    # Idempotency ledger
    IDEMPOTENCY_BACKEND: Literal["memory", "redis"] = "memory"
    REDIS_URL: str = "redis://localhost:6379"
    IDEMPOTENCY_TTL_SECONDS: Optional[int] = None

    # Booking bounds
    MAX_TRAVELERS: int = 8
    MAX_NIGHTS: int = 30

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("RAZER_SIGNATURE_ALGORITHM")
    @classmethod
    def check_signature_algorithm(cls, v: str) -> str:
        import hashlib

        v = v.lower()
        if v not in hashlib.algorithms_available:
            raise ValueError(f"Unsupported signature algorithm: {v}")
        return v

    @property
    def stripe_configured(self) -> bool:
        return bool(self.STRIPE_SECRET_KEY and self.STRIPE_PUBLISHABLE_KEY)

    @property
    def razer_configured(self) -> bool:
        return bool(self.RAZER_MERCHANT_ID and self.RAZER_VERIFY_KEY)


@lru_cache
def get_settings() -> Settings:
    return Settings()


# Create settings instance
settings = get_settings()


# Environment-specific overrides
if settings.ENVIRONMENT == "development":
    settings.DEBUG = True


def validate_settings():
    """Validate critical settings"""
    issues = []

    if settings.ENVIRONMENT == "production":
        if not (settings.stripe_configured or settings.razer_configured):
            issues.append("at least one payment gateway must be configured in production")
        if settings.RAZER_SANDBOX and settings.razer_configured:
            issues.append("RAZER_SANDBOX must be false in production")

    if issues:
        raise ValueError(f"Configuration issues: {', '.join(issues)}")
