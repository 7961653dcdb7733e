"""Application Configuration using Pydantic Settings."""

import os
from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_env_file() -> str:
    """
    Determine which .env file to load based on APP_ENV.

    Returns:
        Path to the .env file to load
    """
    app_env = os.getenv("APP_ENV", "development")
    base_dir = Path(__file__).parent.parent.parent  # project root

    if app_env == "test":
        env_file = base_dir / ".env.test"
        if env_file.exists():
            return str(env_file)

    if app_env == "production":
        env_file = base_dir / ".env.production"
        if env_file.exists():
            return str(env_file)

    # Default to .env
    return str(base_dir / ".env")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=get_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Chirpy"
    APP_ENV: str = "development"
    DEBUG: bool = False
    PLATFORM: str = "prod"  # "dev" enables /admin/reset
    API_PREFIX: str = "/api"

    # Database
    DATABASE_URL: str

    # Security
    JWT_SECRET_KEY: str
    JWT_ISSUER: str = "chirpy"
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 3600
    ACCESS_TOKEN_MAX_EXPIRE_SECONDS: int = 3600
    REFRESH_TOKEN_EXPIRE_DAYS: int = 60
    REFRESH_TOKEN_ROTATE_ON_USE: bool = False
    BCRYPT_ROUNDS: int = 10

    # Webhooks (Polka payment provider)
    POLKA_KEY: str = ""

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RATE_LIMIT_AUTH_LOGIN: str = "5/minute"  # Login attempts (brute-force protection)
    RATE_LIMIT_AUTH_REFRESH: str = "10/minute"  # Token refresh

    # Error Tracking (Sentry)
    SENTRY_DSN: str = ""
    SENTRY_ENVIRONMENT: str = "development"
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    @field_validator("JWT_SECRET_KEY")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        """Reject blank signing secrets."""
        if not v or not v.strip():
            raise ValueError("JWT_SECRET_KEY cannot be empty")
        return v

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        """bcrypt accepts cost factors 4..31."""
        if not 4 <= v <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @model_validator(mode="after")
    def validate_token_lifetimes(self) -> "Settings":
        """
        Validate token lifetimes.

        Rules:
        1. All lifetimes are positive
        2. The default access-token TTL does not exceed the ceiling

        Raises:
            ValueError: If any rule is violated
        """
        if self.ACCESS_TOKEN_EXPIRE_SECONDS <= 0 or self.ACCESS_TOKEN_MAX_EXPIRE_SECONDS <= 0:
            raise ValueError("Access token lifetimes must be positive")
        if self.ACCESS_TOKEN_EXPIRE_SECONDS > self.ACCESS_TOKEN_MAX_EXPIRE_SECONDS:
            raise ValueError(
                "ACCESS_TOKEN_EXPIRE_SECONDS cannot exceed ACCESS_TOKEN_MAX_EXPIRE_SECONDS"
            )
        if self.REFRESH_TOKEN_EXPIRE_DAYS <= 0:
            raise ValueError("REFRESH_TOKEN_EXPIRE_DAYS must be positive")
        return self


class AuthConfig(BaseModel):
    """
    Immutable auth configuration handed to the session layer.

    Built once from Settings at startup; nothing in the auth core reads
    process-wide state after that.
    """

    model_config = ConfigDict(frozen=True)

    secret: str
    issuer: str = "chirpy"
    access_token_ttl: timedelta = timedelta(hours=1)
    access_token_max_ttl: timedelta = timedelta(hours=1)
    refresh_token_ttl: timedelta = timedelta(days=60)
    rotate_refresh_tokens: bool = False
    api_key: str = ""

    @field_validator("secret")
    @classmethod
    def validate_secret(cls, v: str) -> str:
        if not v:
            raise ValueError("secret cannot be empty")
        return v

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthConfig":
        return cls(
            secret=settings.JWT_SECRET_KEY,
            issuer=settings.JWT_ISSUER,
            access_token_ttl=timedelta(seconds=settings.ACCESS_TOKEN_EXPIRE_SECONDS),
            access_token_max_ttl=timedelta(seconds=settings.ACCESS_TOKEN_MAX_EXPIRE_SECONDS),
            refresh_token_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            rotate_refresh_tokens=settings.REFRESH_TOKEN_ROTATE_ON_USE,
            api_key=settings.POLKA_KEY,
        )

    def resolve_access_ttl(self, expires_in_seconds: int | None = None) -> timedelta:
        """
        Pick the access-token lifetime for a login request.

        A requested lifetime is honoured only when it is positive and within
        the configured ceiling; anything else falls back to the default.
        """
        if expires_in_seconds is None or expires_in_seconds <= 0:
            return self.access_token_ttl
        requested = timedelta(seconds=expires_in_seconds)
        if requested > self.access_token_max_ttl:
            return self.access_token_ttl
        return requested


# Create global settings instance
settings = Settings()  # type: ignore


@lru_cache
def get_auth_config() -> AuthConfig:
    """Return the process-wide AuthConfig built from settings."""
    return AuthConfig.from_settings(settings)
