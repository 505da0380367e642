"""
Application configuration using Pydantic Settings.
Loads environment variables and provides type-safe configuration.
"""

from typing import List, Optional
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the base directory
BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_JWT_SECRET = "development-secret-key-change-in-production"
DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://localhost:5173"]
DEFAULT_UPLOAD_EXTENSIONS = [".pdf", ".png", ".jpg", ".jpeg", ".csv", ".xlsx", ".txt"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    environment: str = Field(default="development", description="Current environment")
    debug: bool = Field(default=False, description="Debug mode")

    # API Configuration
    api_title: str = Field(default="ClaimFlow")
    api_version: str = Field(default="1.0.0")
    api_prefix: str = Field(default="/api/v1")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Stores. Without a URL the service falls back to SQLite and an
    # in-process key-value store, which is only accepted outside production.
    database_url: Optional[str] = Field(default=None, description="SQLAlchemy database URL")
    redis_url: Optional[str] = Field(default=None, description="Redis URL for cache, rate limits and revocations")
    database_echo: bool = Field(default=False)
    auto_create_tables: bool = Field(default=True)

    # JWT Configuration
    jwt_secret_key: str = Field(default=DEFAULT_JWT_SECRET, description="JWT secret key")
    jwt_algorithm: str = Field(default="HS256")
    jwt_access_token_expire_hours: int = Field(default=24)
    jwt_refresh_token_expire_days: int = Field(default=7)
    password_reset_expire_minutes: int = Field(default=10)
    bcrypt_rounds: int = Field(default=10)

    # CORS
    cors_origins: str | List[str] = Field(default=",".join(DEFAULT_CORS_ORIGINS))
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: List[str] = Field(default=["*"])
    cors_allow_headers: List[str] = Field(default=["*"])

    # Pagination
    default_page_size: int = Field(default=20)
    max_page_size: int = Field(default=100)

    # Cache
    cache_ttl_seconds: int = Field(default=300)
    ai_cache_ttl_seconds: int = Field(default=86400)

    # Rate Limiting
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_fail_open: bool = Field(default=True)
    trust_forwarded_for: bool = Field(default=True)
    rate_limit_api_requests: int = Field(default=100)
    rate_limit_api_window: int = Field(default=900)  # seconds
    rate_limit_auth_requests: int = Field(default=5)
    rate_limit_auth_window: int = Field(default=900)
    rate_limit_upload_requests: int = Field(default=20)
    rate_limit_upload_window: int = Field(default=3600)
    rate_limit_ai_requests: int = Field(default=20)
    rate_limit_ai_window: int = Field(default=3600)

    # Background jobs
    job_worker_enabled: bool = Field(default=True)
    job_poll_interval_seconds: float = Field(default=1.0)
    job_max_attempts: int = Field(default=3)
    job_backoff_base_seconds: float = Field(default=2.0)
    job_stale_after_seconds: int = Field(default=1800)  # running jobs older than this are re-queued

    # File Upload
    upload_dir: str = Field(default=str(BASE_DIR / "uploads"))
    max_upload_size_mb: int = Field(default=10)
    allowed_upload_extensions: str | List[str] = Field(
        default=",".join(DEFAULT_UPLOAD_EXTENSIONS)
    )

    # Payment webhooks
    payment_webhook_secret: Optional[str] = Field(default=None)
    payment_webhook_tolerance_seconds: int = Field(default=300)

    # Sentry (Optional)
    sentry_dsn: Optional[str] = Field(default=None)
    sentry_traces_sample_rate: float = Field(default=0.1)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string or list."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return list(DEFAULT_CORS_ORIGINS)
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("allowed_upload_extensions", mode="before")
    @classmethod
    def parse_upload_extensions(cls, v):
        """Parse upload extensions from comma-separated string or list."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return list(DEFAULT_UPLOAD_EXTENSIONS)
        if isinstance(v, str):
            return [ext.strip().lower() for ext in v.split(",")]
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment.lower() == "testing"

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def access_token_ttl_seconds(self) -> int:
        return self.jwt_access_token_expire_hours * 3600

    @property
    def refresh_token_ttl_seconds(self) -> int:
        return self.jwt_refresh_token_expire_days * 86400

    @property
    def effective_database_url(self) -> str:
        """Database URL, defaulting to a local SQLite file outside production."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{BASE_DIR / 'claimflow.db'}"

    def validate_environment(self) -> None:
        """Validate that all required environment variables are set."""
        required_vars = [
            "database_url",
            "redis_url",
            "jwt_secret_key",
            "payment_webhook_secret",
        ]

        missing_vars = []
        for var in required_vars:
            if not getattr(self, var, None):
                missing_vars.append(var.upper())

        if missing_vars:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing_vars)}"
            )

        if self.jwt_secret_key == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET_KEY must be changed from its development default")


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use this function to get settings throughout the application.
    """
    settings = Settings()

    # Validate environment in production
    if settings.is_production:
        settings.validate_environment()

    return settings
