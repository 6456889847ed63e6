from __future__ import annotations

import re

from pydantic import Field, PostgresDsn, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MissingRequiredSettingsError(Exception):
    """Raised when required settings are missing."""

    def __init__(self, missing_fields: list[str]) -> None:
        """Initialize with list of missing field names."""
        self.missing_fields = missing_fields
        super().__init__(f"Missing required environment variables: {', '.join(missing_fields)}")


class InvalidSettingsError(Exception):
    """Raised when settings are invalid."""

    def __init__(self, invalid_fields: list[tuple[str, str]]) -> None:
        """Initialize with list of invalid field names and messages."""
        self.invalid_fields = invalid_fields
        summary = ", ".join(f"{field}: {message}" for field, message in invalid_fields)
        super().__init__(f"Invalid environment variables: {summary}")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Required environment variables
    postgres_user: str = Field(..., description="Postgres user (required)")
    postgres_password: str = Field(..., description="Postgres password (required)")
    postgres_host: str = Field(..., description="Postgres host (required)")
    postgres_port: int = Field(..., description="Postgres port (required)")
    postgres_db: str = Field(..., description="Postgres database name (required)")
    redis_host: str = Field(..., description="Redis host (required)")
    redis_port: int = Field(..., description="Redis port (required)")
    redis_db: int = Field(..., description="Redis database number (required)")
    jwt_secret_key: str = Field(..., description="JWT secret key for token signing (required)")
    google_client_id: str = Field(..., description="Google OAuth client id (required)")

    # Database/Redis urls built from components
    database_url: PostgresDsn | None = Field(
        default=None,
        description="Database connection URL",
    )
    rate_limit_storage_url: str | None = Field(
        default=None,
        description="Rate limit storage URL",
    )

    @model_validator(mode="after")
    def build_derived_urls(self) -> Settings:
        """Build URLs from components when missing."""
        if self.database_url is None:
            self.database_url = PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=self.postgres_user,
                password=self.postgres_password,
                host=self.postgres_host,
                port=self.postgres_port,
                path=self.postgres_db,
            )
        if self.rate_limit_storage_url is None:
            self.rate_limit_storage_url = (
                f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"
            )
        return self

    # Optional environment variables (defaults provided)
    app_name: str = "ichidan-dokusho-api"
    environment: str = "local"
    log_level: str = "INFO"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = Field(
        default=60 * 24 * 7, gt=0, description="JWT token expiration in minutes"
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to call the API from a browser",
    )
    auto_create_tables: bool = Field(
        default=False, description="Create tables from model metadata at startup"
    )

    # Draft generation (OpenAI-compatible endpoint; unset means templated fallback)
    llm_api_url: str | None = Field(default=None, description="OpenAI-compatible base URL")
    llm_api_key: str | None = Field(default=None, description="API key for the LLM endpoint")
    llm_model: str = "gpt-oss-20b"
    llm_timeout_seconds: float = Field(default=30.0, gt=0)
    default_draft_threshold: int = Field(default=5, ge=1, le=100)

    # Book links and catalog administration
    amazon_affiliate_tag: str = "tbooks47579-22"
    admin_username: str | None = None
    admin_password_hash: str | None = Field(
        default=None, description="bcrypt hash of the catalog admin password"
    )

    @staticmethod
    def _is_strong_jwt_secret(secret: str) -> bool:
        if len(secret) < 32:
            return False
        has_lower = re.search(r"[a-z]", secret) is not None
        has_upper = re.search(r"[A-Z]", secret) is not None
        has_digit = re.search(r"\d", secret) is not None
        has_symbol = re.search(r"[^\w\s]", secret) is not None
        return has_lower and has_upper and has_digit and has_symbol

    @model_validator(mode="after")
    def validate_jwt_secret_strength(self) -> Settings:
        if self.environment == "test":
            return self
        if not self._is_strong_jwt_secret(self.jwt_secret_key):
            raise ValueError(
                "JWT secret key must be at least 32 characters and include upper, lower, "
                "number, and symbol characters."
            )
        return self

    @property
    def llm_enabled(self) -> bool:
        return bool(self.llm_api_url)


def validate_settings() -> Settings:
    """Validate settings and raise exception for missing required fields.

    Raises:
        MissingRequiredSettingsError: If required environment variables are missing
        InvalidSettingsError: If values are present but invalid
    """
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as e:
        missing_fields: list[str] = []
        for error in e.errors():
            if error["type"] == "missing":
                field_name = error["loc"][0] if error["loc"] else "unknown"
                missing_fields.append(str(field_name).upper())

        if missing_fields:
            raise MissingRequiredSettingsError(missing_fields) from e

        invalid_fields: list[tuple[str, str]] = []
        for error in e.errors():
            field_path = ".".join(str(part) for part in error.get("loc", []))
            message = error.get("msg", "Invalid value")
            invalid_fields.append((field_path or "unknown", message))

        if invalid_fields:
            raise InvalidSettingsError(invalid_fields) from e

        raise


# Validate settings at import time.
# Exceptions will propagate to the importing module (e.g., app/main.py)
settings = validate_settings()
