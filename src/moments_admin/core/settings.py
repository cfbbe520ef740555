"""Application settings and configuration.

This module defines all configuration options for the Moments admin service.
Settings are loaded from environment variables with sensible defaults.
"""

import string

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Moments Admin", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and sessions
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 8,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    # Sessions closer than this to expiry are re-issued on an allowed request.
    session_refresh_minutes: int = Field(default=30, alias="SESSION_REFRESH_MINUTES")
    session_cookie_name: str = Field(default="admin_session", alias="SESSION_COOKIE_NAME")
    session_cookie_secure: bool = Field(default=False, alias="SESSION_COOKIE_SECURE")

    # Database configuration
    database_url: str = Field(default="sqlite:///./moments_admin.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Route surfaces used by the authorization gate
    login_path: str = Field(default="/api/v1/auth/login", alias="LOGIN_PATH")
    landing_path: str = Field(default="/api/v1/dashboard", alias="LANDING_PATH")
    public_paths: list[str] = Field(
        default=["/", "/health", "/docs", "/redoc", "/openapi.json", "/api/v1/auth/logout"],
        alias="PUBLIC_PATHS",
    )

    # Invite codes
    invite_code_length: int = Field(default=12, ge=6, alias="INVITE_CODE_LENGTH")
    invite_code_alphabet: str = Field(
        default=string.ascii_uppercase + string.digits,
        alias="INVITE_CODE_ALPHABET",
    )
    invite_code_max_attempts: int = Field(default=5, ge=1, alias="INVITE_CODE_MAX_ATTEMPTS")
    invite_webhook_url: str | None = Field(default=None, alias="INVITE_WEBHOOK_URL")
    invite_webhook_timeout_seconds: float = Field(
        default=5.0,
        alias="INVITE_WEBHOOK_TIMEOUT_SECONDS",
    )

    # Moderation
    default_ban_reason: str = Field(default="Banned by admin", alias="DEFAULT_BAN_REASON")
    audit_page_size: int = Field(default=50, alias="AUDIT_PAGE_SIZE")

    # CORS configuration for the admin frontend
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Returns:
            The active database URL (test database if in testing mode, otherwise production)
        """
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()  # type: ignore[call-arg]
