"""Application settings and configuration.

This module defines all configuration options for the Boardwatch service and
its polling client. Settings are loaded from environment variables with
sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Boardwatch", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    password_min_length: int = Field(default=6, alias="PASSWORD_MIN_LENGTH")

    # Database configuration
    database_url: str = Field(default="sqlite:///./boardwatch.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    bootstrap_schema_on_startup: bool = Field(default=True, alias="BOOTSTRAP_SCHEMA_ON_STARTUP")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Nearest-vehicle query policy
    nearby_default_radius_km: float = Field(default=2.0, alias="NEARBY_DEFAULT_RADIUS_KM")
    nearby_max_results: int = Field(default=10, alias="NEARBY_MAX_RESULTS")

    # Arrival estimation and near-arrival alerting
    eta_min_speed_mps: float = Field(default=0.5, alias="ETA_MIN_SPEED_MPS")
    eta_alert_threshold_seconds: float = Field(default=20.0, alias="ETA_ALERT_THRESHOLD_SECONDS")

    # Polling client
    poll_interval_seconds: float = Field(default=10.0, alias="POLL_INTERVAL_SECONDS")
    poll_watchdog_seconds: float = Field(default=15.0, alias="POLL_WATCHDOG_SECONDS")
    client_timeout_seconds: float = Field(default=10.0, alias="CLIENT_TIMEOUT_SECONDS")
    submit_max_attempts: int = Field(default=3, alias="SUBMIT_MAX_ATTEMPTS")
    submit_base_delay_seconds: float = Field(default=1.0, alias="SUBMIT_BASE_DELAY_SECONDS")

    # CORS configuration for the mobile/web frontend
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous operations such as
        Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()  # type: ignore[call-arg]
