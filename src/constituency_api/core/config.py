"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        description="Async SQLAlchemy connection string (postgresql+asyncpg://...)",
    )

    # Export
    export_dir: str = Field(
        default="./exports",
        description="Directory for export output files",
    )
    export_max_workers: int = Field(
        default=3,
        description="Maximum number of export jobs processed concurrently",
        gt=0,
        le=16,
    )
    export_stream_batch_size: int = Field(
        default=1000,
        description="Rows fetched per server-side cursor partition",
        gt=0,
    )
    export_checkpoint_rows: int = Field(
        default=500,
        description="Minimum rows between progress checkpoints",
        gt=0,
    )
    export_checkpoint_percent: int = Field(
        default=2,
        description="Minimum share of the total (percent) between progress checkpoints",
        ge=0,
        le=100,
    )
    export_checkpoint_timeout: float = Field(
        default=5.0,
        description="Timeout in seconds for a single checkpoint write attempt",
        gt=0,
    )
    export_checkpoint_retries: int = Field(
        default=3,
        description="Attempts per checkpoint write before it is skipped",
        gt=0,
    )
    export_checkpoint_backoff: float = Field(
        default=0.5,
        description="Initial backoff in seconds between checkpoint write attempts (doubles each retry)",
        ge=0,
    )
    export_report_max_rows: int = Field(
        default=5000,
        description="Row ceiling for printable report exports",
        gt=0,
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )

    # CORS
    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins (must be explicitly configured)",
    )

    # Environment
    environment: str = Field(
        default="production",
        description="Deployment environment name (e.g. production, dev, staging)",
    )

    # API
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="API version prefix",
    )

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        if not self.cors_origins.strip():
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()  # type: ignore[call-arg]
