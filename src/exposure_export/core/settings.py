"""Application settings and configuration.

This module defines all configuration options for the exposure export job.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./exposures.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Object storage for generated bundles
    exports_bucket: str | None = Field(default=None, alias="EXPORTS_BUCKET")
    aws_region: str | None = Field(default=None, alias="AWS_REGION")
    s3_endpoint_url: str | None = Field(default=None, alias="S3_ENDPOINT_URL")

    # Signing key (PEM encoded EC private key)
    signing_private_key: str | None = Field(default=None, alias="EXPORT_SIGNING_KEY")

    # Region resolution
    default_region: str = Field(default="IE", alias="EXPORT_DEFAULT_REGION")
    native_regions: list[str] = Field(default=["*"], alias="EXPORT_NATIVE_REGIONS")

    # Signature info embedded in every bundle
    app_bundle_id: str = Field(default="", alias="EXPORT_APP_BUNDLE_ID")
    android_package: str = Field(default="", alias="EXPORT_ANDROID_PACKAGE")
    verification_key_version: str = Field(default="v1", alias="EXPORT_KEY_VERSION")
    verification_key_id: str = Field(default="", alias="EXPORT_KEY_ID")
    signature_algorithm: str = Field(
        default="1.2.840.10045.4.3.2",
        alias="EXPORT_SIGNATURE_ALGORITHM",
    )

    # Schedule and retention windows
    retention_days: int = Field(default=14, alias="EXPOSURE_RETENTION_DAYS")
    backfill_days: int = Field(default=14, alias="EXPORT_BACKFILL_DAYS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
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


settings = Settings()
