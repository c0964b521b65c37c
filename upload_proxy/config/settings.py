"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock mode enables local development without a Google Cloud project.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Upload Proxy"
    api_version: str = "0.1.0"

    # Google Cloud Storage Configuration
    google_upload_bucket: str = Field(
        default="",
        description="Bucket that uploaded files are written to"
    )
    google_cloud_project: Optional[str] = Field(
        default=None,
        description="Project for the storage client. Discovered from credentials when unset."
    )
    storage_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of real GCS. Enables local dev without credentials."
    )
    public_url_base: str = Field(
        default="https://storage.googleapis.com",
        description="Prefix of the public URL returned for stored objects"
    )

    # Upload Behavior
    allowed_referer: str = Field(
        default="gingrapp.com",
        description="Substring the Referer header must contain for an upload to be accepted"
    )
    sanitize_filenames: bool = Field(
        default=False,
        description="Reduce uploaded filenames to a safe basename before building object names"
    )
    upload_chunk_size: int = Field(
        default=1024 * 1024,
        description="Bytes per copy step and GCS resumable chunk. Must be a multiple of 256 KiB."
    )
    max_body_size_mb: int = Field(
        default=1024,
        description="Maximum request body size in MiB. Larger requests are rejected with 413."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins."
    )

    # Development server
    host: str = "0.0.0.0"
    port: int = 1323

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def max_body_size_bytes(self) -> int:
        return self.max_body_size_mb * 1024 * 1024

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields. Credentials are not
        listed because the storage client discovers them itself.
        """
        missing = []

        if not self.google_upload_bucket:
            missing.append("GOOGLE_UPLOAD_BUCKET")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, call get_settings.cache_clear() to reset.
    """
    return Settings()
