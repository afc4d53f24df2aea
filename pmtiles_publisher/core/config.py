"""Application settings and configuration management.

This module provides Pydantic-based settings management that loads
configuration from environment variables or a .env file. Settings include
the S3 bucket and region artifacts are published to, the staging directory
used while a request is in flight, the tippecanoe executable, CORS origins
and the upload size limit.

The bucket and region are process-wide: they are read once at startup and
there is no per-request override.

Example:
    Settings can be accessed via the cached get_settings() function:
        >>> from pmtiles_publisher.core.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.aws_bucket_name)

    Environment variables can override defaults:
        >>> AWS_BUCKET_NAME=my-maps
        >>> AWS_REGION=eu-central-1
        >>> STAGING_DIR=/custom/path/staging
        >>> MAX_UPLOAD_SIZE_BYTES=1073741824
"""

import functools
import pathlib
from typing import Literal

import pydantic_settings


class Settings(pydantic_settings.BaseSettings):
    """Runtime configuration pulled from environment variables or defaults.

    All settings can be overridden via environment variables or .env file.
    The staging directory is created on demand via ensure_directories().

    Attributes:
        aws_region: Region of the bucket; also used to build public URLs.
        aws_bucket_name: Bucket every artifact is published to.
        aws_access_key_id: Explicit access key. When unset, boto3 falls back
            to its default credential chain.
        aws_secret_access_key: Secret matching aws_access_key_id.
        aws_endpoint_url: Optional endpoint for S3-compatible stores.
        public_base_url: Optional base for public artifact URLs, replacing
            the virtual-hosted S3 URL.
        storage_backend: "s3" in production, "memory" for local development.
        staging_dir: Directory for uploaded and converted files.
        max_upload_size_bytes: Maximum file upload size (default 512MB).
        tippecanoe_path: Executable used for GeoJSON to PMTiles conversion.
        allow_origins: List of allowed CORS origins (["*"] allows all).
        log_level: Level of the package logger.
        host: Interface uvicorn binds to.
        port: Port uvicorn listens on.

    Example:
        Create settings with custom values:
            >>> settings = Settings(
            ...     aws_bucket_name="maps",
            ...     staging_dir=Path("/custom/staging"),
            ...     max_upload_size_bytes=1024 * 1024 * 1024  # 1GB
            ... )
            >>> settings.ensure_directories()
    """

    aws_region: str = "us-east-1"
    aws_bucket_name: str = "pmtiles"
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_endpoint_url: str | None = None
    public_base_url: str | None = None
    storage_backend: Literal["s3", "memory"] = "s3"
    staging_dir: pathlib.Path = pathlib.Path("/tmp/pmtiles_publisher/staging")
    max_upload_size_bytes: int = 512 * 1024 * 1024
    tippecanoe_path: str = "tippecanoe"
    allow_origins: list[str] = ["*"]
    log_level: str = "INFO"
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3000

    model_config = pydantic_settings.SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    def ensure_directories(self) -> None:
        """Create the local staging directory if it does not exist."""
        self.staging_dir.mkdir(parents=True, exist_ok=True)


@functools.lru_cache
def get_settings() -> Settings:
    """Get cached settings instance with directories initialized.

    Settings are loaded from environment variables or .env file and cached
    for the lifetime of the process. Subsequent calls return the same
    cached instance.

    Returns:
        Settings instance with all configuration values populated and
        the staging directory ensured to exist.
    """
    settings = Settings()
    settings.ensure_directories()
    return settings
