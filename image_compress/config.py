"""
Runtime configuration for the image compression service.

Limits come from environment variables once at startup and are then passed
explicitly to the components that need them.
"""
import os
import logging
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from image_compress.exceptions import ConfigurationError

# Set up logging
logger = logging.getLogger(__name__)

SERVICE_NAME = "image-compress-api"
SERVICE_VERSION = "1.0.0"

DEFAULT_PORT = 8080
DEFAULT_MAX_IMAGE_SIZE = 32 * 1024 * 1024
DEFAULT_MAX_BATCH_SIZE = 10
DEFAULT_REQUEST_TIMEOUT = 60
DEFAULT_QUALITY = 80

# Room for JSON syntax, filenames and form fields around the image payloads
REQUEST_BODY_OVERHEAD = 64 * 1024


class Settings(BaseModel):
    """Service limits and server options"""
    port: int = Field(DEFAULT_PORT, ge=1, le=65535, description="HTTP listen port")
    max_image_size: int = Field(
        DEFAULT_MAX_IMAGE_SIZE, gt=0, description="Maximum accepted image size in bytes"
    )
    max_batch_size: int = Field(
        DEFAULT_MAX_BATCH_SIZE, gt=0, description="Maximum number of images per batch"
    )
    request_timeout: int = Field(
        DEFAULT_REQUEST_TIMEOUT, gt=0, description="Per-request timeout in seconds"
    )
    default_quality: int = Field(
        DEFAULT_QUALITY, ge=1, le=100, description="Quality used when a request omits it"
    )
    max_request_size: Optional[int] = Field(
        None, gt=0, description="Maximum request body size in bytes (derived from the image limits when unset)"
    )
    log_level: str = Field("INFO", description="Root logging level")
    cors_origins: List[str] = Field(["*"], description="Allowed CORS origins")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Validated settings

        Raises:
            ConfigurationError: If a value is not a valid integer or is out of range
        """
        if environ is None:
            environ = os.environ

        def get_env(key: str) -> Optional[str]:
            value = environ.get(key, "").strip()
            return value or None

        int_fields = {
            "port": "PORT",
            "max_image_size": "MAX_IMAGE_SIZE",
            "max_batch_size": "MAX_BATCH_SIZE",
            "request_timeout": "REQUEST_TIMEOUT",
            "default_quality": "DEFAULT_QUALITY",
            "max_request_size": "MAX_REQUEST_SIZE",
        }

        values = {}
        for field_name, env_key in int_fields.items():
            raw = get_env(env_key)
            if raw is None:
                continue
            try:
                values[field_name] = int(raw)
            except ValueError:
                raise ConfigurationError(f"Error parsing {env_key}: {raw!r} is not an integer")

        log_level = get_env("LOG_LEVEL")
        if log_level:
            values["log_level"] = log_level.upper()

        cors_origins = get_env("CORS_ORIGINS")
        if cors_origins:
            values["cors_origins"] = [o.strip() for o in cors_origins.split(",") if o.strip()]

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @property
    def request_body_limit(self) -> int:
        """
        Largest request body accepted, in bytes.

        Unless set explicitly this is a full batch of maximum-size images in
        base64 (4 bytes per 3) plus a fixed allowance for the JSON around them.
        """
        if self.max_request_size is not None:
            return self.max_request_size
        encoded_image = 4 * ((self.max_image_size + 2) // 3)
        return self.max_batch_size * encoded_image + REQUEST_BODY_OVERHEAD

    def log_summary(self) -> None:
        """Log the effective limits."""
        logger.info(f"Maximum image size: {self.max_image_size // (1024 * 1024)} MB")
        logger.info(f"Maximum batch size: {self.max_batch_size} images")
        logger.info(f"Maximum request body: {self.request_body_limit // (1024 * 1024)} MB")
        logger.info(f"Request timeout: {self.request_timeout} seconds")
        logger.info("All processing is done in memory, no temporary files are written")
