"""
Image Compress API Entry Point

This file serves as the main entry point for the application,
importing and running the FastAPI application defined in the image_compress package.

Run with uvicorn:
    uvicorn main:app --reload
"""
import os
import logging
import sys

from image_compress.api import create_app
from image_compress.config import Settings
from image_compress.exceptions import ConfigurationError

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Configure root logger
logging.basicConfig(
    level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format=LOG_FORMAT,
    stream=sys.stdout
)

# Set up logger
logger = logging.getLogger(__name__)

try:
    settings = Settings.from_env()
except ConfigurationError as e:
    logger.critical(e.message)
    sys.exit(1)

app = create_app(settings)

# Entry point for running with uvicorn
if __name__ == "__main__":
    import uvicorn

    workers = int(os.environ.get("WORKERS", 1))
    debug = os.environ.get("DEBUG", "").lower() in ("true", "1", "yes")

    logger.info(f"Starting Image Compress API on port {settings.port} with {workers} workers")

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.port,
        workers=workers,
        reload=debug,
        log_level=settings.log_level.lower()
    )
