"""
Service wiring for the API routes.
"""
from fastapi import Request

from image_compress.config import Settings
from image_compress.core.archive import ZipBundler
from image_compress.core.codec import ImageProcessor
from image_compress.core.validation import BatchCompressor, RequestValidator


class ServiceContainer:
    """Stateless services shared by all requests of one application"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.processor = ImageProcessor(settings)
        self.bundler = ZipBundler()
        self.validator = RequestValidator(settings, self.processor)
        self.batch = BatchCompressor(self.processor, self.bundler, self.validator)


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services
