"""Image to PDF merge backend."""

import logging
from typing import Dict, Any, Optional, Tuple

from .base import Backend
from ..converters.archive_builder import ZipArchiveBuilder
from ..converters.image_merger import ImageMerger

logger = logging.getLogger(__name__)


class ImageMergeBackend(Backend):
    """Merges the images of a zip archive, in archive order, into one PDF."""

    SUPPORTED_OPERATIONS = ["merge_images"]

    def __init__(
        self,
        merger: Optional[ImageMerger] = None,
        archive_builder: Optional[ZipArchiveBuilder] = None,
    ):
        self.merger = merger or ImageMerger()
        self.archive_builder = archive_builder or ZipArchiveBuilder()

    def supports(self, operation: str, format: str = "") -> bool:
        return operation in self.SUPPORTED_OPERATIONS

    def process(
        self,
        data: bytes,
        operation: str,
        options: Dict[str, str]
    ) -> Tuple[bytes, str, Dict[str, Any]]:
        if not self.supports(operation):
            raise ValueError(f"Operation '{operation}' not supported")

        entries = self.archive_builder.read(data)
        if not entries:
            raise ValueError("Archive contains no images")

        output_data = self.merger.merge([content for _, content in entries])

        metadata = {
            "pages": len(entries),
            "images": [name for name, _ in entries],
        }
        return output_data, "pdf", metadata
