"""Merges an ordered list of images into a PDF, one page per image."""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import pymupdf

from ..config import get_config
from ..exceptions import MergeFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Placement:
    """Image rectangle on the page canvas, in points."""
    x: float
    y: float
    width: float
    height: float

    @property
    def rect(self) -> "pymupdf.Rect":
        return pymupdf.Rect(self.x, self.y, self.x + self.width, self.y + self.height)


def fit_to_page(
    image_width: float,
    image_height: float,
    page_width: float,
    page_height: float,
) -> Placement:
    """
    Scale an image to the page width, or to the page height if that is too
    tall, keeping its aspect ratio, and center it on the page.
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError("Image dimensions must be positive")

    ratio = image_width / image_height
    width = page_width
    height = page_width / ratio

    if height > page_height:
        height = page_height
        width = page_height * ratio

    return Placement(
        x=(page_width - width) / 2,
        y=(page_height - height) / 2,
        width=width,
        height=height,
    )


class ImageMerger:
    """Composes images into a PDF with PyMuPDF."""

    def __init__(self, page_width: Optional[float] = None, page_height: Optional[float] = None):
        config = get_config()
        self.page_width = page_width if page_width is not None else config.merge.page_width
        self.page_height = page_height if page_height is not None else config.merge.page_height

    def merge(self, images: Sequence[bytes]) -> bytes:
        """
        Build a PDF with one page per image, in input order.

        Args:
            images: Encoded images (PNG, JPEG, ...)

        Returns:
            PDF bytes

        Raises:
            ValueError: If no images are given
            MergeFailure: If any image cannot be decoded
        """
        if not images:
            raise ValueError("At least one image is required")

        doc = pymupdf.open()
        try:
            for index, data in enumerate(images):
                width, height = self._image_size(data, index)
                placement = fit_to_page(width, height, self.page_width, self.page_height)

                page = doc.new_page(width=self.page_width, height=self.page_height)
                try:
                    page.insert_image(placement.rect, stream=data, keep_proportion=False)
                except Exception as e:
                    raise MergeFailure(f"Failed to add image {index + 1}: {e}") from e

            output = doc.tobytes()
        finally:
            doc.close()

        logger.info(f"Merged {len(images)} image(s) into a {len(output)} byte PDF")
        return output

    def _image_size(self, data: bytes, index: int):
        try:
            pix = pymupdf.Pixmap(data)
        except Exception as e:
            raise MergeFailure(f"Failed to decode image {index + 1}: {e}") from e
        return pix.width, pix.height
