"""PDF source documents backed by PyMuPDF."""

import logging
from typing import Optional

import pymupdf

from .base import Document, SourceLoader
from ..config import get_config

logger = logging.getLogger(__name__)


class PyMuPDFDocument(Document):
    """Renders pages of an open PyMuPDF document to raster images."""

    def __init__(self, doc: "pymupdf.Document", name: str, scale: float, image_format: str):
        self._doc = doc
        self.name = name
        self.scale = scale
        self.image_format = image_format

    @property
    def page_count(self) -> int:
        return len(self._doc)

    def render_page(self, page_number: int) -> Optional[bytes]:
        if page_number < 1 or page_number > self.page_count:
            raise ValueError(
                f"Page {page_number} out of range (1-{self.page_count})"
            )

        page = self._doc[page_number - 1]
        pix = page.get_pixmap(matrix=pymupdf.Matrix(self.scale, self.scale))
        try:
            return pix.tobytes(self.image_format)
        finally:
            # Drop the bitmap before the next page is rendered
            del pix

    def close(self) -> None:
        self._doc.close()


class PyMuPDFSourceLoader(SourceLoader):
    """Opens PDF bytes with PyMuPDF."""

    def __init__(self, scale: Optional[float] = None, image_format: Optional[str] = None):
        config = get_config()
        self.scale = scale if scale is not None else config.render.scale
        self.image_format = image_format or config.render.image_format

    def load(self, data: bytes, name: str = "document.pdf") -> PyMuPDFDocument:
        try:
            doc = pymupdf.open(stream=data, filetype="pdf")
        except Exception:
            raise ValueError("Invalid or corrupted PDF file")

        if len(doc) == 0:
            doc.close()
            raise ValueError("Invalid or corrupted PDF file")

        logger.debug(f"Loaded '{name}' with {len(doc)} page(s)")
        return PyMuPDFDocument(doc, name, self.scale, self.image_format)
