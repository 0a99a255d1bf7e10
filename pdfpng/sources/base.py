"""Source document interfaces."""

from abc import ABC, abstractmethod
from typing import Optional


class Document(ABC):
    """A loaded multi-page source document."""

    name: str = ""

    @property
    @abstractmethod
    def page_count(self) -> int:
        """Number of pages in the document."""
        pass

    @abstractmethod
    def render_page(self, page_number: int) -> Optional[bytes]:
        """
        Render one page to an image artifact.

        Args:
            page_number: 1-indexed page number

        Returns:
            Encoded image bytes, or None if the page produced nothing
        """
        pass

    def close(self) -> None:
        """Release resources held by the document."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class SourceLoader(ABC):
    """Turns raw bytes into a Document."""

    @abstractmethod
    def load(self, data: bytes, name: str = "document.pdf") -> Document:
        """
        Open a source document.

        Args:
            data: Raw document bytes
            name: Original file name, used to derive artifact names

        Returns:
            The loaded Document

        Raises:
            ValueError: If the data is not a readable document
        """
        pass
