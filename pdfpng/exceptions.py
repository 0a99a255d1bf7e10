"""Errors raised by conversion collaborators."""


class ConversionError(Exception):
    """Base class for conversion errors."""


class RenderFailure(ConversionError):
    """The source document produced no artifact for a page."""

    def __init__(self, page_number: int, message: str = ""):
        self.page_number = page_number
        super().__init__(message or f"Failed to render page {page_number}")


class SinkFailure(ConversionError):
    """An artifact sink rejected a write."""


class MergeFailure(ConversionError):
    """An image could not be decoded while merging; the merge is aborted."""
