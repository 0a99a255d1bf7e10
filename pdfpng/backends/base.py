"""Base backend interface for conversion operations."""

from abc import ABC, abstractmethod
from typing import Dict, Any, Tuple


class Backend(ABC):
    """Abstract base class for conversion backends."""

    @abstractmethod
    def supports(self, operation: str, format: str = "") -> bool:
        """
        Check if this backend can handle the specified operation.

        Args:
            operation: The operation name (e.g., "render_pages", "merge_images")
            format: Optional format hint (e.g., "pdf")

        Returns:
            True if this backend supports the operation, False otherwise
        """
        pass

    @abstractmethod
    def process(
        self,
        data: bytes,
        operation: str,
        options: Dict[str, str]
    ) -> Tuple[bytes, str, Dict[str, Any]]:
        """
        Run the specified operation on the input bytes.

        Args:
            data: Raw input bytes (a PDF, or a zip of images)
            operation: Operation to perform
            options: Operation-specific options

        Returns:
            Tuple of (output_data, format, metadata)
            - output_data: Produced artifact bytes
            - format: Output format (e.g., "zip", "pdf")
            - metadata: Additional information about the processing

        Raises:
            ValueError: If operation is not supported or invalid input/options
            RuntimeError: If processing fails
        """
        pass
