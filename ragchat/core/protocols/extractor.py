"""Text extraction protocol for dependency injection."""
from typing import Protocol, runtime_checkable

from ..models.document import DocumentType


@runtime_checkable
class ExtractorProtocol(Protocol):
    """Protocol for turning uploaded bytes into raw text."""

    def extract(self, data: bytes, file_type: DocumentType) -> str:
        """Extract text.

        Args:
            data: Raw file bytes.
            file_type: Declared document type.

        Returns:
            Extracted text, possibly empty.
        """
        ...
