"""Document domain models."""
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

# Values allowed to cross the chunk/index boundary.
MetadataValue = Union[str, int, float, bool, None]
Metadata = dict[str, MetadataValue]

_SCALAR_TYPES = (str, int, float, bool, type(None))


class DocumentType(Enum):
    """Supported upload formats."""
    PDF = "pdf"
    TXT = "txt"
    DOCX = "docx"
    MD = "md"


@dataclass
class Document:
    """Uploaded corpus item."""
    id: str
    filename: str
    file_type: DocumentType
    chunk_count: int
    vector_store_id: str
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Chunk:
    """Document chunk for indexing."""
    document_id: str
    chunk_index: int
    content: str
    metadata: Metadata = field(default_factory=dict)

    @property
    def id(self) -> str:
        return f"{self.document_id}_chunk_{self.chunk_index}"


@dataclass
class IndexHit:
    """Raw nearest-neighbour hit from the index."""
    content: str
    metadata: Metadata
    distance: float


def is_scalar(value: Any) -> bool:
    return isinstance(value, _SCALAR_TYPES)


def flatten_metadata(metadata: Optional[dict[str, Any]]) -> Metadata:
    """Serialize any structured value to a string.

    Producers call this before handing metadata to the index; the index
    itself only accepts scalars (see ``ensure_scalar_metadata``).
    """
    flat: Metadata = {}
    for key, value in (metadata or {}).items():
        if is_scalar(value):
            flat[str(key)] = value
        else:
            flat[str(key)] = json.dumps(value, default=str, sort_keys=True)
    return flat


def ensure_scalar_metadata(metadata: dict[str, Any]) -> Metadata:
    """Reject metadata that still carries non-scalar values.

    Raises:
        ValueError: If any value is a list, dict or other structured type.
    """
    for key, value in metadata.items():
        if not is_scalar(value):
            raise ValueError(
                f"Metadata value for '{key}' must be a scalar, "
                f"got {type(value).__name__}"
            )
    return metadata
