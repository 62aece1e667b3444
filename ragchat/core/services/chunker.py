"""Chunker - recursive boundary-aware text splitting."""

import logging
from collections import deque
from typing import Any, Optional

from ..models.document import Chunk, flatten_metadata

logger = logging.getLogger(__name__)

# Most-preferred boundary first; "" means a hard character cut.
DEFAULT_SEPARATORS = ("\n\n", "\n", ". ", " ", "")


def split_text(
    text: str,
    chunk_size: int = 800,
    chunk_overlap: int = 200,
    separators: tuple[str, ...] = DEFAULT_SEPARATORS,
) -> list[str]:
    """Split text into overlapping chunks of at most ``chunk_size`` characters.

    The text is cut at the best available boundary: paragraph break, line
    break, sentence end, space, and only then mid-word. Neighbouring chunks
    share up to ``chunk_overlap`` characters of trailing context.

    Args:
        text: Text to split.
        chunk_size: Maximum chunk length in characters.
        chunk_overlap: Maximum characters carried over into the next chunk.
        separators: Boundary cascade.

    Returns:
        Chunks in left-to-right order; empty for blank input.

    Raises:
        ValueError: If overlap is not smaller than chunk size.
    """
    _check_sizes(chunk_size, chunk_overlap)

    if not text or not text.strip():
        return []

    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    if len(normalized.strip()) <= chunk_size:
        return [normalized.strip()]

    return _split(normalized, list(separators), chunk_size, chunk_overlap)


def _check_sizes(chunk_size: int, chunk_overlap: int) -> None:
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if chunk_overlap < 0:
        raise ValueError(f"chunk_overlap must not be negative, got {chunk_overlap}")
    if chunk_overlap >= chunk_size:
        raise ValueError(
            f"chunk_overlap ({chunk_overlap}) must be smaller than "
            f"chunk_size ({chunk_size})"
        )


def _split(
    text: str, separators: list[str], chunk_size: int, chunk_overlap: int
) -> list[str]:
    separator = separators[-1]
    remaining: list[str] = []
    for i, sep in enumerate(separators):
        if sep == "":
            separator = sep
            break
        if sep in text:
            separator = sep
            remaining = separators[i + 1:]
            break

    chunks: list[str] = []
    pending: list[str] = []

    for piece in _split_keeping_separator(text, separator):
        if len(piece) < chunk_size:
            pending.append(piece)
            continue

        if pending:
            chunks.extend(_merge(pending, chunk_size, chunk_overlap))
            pending = []

        if remaining:
            chunks.extend(_split(piece, remaining, chunk_size, chunk_overlap))
        else:
            # Only reachable with chunk_size == 1 on the hard-cut level.
            chunks.append(piece)

    if pending:
        chunks.extend(_merge(pending, chunk_size, chunk_overlap))

    return chunks


def _split_keeping_separator(text: str, separator: str) -> list[str]:
    """Split and glue the separator onto the end of the preceding piece."""
    if separator == "":
        return list(text)

    parts = text.split(separator)
    pieces = [p + separator for p in parts[:-1]]
    pieces.append(parts[-1])
    return [p for p in pieces if p]


def _merge(pieces: list[str], chunk_size: int, chunk_overlap: int) -> list[str]:
    """Pack small pieces into chunks, carrying a tail of up to overlap chars."""
    merged: list[str] = []
    window: deque[str] = deque()
    total = 0

    for piece in pieces:
        length = len(piece)
        if window and total + length > chunk_size:
            chunk = "".join(window).strip()
            if chunk:
                merged.append(chunk)
            while window and (
                total > chunk_overlap or total + length > chunk_size
            ):
                total -= len(window.popleft())
        window.append(piece)
        total += length

    chunk = "".join(window).strip()
    if chunk:
        merged.append(chunk)

    return merged


class TextChunker:
    """Turns extracted document text into indexed ``Chunk`` records."""

    def __init__(self, chunk_size: int = 800, chunk_overlap: int = 200):
        """Initialize chunker.

        Args:
            chunk_size: Target chunk size in characters.
            chunk_overlap: Overlap between chunks.

        Raises:
            ValueError: If overlap is not smaller than chunk size.
        """
        _check_sizes(chunk_size, chunk_overlap)
        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def chunk_overlap(self) -> int:
        return self._chunk_overlap

    def split(self, text: str) -> list[str]:
        return split_text(text, self._chunk_size, self._chunk_overlap)

    def chunk(
        self,
        document_id: str,
        text: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> list[Chunk]:
        """Split text and attach per-chunk metadata.

        Args:
            document_id: Parent document ID.
            text: Extracted text.
            metadata: Extra metadata shared by every chunk; structured
                values are serialized to strings.

        Returns:
            Chunks with gapless 0-based ``chunk_index``.
        """
        base = flatten_metadata(metadata)
        chunks = []
        for i, content in enumerate(self.split(text)):
            chunk_metadata = dict(base)
            chunk_metadata.update({"documentId": document_id, "chunkIndex": i})
            chunks.append(
                Chunk(
                    document_id=document_id,
                    chunk_index=i,
                    content=content,
                    metadata=chunk_metadata,
                )
            )

        logger.debug(f"Chunked {document_id}: {len(chunks)} chunks")
        return chunks
