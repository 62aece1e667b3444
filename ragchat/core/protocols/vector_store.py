"""Vector store protocol for dependency injection."""
from typing import Optional, Protocol, runtime_checkable

from ..models.document import IndexHit, Metadata


@runtime_checkable
class VectorStoreProtocol(Protocol):
    """Protocol for the embedding-backed similarity index.

    Embedding is the store's concern: callers hand over raw texts.
    """

    def add(
        self,
        ids: list[str],
        texts: list[str],
        metadatas: list[Metadata],
    ) -> None:
        """Embed and store texts.

        Args:
            ids: Chunk IDs.
            texts: Chunk texts.
            metadatas: Scalar-only metadata, one dict per text.

        Raises:
            ValueError: If any metadata value is not a scalar.
        """
        ...

    def query(
        self,
        query_text: str,
        k: int = 5,
        where: Optional[Metadata] = None,
    ) -> list[IndexHit]:
        """Nearest-neighbour search.

        Args:
            query_text: Query text, embedded by the store.
            k: Number of results to return.
            where: Optional metadata equality filter.

        Returns:
            Hits ordered by ascending distance.
        """
        ...

    def delete(self, where: Metadata) -> None:
        """Delete every entry matching the metadata filter."""
        ...

    def count(self) -> int:
        """Get entry count."""
        ...
