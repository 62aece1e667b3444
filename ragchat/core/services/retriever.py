"""Retriever - turns a query into a ranked, filtered document evidence bundle."""

import logging
from typing import Optional

from ..errors import RetrievalDegraded
from ..models.document import IndexHit
from ..models.evidence import (
    EvidenceBundle,
    EvidenceItem,
    EvidenceStatus,
    unique_sources,
)
from ..protocols.vector_store import VectorStoreProtocol
from ..strategies.scoring import (
    DEFAULT_RELEVANCE_FLOOR,
    RelevanceFloorStrategy,
    ScoringStrategy,
    TopKStrategy,
    distance_to_score,
)
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

NO_DOCUMENTS_CONTEXT = "No relevant documents found in the knowledge base."
NO_RELEVANT_CONTEXT = (
    "No highly relevant documents found. "
    "The query may not match the uploaded documents."
)
RETRIEVAL_ERROR_CONTEXT = "Error retrieving relevant documents from the knowledge base."
UNKNOWN_DOCUMENT = "Unknown Document"

CONTEXT_HEADER = "=== RELEVANT DOCUMENT CONTEXT ==="
CONTEXT_FOOTER = "=== END OF CONTEXT ==="
CONTEXT_INSTRUCTIONS = (
    "Instructions: Use the above context to answer the user's question. "
    "If the context doesn't contain enough information, say so. "
    "Cite the source document when referencing specific information."
)


class Retriever:
    """Corpus retrieval with relevance floor and per-document grouping."""

    def __init__(
        self,
        vector_store: VectorStoreProtocol,
        k: int = 5,
        relevance_floor: float = DEFAULT_RELEVANCE_FLOOR,
        retry: Optional[RetryPolicy] = None,
    ):
        """Initialize retriever.

        Args:
            vector_store: Embedding-backed index.
            k: Default number of candidates to request.
            relevance_floor: Minimum similarity score kept.
            retry: Retry policy for index calls.
        """
        self._vector_store = vector_store
        self._k = k
        self._relevance_floor = relevance_floor
        self._retry = retry or RetryPolicy()

    def retrieve(
        self,
        query: str,
        k: Optional[int] = None,
        document_id: Optional[str] = None,
    ) -> EvidenceBundle:
        """Retrieve relevant chunks for a query.

        Never raises: index failures come back as a FAILED bundle.

        Args:
            query: User query.
            k: Override number of candidates.
            document_id: Restrict results to one document.

        Returns:
            Evidence bundle with formatted context.
        """
        return self._retrieve(
            query,
            k or self._k,
            document_id,
            [RelevanceFloorStrategy(self._relevance_floor)],
        )

    def retrieve_with_threshold(
        self,
        query: str,
        min_score: float = 0.5,
        max_chunks: int = 5,
    ) -> EvidenceBundle:
        """Retrieve with a stricter relevance bar.

        Over-fetches at least ``max(2 * max_chunks, 10)`` candidates, then
        applies ``min_score`` and truncates to ``max_chunks``.
        """
        initial_k = max(max_chunks * 2, 10)
        bundle = self._retrieve(
            query,
            initial_k,
            None,
            [
                RelevanceFloorStrategy(self._relevance_floor),
                RelevanceFloorStrategy(min_score),
                TopKStrategy(max_chunks),
            ],
        )
        if bundle.status is EvidenceStatus.EMPTY:
            bundle.context = (
                f"No documents found with sufficient relevance "
                f"(minimum score: {min_score})."
            )
        return bundle

    def _retrieve(
        self,
        query: str,
        k: int,
        document_id: Optional[str],
        strategies: list[ScoringStrategy],
    ) -> EvidenceBundle:
        where = {"documentId": document_id} if document_id else None

        try:
            hits = self._retry.call(
                lambda: self._vector_store.query(query_text=query, k=k, where=where),
                name="index.query",
            )
        except Exception as e:
            logger.error(f"Retrieval error: {e}")
            return EvidenceBundle.empty(
                RETRIEVAL_ERROR_CONTEXT,
                status=EvidenceStatus.FAILED,
                error=RetrievalDegraded.wrap(e),
            )

        if not hits:
            logger.info(f"Retrieval: index returned nothing for '{query[:50]}...'")
            return EvidenceBundle.empty(NO_DOCUMENTS_CONTEXT)

        results = [self._to_item(hit) for hit in hits]
        for strategy in strategies:
            results = strategy.apply(query, results)

        if not results:
            logger.info(f"Retrieval: nothing above floor for '{query[:50]}...'")
            return EvidenceBundle.empty(NO_RELEVANT_CONTEXT)

        logger.info(
            f"Retrieval: returned {len(results)}/{len(hits)} chunks for '{query[:50]}...'"
        )

        return EvidenceBundle(
            items=results,
            context=format_context(results),
            sources=unique_sources(results),
            status=EvidenceStatus.OK,
        )

    @staticmethod
    def _to_item(hit: IndexHit) -> EvidenceItem:
        metadata = hit.metadata or {}
        chunk_index = metadata.get("chunkIndex")
        document_id = metadata.get("documentId")
        return EvidenceItem(
            content=hit.content,
            source=str(metadata.get("filename") or ""),
            score=distance_to_score(hit.distance),
            document_id=str(document_id) if document_id is not None else None,
            chunk_index=int(chunk_index) if isinstance(chunk_index, (int, float)) else None,
        )


def _chunk_sort_key(item: EvidenceItem) -> tuple:
    # Indexed chunks in document order, unindexed after them by score.
    if item.chunk_index is not None:
        return (0, item.chunk_index, 0.0)
    return (1, 0, -item.score)


def format_context(items: list[EvidenceItem]) -> str:
    """Format results as grouped context for LLM."""
    if not items:
        return "No relevant context available."

    groups: dict[str, list[EvidenceItem]] = {}
    for item in items:
        groups.setdefault(item.document_id or "unknown", []).append(item)

    parts = [CONTEXT_HEADER, ""]
    for doc_items in groups.values():
        filename = doc_items[0].source or UNKNOWN_DOCUMENT
        parts.append(f"--- Source: {filename} ---")
        for i, item in enumerate(sorted(doc_items, key=_chunk_sort_key), 1):
            parts.append(f"[Chunk {i}] {item.content.strip()}")
        parts.append("")

    parts.append(CONTEXT_FOOTER)
    parts.append("")
    parts.append(CONTEXT_INSTRUCTIONS)
    return "\n".join(parts)
