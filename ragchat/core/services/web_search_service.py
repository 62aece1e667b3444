"""Web search service - wraps the search capability into evidence bundles."""

import logging
from typing import Optional

from ..errors import WebSearchDegraded
from ..models.evidence import (
    EvidenceBundle,
    EvidenceItem,
    EvidenceStatus,
    unique_sources,
)
from ..protocols.web_search import WebResult, WebSearchProtocol
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

NO_WEB_RESULTS_CONTEXT = "No relevant web search results found."
WEB_ERROR_CONTEXT = "Error performing web search."

WEB_HEADER = "=== WEB SEARCH RESULTS ==="
WEB_FOOTER = "=== END OF WEB SEARCH RESULTS ==="
WEB_INSTRUCTIONS = (
    "Instructions: Use the above web search results to answer the user's question. "
    "Cite the source URLs when referencing information from web search."
)


class WebSearchService:
    """Soft-failing web search."""

    def __init__(
        self,
        client: Optional[WebSearchProtocol],
        max_results: int = 3,
        retry: Optional[RetryPolicy] = None,
    ):
        """Initialize web search service.

        Args:
            client: Search capability; None means unconfigured.
            max_results: Default number of results.
            retry: Retry policy for search calls.
        """
        self._client = client
        self._max_results = max_results
        self._retry = retry or RetryPolicy()

    @property
    def is_available(self) -> bool:
        return self._client is not None and self._client.is_configured

    async def search(
        self, query: str, max_results: Optional[int] = None
    ) -> EvidenceBundle:
        """Search the web. Never raises.

        Args:
            query: Search query.
            max_results: Override number of results.

        Returns:
            OK bundle with results, or an empty bundle whose status tells
            unconfigured, empty and failed apart.
        """
        if not self.is_available:
            logger.warning("Web search is not configured, skipping")
            return EvidenceBundle.empty("", status=EvidenceStatus.UNCONFIGURED)

        max_results = max_results or self._max_results

        try:
            response = await self._retry.acall(
                lambda: self._client.search(query, max_results=max_results),
                name="web.search",
            )
        except Exception as e:
            logger.error(f"Web search error: {e}")
            return EvidenceBundle.empty(
                WEB_ERROR_CONTEXT,
                status=EvidenceStatus.FAILED,
                error=WebSearchDegraded.wrap(e),
            )

        if not response or not response.results:
            logger.info(f"Web search: no results for '{query[:50]}...'")
            return EvidenceBundle.empty(NO_WEB_RESULTS_CONTEXT)

        items = [self._to_item(r, i) for i, r in enumerate(response.results)]
        logger.info(f"Web search: {len(items)} results for '{query[:50]}...'")

        return EvidenceBundle(
            items=items,
            context=format_web_results(response.results, response.answer),
            sources=unique_sources(items),
            status=EvidenceStatus.OK,
        )

    @staticmethod
    def _to_item(result: WebResult, index: int) -> EvidenceItem:
        # Rank-derived score: the capability returns results best-first.
        return EvidenceItem(
            content=result.content,
            source=result.url,
            score=1.0 / (index + 1),
            title=result.title,
        )


def format_web_results(results: list[WebResult], answer: Optional[str] = None) -> str:
    """Format web results as context for LLM."""
    if not results:
        return "No web search results available."

    parts = [WEB_HEADER, ""]
    if answer:
        parts.append(f"Summary Answer: {answer}")
        parts.append("")

    for i, r in enumerate(results, 1):
        parts.append(f"--- Source {i}: {r.title or f'Result {i}'} ---")
        parts.append(f"URL: {r.url or 'Unknown source'}")
        if r.content:
            parts.append(r.content.strip())
        parts.append("")

    parts.append(WEB_FOOTER)
    parts.append("")
    parts.append(WEB_INSTRUCTIONS)
    return "\n".join(parts)
