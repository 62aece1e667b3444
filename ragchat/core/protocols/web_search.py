"""Web search protocol for dependency injection."""
from dataclasses import dataclass, field
from typing import Optional, Protocol, runtime_checkable


@dataclass
class WebResult:
    url: str
    title: str
    content: str


@dataclass
class WebSearchResponse:
    results: list[WebResult] = field(default_factory=list)
    answer: Optional[str] = None


@runtime_checkable
class WebSearchProtocol(Protocol):
    """Protocol for a ranked web search capability."""

    @property
    def is_configured(self) -> bool:
        """Whether credentials for the capability are present."""
        ...

    async def search(self, query: str, max_results: int = 3) -> WebSearchResponse:
        """Search the web.

        Args:
            query: Search query.
            max_results: Maximum number of results.

        Returns:
            Ranked results and an optional summary answer.
        """
        ...
