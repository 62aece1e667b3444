"""Evidence domain models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..errors import RagChatError


class EvidenceStatus(Enum):
    """Outcome of one evidence source."""
    OK = "ok"                      # succeeded with items
    EMPTY = "empty"                # succeeded, nothing relevant
    FAILED = "failed"              # adapter error
    UNCONFIGURED = "unconfigured"  # capability has no credentials
    DISABLED = "disabled"          # caller turned the source off


@dataclass
class EvidenceItem:
    """One retrieved chunk or web result."""
    content: str
    source: str
    score: float
    document_id: Optional[str] = None
    chunk_index: Optional[int] = None
    title: Optional[str] = None


@dataclass
class EvidenceBundle:
    """Normalized output of one evidence source."""
    items: list[EvidenceItem] = field(default_factory=list)
    context: str = ""
    sources: list[str] = field(default_factory=list)
    status: EvidenceStatus = EvidenceStatus.EMPTY
    error: Optional[RagChatError] = None  # RetrievalDegraded or WebSearchDegraded

    @property
    def has_items(self) -> bool:
        return bool(self.items)

    @property
    def succeeded(self) -> bool:
        return self.status is EvidenceStatus.OK and bool(self.items)

    @property
    def failed(self) -> bool:
        return self.status is EvidenceStatus.FAILED

    @classmethod
    def empty(
        cls,
        context: str,
        status: EvidenceStatus = EvidenceStatus.EMPTY,
        error: Optional[RagChatError] = None,
    ) -> "EvidenceBundle":
        return cls(items=[], context=context, sources=[], status=status, error=error)


def unique_sources(items: list[EvidenceItem]) -> list[str]:
    """Deduplicate sources, keeping first-seen order."""
    seen = set()
    sources = []
    for item in items:
        if item.source and item.source not in seen:
            seen.add(item.source)
            sources.append(item.source)
    return sources
