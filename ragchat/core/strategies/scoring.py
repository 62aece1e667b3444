
import logging
from abc import ABC, abstractmethod

from ..models.evidence import EvidenceItem

logger = logging.getLogger(__name__)

DEFAULT_RELEVANCE_FLOOR = 0.3


def distance_to_score(distance: float) -> float:
    """Map a cosine distance (0..2) to a similarity in [0, 1]."""
    return min(1.0, max(0.0, 1.0 - distance / 2))


class ScoringStrategy(ABC):
    """Base class for scoring strategies."""

    @abstractmethod
    def apply(self, query: str, results: list[EvidenceItem]) -> list[EvidenceItem]:
        """Apply strategy to results."""
        ...


class RelevanceFloorStrategy(ScoringStrategy):
    """Drop results scoring below an absolute floor."""

    def __init__(self, min_score: float = DEFAULT_RELEVANCE_FLOOR):
        """Initialize strategy.

        Args:
            min_score: Lowest score kept.
        """
        self._min_score = min_score

    def apply(self, query: str, results: list[EvidenceItem]) -> list[EvidenceItem]:
        """Filter results below the floor."""
        filtered = [r for r in results if r.score >= self._min_score]

        if len(filtered) < len(results):
            logger.info(
                f"Relevance floor: {len(results)} → {len(filtered)} "
                f"(min_allowed={self._min_score:.2f})"
            )

        return filtered


class TopKStrategy(ScoringStrategy):
    """Keep the first k results."""

    def __init__(self, k: int):
        self._k = k

    def apply(self, query: str, results: list[EvidenceItem]) -> list[EvidenceItem]:
        return results[: self._k]
