"""Scoring and filtering strategies."""
from .scoring import (
    DEFAULT_RELEVANCE_FLOOR,
    RelevanceFloorStrategy,
    ScoringStrategy,
    TopKStrategy,
    distance_to_score,
)

__all__ = [
    "DEFAULT_RELEVANCE_FLOOR",
    "RelevanceFloorStrategy",
    "ScoringStrategy",
    "TopKStrategy",
    "distance_to_score",
]
