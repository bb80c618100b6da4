"""Scoring and recommendations for program metrics."""

from .scorer import score, rating
from .recommendations import RecommendationEngine, recommend, group_by_priority

__all__ = [
    "score",
    "rating",
    "RecommendationEngine",
    "recommend",
    "group_by_priority",
]
