"""Core analysis logic."""

from .components import resolve_components, source_priority
from .analyzer import RecommendationAnalyzer, filter_recommendations, group_by_category
from .table import SimpleTable

__all__ = [
    "resolve_components",
    "source_priority",
    "RecommendationAnalyzer",
    "filter_recommendations",
    "group_by_category",
    "SimpleTable",
]
