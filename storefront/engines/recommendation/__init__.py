"""
Recommendation Engine

Handles product search, related products and personalized recommendations.
"""

from .core import RecommendationEngine
from .exceptions import (
    CollaboratorUnavailable,
    InvalidInput,
    InvalidQuery,
    NotFound,
    RelevanceError,
)
from .schemas import (
    CatalogFilters,
    InteractionSignal,
    OrderLine,
    PersonalizationWeights,
    ProductRecord,
    RecommendationContext,
    RecommendationOutcome,
    ReviewSignal,
    SearchResult,
    SearchWeights,
    SimilarityWeights,
)
from .scoring_service import SimilarityScorer
from .search_service import SearchService
from .personalization_service import PersonalizationService

__all__ = [
    "RecommendationEngine",
    "SearchService",
    "SimilarityScorer",
    "PersonalizationService",
    "CatalogFilters",
    "InteractionSignal",
    "OrderLine",
    "PersonalizationWeights",
    "ProductRecord",
    "RecommendationContext",
    "RecommendationOutcome",
    "ReviewSignal",
    "SearchResult",
    "SearchWeights",
    "SimilarityWeights",
    "RelevanceError",
    "InvalidInput",
    "InvalidQuery",
    "NotFound",
    "CollaboratorUnavailable",
]
