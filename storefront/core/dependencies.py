"""
FastAPI dependencies wiring accessors and engines together

Each request gets fresh accessors over the shared session factory, so the
catalog is re-read on every call. Tests override get_catalog,
get_interactions and get_search_history with in-memory fixtures.
"""
from fastapi import Depends

from storefront.core.config import settings
from storefront.core.database import get_session_factory
from storefront.engines.recommendation import RecommendationEngine, SearchService, SimilarityScorer
from storefront.engines.recommendation.accessors import (
    CatalogAccessor,
    InteractionHistoryAccessor,
    SearchHistorySink,
)
from storefront.services.catalog import SqlCatalogAccessor
from storefront.services.interactions import SqlInteractionHistoryAccessor
from storefront.services.search_history import SqlSearchHistorySink


def get_catalog() -> CatalogAccessor:
    return SqlCatalogAccessor(get_session_factory())


def get_interactions() -> InteractionHistoryAccessor:
    return SqlInteractionHistoryAccessor(get_session_factory())


def get_search_history() -> SearchHistorySink:
    return SqlSearchHistorySink(get_session_factory())


def get_scorer() -> SimilarityScorer:
    return SimilarityScorer(
        search_weights=settings.search_weights,
        similarity_weights=settings.similarity_weights,
    )


def get_search_service(
    catalog: CatalogAccessor = Depends(get_catalog),
    scorer: SimilarityScorer = Depends(get_scorer),
) -> SearchService:
    return SearchService(
        catalog=catalog,
        scorer=scorer,
        suggestion_limit=settings.suggestion_limit,
        min_suggestion_length=settings.min_suggestion_length,
        popular_searches=settings.popular_searches,
        popular_search_limit=settings.popular_search_limit,
    )


def get_recommendation_engine(
    catalog: CatalogAccessor = Depends(get_catalog),
    interactions: InteractionHistoryAccessor = Depends(get_interactions),
    scorer: SimilarityScorer = Depends(get_scorer),
) -> RecommendationEngine:
    return RecommendationEngine(
        catalog=catalog,
        interactions=interactions,
        scorer=scorer,
        personalization_weights=settings.personalization_weights,
    )
