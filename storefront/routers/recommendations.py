"""
Recommendation API routes
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.core.auth import get_current_user_id, get_optional_user_id
from storefront.core.config import settings
from storefront.core.dependencies import get_recommendation_engine
from storefront.engines.recommendation import RecommendationContext, RecommendationEngine, RelevanceError
from storefront.schemas.products import RecommendationResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recommendations", tags=["recommendations"])


@router.get("", response_model=RecommendationResponse)
async def get_recommendations(
    product: Optional[str] = Query(None, description="Anchor product slug"),
    collection: Optional[str] = Query(None, description="Collection to show first"),
    exclude: Optional[List[str]] = Query(None),
    limit: int = Query(settings.default_recommendation_limit, ge=0, le=settings.max_recommendation_limit),
    user_id: Optional[str] = Depends(get_optional_user_id),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
):
    """
    Recommendations for product pages and the storefront home

    A product slug gives related products; otherwise a signed-in customer gets
    personalized products, and everyone else gets featured products.
    """
    context = RecommendationContext(
        anchor_slug=product,
        user_id=user_id,
        limit=limit,
        exclude=set(exclude or []),
        collection=collection,
    )
    try:
        outcome = await engine.recommend(context)
    except RelevanceError:
        raise
    except Exception as e:
        logger.error(f"Error building recommendations: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching recommendations")

    return RecommendationResponse(
        strategy=outcome.strategy,
        personalized=outcome.personalized,
        products=outcome.products,
        count=len(outcome.products),
    )


@router.get("/personalized", response_model=RecommendationResponse)
async def get_personalized_recommendations(
    limit: int = Query(settings.default_recommendation_limit, ge=0, le=settings.max_recommendation_limit),
    user_id: str = Depends(get_current_user_id),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
):
    """
    Personalized picks for the signed-in customer

    personalized=false means the customer has no history yet and the
    products are the featured fallback.
    """
    try:
        products = await engine.personalized_for(user_id, limit)
        if products is None:
            products = await engine.featured(limit)
            return RecommendationResponse(strategy="featured", personalized=False, products=products, count=len(products))
    except RelevanceError:
        raise
    except Exception as e:
        logger.error(f"Error fetching personalized recommendations for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching recommendations")

    return RecommendationResponse(strategy="personalized", personalized=True, products=products, count=len(products))
