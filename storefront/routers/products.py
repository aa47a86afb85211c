"""
Product API routes
"""
import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.core.config import settings
from storefront.core.dependencies import get_catalog, get_recommendation_engine
from storefront.engines.recommendation import CatalogFilters, NotFound, RecommendationEngine, RelevanceError
from storefront.engines.recommendation.accessors import CatalogAccessor
from storefront.schemas.products import ProductDetailResponse, ProductListResponse, RecommendationResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductListResponse)
async def get_products(
    collection: Optional[str] = Query(None),
    color: Optional[List[str]] = Query(None),
    size: Optional[List[str]] = Query(None),
    in_stock: Optional[bool] = Query(None),
    featured: Optional[bool] = Query(None),
    min_price: Optional[int] = Query(None, ge=0),
    max_price: Optional[int] = Query(None, ge=0),
    sort: Literal["catalog", "newest", "price-low", "price-high"] = Query("catalog"),
    catalog: CatalogAccessor = Depends(get_catalog),
):
    """Catalog listing with filters applied by the catalog accessor"""
    filters = CatalogFilters(
        collection=collection,
        colors=color,
        sizes=size,
        in_stock=in_stock,
        featured=featured,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
    )
    products = await catalog.list_products(filters)
    return ProductListResponse(items=products, total=len(products))


@router.get("/{slug}", response_model=ProductDetailResponse)
async def get_product(slug: str, catalog: CatalogAccessor = Depends(get_catalog)):
    """Get a single product by slug"""
    product = await catalog.get_product(slug)
    if product is None:
        raise NotFound("Product", slug)
    return ProductDetailResponse(product=product)


@router.get("/{slug}/related", response_model=RecommendationResponse)
async def get_related_products(
    slug: str,
    limit: int = Query(settings.default_recommendation_limit, ge=0, le=settings.max_recommendation_limit),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
):
    """Products similar to the one being viewed"""
    try:
        products = await engine.related_to(slug, limit)
        return RecommendationResponse(strategy="related", products=products, count=len(products))
    except RelevanceError:
        raise
    except Exception as e:
        logger.error(f"Error fetching related products for {slug}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching related products")
