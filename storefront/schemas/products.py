"""
Pydantic schemas for product, search and recommendation API endpoints
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from storefront.engines.recommendation.schemas import ProductRecord, SearchResult


class ProductListResponse(BaseModel):
    """Filtered catalog listing"""
    items: List[ProductRecord]
    total: int = Field(ge=0)


class ProductDetailResponse(BaseModel):
    """Single product"""
    product: ProductRecord


class SearchResponse(BaseModel):
    """Ranked search results"""
    query: str
    results: List[SearchResult]
    count: int = Field(ge=0)
    search_id: Optional[int] = Field(default=None, description="Search history record, used to attribute clicks")


class SuggestionsResponse(BaseModel):
    """Typeahead completions"""
    suggestions: List[str]


class SearchClickRequest(BaseModel):
    """A customer picked a product from search results"""
    query: str = Field(min_length=1)
    product_slug: str = Field(min_length=1)
    search_id: Optional[int] = None


class SearchClickResponse(BaseModel):
    success: bool
    search_id: Optional[int] = None


class RecommendationResponse(BaseModel):
    """Recommended products and whether they were personalized"""
    strategy: str
    personalized: bool = False
    products: List[ProductRecord]
    count: int = Field(ge=0)
