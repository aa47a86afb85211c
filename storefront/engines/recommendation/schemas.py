"""
Pydantic schemas for the search and recommendation engines
"""
from typing import Dict, List, Literal, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

# ==================== Catalog records ====================


class ProductRecord(BaseModel):
    """Read-only product snapshot used for scoring"""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    slug: str = Field(min_length=1)
    title: str
    description: str = ""
    price: int = Field(ge=0, description="Price in minor currency units (cents)")
    currency: str = "CAD"
    collection: str
    images: List[str] = Field(default_factory=list)
    in_stock: bool = True
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    fabric: str = ""
    care: str = ""
    shipping: str = ""
    featured: bool = False
    total_stock: Optional[int] = None


class CatalogFilters(BaseModel):
    """Listing filters, applied by the catalog accessor (never by scoring)"""

    collection: Optional[str] = None
    colors: Optional[List[str]] = None
    sizes: Optional[List[str]] = None
    in_stock: Optional[bool] = None
    featured: Optional[bool] = None
    min_price: Optional[int] = Field(default=None, ge=0)
    max_price: Optional[int] = Field(default=None, ge=0)
    # "catalog" keeps insertion order, which search relies on for tie-breaks
    sort: Literal["catalog", "newest", "price-low", "price-high"] = "catalog"


# ==================== Interaction history ====================


class OrderLine(BaseModel):
    """One purchased line item"""

    model_config = ConfigDict(frozen=True)

    product_slug: str
    quantity: int = Field(default=1, ge=1)
    price: int = Field(default=0, ge=0)


class ReviewSignal(BaseModel):
    """A rating a user left on a product"""

    model_config = ConfigDict(frozen=True)

    product_slug: str
    rating: int = Field(ge=1, le=5)


class InteractionSignal(BaseModel):
    """Per-user affinity aggregate, built on demand from history"""

    collections: Dict[str, float] = Field(default_factory=dict)
    tags: Dict[str, float] = Field(default_factory=dict)
    colors: Dict[str, float] = Field(default_factory=dict)
    price_bands: Dict[int, float] = Field(default_factory=dict)
    purchased: Set[str] = Field(default_factory=set)
    wishlisted: Set[str] = Field(default_factory=set)


# ==================== Scoring configuration ====================


class SearchWeights(BaseModel):
    """Per-field search weights, plus exact and prefix bonuses"""

    title: float = 100.0
    tag: float = 40.0
    collection: float = 80.0
    color: float = 60.0
    size: float = 60.0
    description: float = 20.0
    fabric: float = 10.0
    care: float = 10.0
    shipping: float = 10.0

    # Bonuses as a fraction of the field weight. An exact match is also a prefix match.
    exact_bonus: float = Field(default=0.5, ge=0.0)
    prefix_bonus: float = Field(default=0.25, ge=0.0)

    def field_weight(self, field: str) -> float:
        return getattr(self, field)


class SimilarityWeights(BaseModel):
    """Weights for product-to-product similarity"""

    same_collection: float = 50.0
    shared_tag: float = 5.0
    max_shared_tags: int = Field(default=3, ge=0)
    near_price: float = 30.0
    near_price_tolerance: float = Field(default=0.20, ge=0.0)
    far_price: float = 15.0
    far_price_tolerance: float = Field(default=0.40, ge=0.0)
    shared_color: float = 10.0
    shared_size: float = 2.0
    max_shared_sizes: int = Field(default=3, ge=0)
    both_featured: float = 10.0
    both_bestseller: float = 10.0


class PersonalizationWeights(BaseModel):
    """Signal and affinity weights for personalized recommendations"""

    purchase: float = 3.0
    wishlist: float = 2.0
    review: float = 1.0
    min_positive_rating: int = Field(default=4, ge=1, le=5)

    collection_affinity: float = 1.0
    tag_affinity: float = 0.5
    color_affinity: float = 0.3
    price_band_affinity: float = 0.4
    wishlist_item_boost: float = 5.0

    # Upper bounds (minor units) of each price band; the last band is open-ended
    price_band_edges: List[int] = Field(default_factory=lambda: [6000, 9000, 12000])

    # Popularity tiebreak for sparse histories and featured defaults
    featured_bonus: int = 3
    bestseller_bonus: int = 2
    new_bonus: int = 1


# ==================== Results ====================


class SearchResult(BaseModel):
    """One product matched by a search query"""

    product: ProductRecord
    match_score: float = Field(ge=0.0)
    matched_in: List[str] = Field(default_factory=list)


class RecommendationContext(BaseModel):
    """Input for the generic recommend() entry point"""

    anchor_slug: Optional[str] = None
    user_id: Optional[str] = None
    limit: int = Field(default=4, ge=0)
    exclude: Set[str] = Field(default_factory=set)
    collection: Optional[str] = None


class RecommendationOutcome(BaseModel):
    """Result of recommend(): which strategy ran and what it produced"""

    strategy: Literal["related", "personalized", "featured"]
    personalized: bool = False
    products: List[ProductRecord] = Field(default_factory=list)
