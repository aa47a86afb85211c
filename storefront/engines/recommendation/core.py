"""
Recommendation Engine Core

Related-product and personalized recommendations over the current catalog
snapshot. Every call is a pure function of (catalog, interaction history,
inputs); nothing is cached between calls.
"""
import asyncio
import logging
from typing import List, Optional

from .accessors import CatalogAccessor, InteractionHistoryAccessor
from .exceptions import InvalidInput, NotFound
from .personalization_service import PersonalizationService
from .schemas import (
    PersonalizationWeights,
    ProductRecord,
    RecommendationContext,
    RecommendationOutcome,
)
from .scoring_service import SimilarityScorer, normalize

logger = logging.getLogger(__name__)


class RecommendationEngine:
    """
    Main Recommendation Engine

    Content similarity drives related products, so new products with no
    orders or reviews still show up there. Only personalized_for depends on
    behavioral history and returns None when a user has none.
    """

    def __init__(
        self,
        catalog: CatalogAccessor,
        interactions: InteractionHistoryAccessor,
        scorer: Optional[SimilarityScorer] = None,
        personalization_weights: Optional[PersonalizationWeights] = None,
    ):
        self.catalog = catalog
        self.interactions = interactions
        self.scorer = scorer or SimilarityScorer()
        self.personalization = PersonalizationService(personalization_weights)

    async def related_to(self, product_slug: str, limit: int = 4) -> List[ProductRecord]:
        """
        Products most similar to an anchor product

        Args:
            product_slug: Slug of the anchor product
            limit: Maximum number of products to return

        Returns:
            Similar products, best first, never including the anchor

        Raises:
            InvalidInput: if the slug is blank or limit is negative
            NotFound: if the anchor is not in the catalog
        """
        _check_limit(limit)
        if not product_slug or not product_slug.strip():
            raise InvalidInput("Product slug is required")

        anchor, products = await asyncio.gather(
            self.catalog.get_product(product_slug),
            self.catalog.list_products(),
        )
        if anchor is None:
            raise NotFound("Product", product_slug)

        scored = [
            (self.scorer.score_similarity(anchor, product), product)
            for product in products
            if product.slug != anchor.slug
        ]
        scored.sort(key=lambda item: (-item[0], item[1].slug))

        return [product for _, product in scored[:limit]]

    async def personalized_for(self, user_id: str, limit: int = 4) -> Optional[List[ProductRecord]]:
        """
        Products ranked by the user's purchase, wishlist and review affinity

        Args:
            user_id: The customer to personalize for
            limit: Maximum number of products to return

        Returns:
            None when the user has no history at all (callers fall back to
            featured products); otherwise a list of at most `limit` products,
            which is empty when the history matches nothing in the catalog

        Raises:
            InvalidInput: if the user id is blank or limit is negative
            NotFound: if the user does not exist
        """
        _check_limit(limit)
        if not user_id or not user_id.strip():
            raise InvalidInput("User id is required")

        if not await self.interactions.user_exists(user_id):
            raise NotFound("User", user_id)

        orders, wishlist, reviews, products, units_sold = await asyncio.gather(
            self.interactions.orders_for(user_id),
            self.interactions.wishlist_for(user_id),
            self.interactions.reviews_for(user_id),
            self.catalog.list_products(),
            self.interactions.units_sold(),
        )

        if not orders and not wishlist and not reviews:
            logger.info(f"No interaction history for user {user_id}")
            return None

        catalog = {product.slug: product for product in products}
        signal = self.personalization.build_signal(orders, wishlist, reviews, catalog)
        ranked = self.personalization.rank(products, signal, units_sold)
        return ranked[:limit]

    async def featured(self, limit: int = 4) -> List[ProductRecord]:
        """Non-personalized defaults: featured products first, then popular ones"""
        _check_limit(limit)
        products, units_sold = await asyncio.gather(
            self.catalog.list_products(),
            self.interactions.units_sold(),
        )
        return self.personalization.rank_by_popularity(products, units_sold)[:limit]

    async def recommend(self, context: RecommendationContext) -> RecommendationOutcome:
        """
        Generic entry point used by product pages and the storefront home

        An anchor product yields related products. A user yields personalized
        products, or featured defaults when the user has no history or no
        longer exists. With neither, featured defaults are returned. Excluded
        slugs are always removed and an optional collection is moved to the
        front.
        """
        # Over-fetch so exclusions never shrink the page below the limit
        fetch = context.limit + len(context.exclude)

        if context.anchor_slug:
            strategy, personalized = "related", False
            products = await self.related_to(context.anchor_slug, fetch)
        elif context.user_id:
            try:
                ranked = await self.personalized_for(context.user_id, fetch)
            except NotFound:
                # Stale identity on an optional-auth page: serve the anonymous defaults
                logger.warning(f"recommend: unknown user {context.user_id}, using featured products")
                ranked = None
            if ranked is None:
                strategy, personalized = "featured", False
                products = await self.featured(fetch)
            else:
                strategy, personalized = "personalized", True
                products = ranked
        else:
            strategy, personalized = "featured", False
            products = await self.featured(fetch)

        products = [p for p in products if p.slug not in context.exclude]
        if context.collection:
            wanted = normalize(context.collection)
            products = sorted(products, key=lambda p: normalize(p.collection) != wanted)

        logger.info(f"recommend strategy={strategy} returned {min(len(products), context.limit)} products")
        return RecommendationOutcome(
            strategy=strategy,
            personalized=personalized,
            products=products[: context.limit],
        )


def _check_limit(limit: int) -> None:
    if limit < 0:
        raise InvalidInput("limit must be zero or greater")
