"""
Personalization Service

Builds a user's InteractionSignal from purchase, wishlist and review history
and scores catalog products against it.
"""
import logging
from bisect import bisect_left
from typing import Dict, Iterable, List, Optional

from .schemas import (
    InteractionSignal,
    OrderLine,
    PersonalizationWeights,
    ProductRecord,
    ReviewSignal,
)
from .scoring_service import BESTSELLER_TAG, normalize

logger = logging.getLogger(__name__)

NEW_TAG = "new"


class PersonalizationService:
    """Service for behavioral affinity scoring"""

    def __init__(self, weights: Optional[PersonalizationWeights] = None):
        self.weights = weights or PersonalizationWeights()

    def price_band(self, price: int) -> int:
        """Index of the price band a price falls into"""
        return bisect_left(self.weights.price_band_edges, price)

    def build_signal(
        self,
        orders: Iterable[OrderLine],
        wishlist: Iterable[str],
        reviews: Iterable[ReviewSignal],
        catalog: Dict[str, ProductRecord],
    ) -> InteractionSignal:
        """
        Aggregate history into collection, tag, color and price-band affinities

        Purchases weigh most, then wishlist entries, then positive reviews.
        Reviews below min_positive_rating add nothing. History that points at
        products no longer in the catalog still marks them purchased or
        wishlisted but carries no attributes.
        """
        w = self.weights
        signal = InteractionSignal()

        for line in orders:
            signal.purchased.add(line.product_slug)
            self._reinforce(signal, catalog.get(line.product_slug), w.purchase)

        for slug in wishlist:
            signal.wishlisted.add(slug)
            self._reinforce(signal, catalog.get(slug), w.wishlist)

        for review in reviews:
            if review.rating >= w.min_positive_rating:
                self._reinforce(signal, catalog.get(review.product_slug), w.review)

        return signal

    def _reinforce(self, signal: InteractionSignal, product: Optional[ProductRecord], weight: float) -> None:
        if product is None:
            return
        _bump(signal.collections, [normalize(product.collection)], weight)
        _bump(signal.tags, {normalize(tag) for tag in product.tags}, weight)
        _bump(signal.colors, {normalize(color) for color in product.colors}, weight)
        band = self.price_band(product.price)
        signal.price_bands[band] = signal.price_bands.get(band, 0.0) + weight

    def affinity(self, product: ProductRecord, signal: InteractionSignal) -> float:
        """How strongly a product matches the user's inferred preferences"""
        w = self.weights
        score = w.collection_affinity * signal.collections.get(normalize(product.collection), 0.0)
        score += w.tag_affinity * sum(signal.tags.get(tag, 0.0) for tag in {normalize(t) for t in product.tags})
        score += w.color_affinity * sum(
            signal.colors.get(color, 0.0) for color in {normalize(c) for c in product.colors}
        )
        score += w.price_band_affinity * signal.price_bands.get(self.price_band(product.price), 0.0)
        if product.slug in signal.wishlisted:
            score += w.wishlist_item_boost
        return score

    def popularity_tiebreak(self, product: ProductRecord) -> int:
        """Featured and merchandising-tag score used to break ties"""
        w = self.weights
        tags = {normalize(tag) for tag in product.tags}
        score = 0
        if product.featured:
            score += w.featured_bonus
        if BESTSELLER_TAG in tags:
            score += w.bestseller_bonus
        if NEW_TAG in tags:
            score += w.new_bonus
        return score

    def rank(
        self,
        products: List[ProductRecord],
        signal: InteractionSignal,
        units_sold: Dict[str, int],
    ) -> List[ProductRecord]:
        """
        Rank candidates by affinity, dropping purchased and unrelated products

        Returns:
            Products with positive affinity, best first (may be empty)
        """
        scored = []
        for product in products:
            if product.slug in signal.purchased:
                continue
            score = self.affinity(product, signal)
            if score > 0:
                scored.append((score, product))

        scored.sort(
            key=lambda item: (
                -item[0],
                -self.popularity_tiebreak(item[1]),
                -units_sold.get(item[1].slug, 0),
                item[1].slug,
            )
        )
        logger.info(f"Personalized ranking kept {len(scored)} of {len(products)} candidates")
        return [product for _, product in scored]

    def rank_by_popularity(self, products: List[ProductRecord], units_sold: Dict[str, int]) -> List[ProductRecord]:
        """Non-personalized order: featured first, then merchandising tags, then sales"""
        return sorted(
            products,
            key=lambda p: (not p.featured, -self.popularity_tiebreak(p), -units_sold.get(p.slug, 0), p.slug),
        )


def _bump(target: Dict[str, float], keys: Iterable[str], weight: float) -> None:
    for key in keys:
        if key:
            target[key] = target.get(key, 0.0) + weight
