"""
Search Service for Product Discovery

Ranks catalog products against free-text queries and produces typeahead
suggestions. The service is pure apart from the catalog read: recording
search analytics is left to the caller.
"""
import logging
from typing import Dict, List, Optional, Tuple

from .accessors import CatalogAccessor
from .exceptions import InvalidQuery
from .schemas import ProductRecord, SearchResult
from .scoring_service import SimilarityScorer, normalize

logger = logging.getLogger(__name__)


class SearchService:
    """Service for product search and typeahead suggestions"""

    def __init__(
        self,
        catalog: CatalogAccessor,
        scorer: Optional[SimilarityScorer] = None,
        suggestion_limit: int = 8,
        min_suggestion_length: int = 2,
        popular_searches: Optional[List[str]] = None,
        popular_search_limit: int = 5,
    ):
        self.catalog = catalog
        self.scorer = scorer or SimilarityScorer()
        self.suggestion_limit = suggestion_limit
        self.min_suggestion_length = min_suggestion_length
        self._popular_searches = list(popular_searches or [])
        self.popular_search_limit = popular_search_limit

    async def search(self, query: Optional[str]) -> List[SearchResult]:
        """
        Search every catalog product, in stock or not

        Out-of-stock products stay searchable (customers may join a restock
        waitlist); they only sort after in-stock products of equal score.

        Args:
            query: Free-text query

        Returns:
            Results with a non-zero score, best first

        Raises:
            InvalidQuery: if the query is missing or blank
        """
        normalized = normalize(query)
        if not normalized:
            raise InvalidQuery()

        products = await self.catalog.list_products()
        return self.rank(normalized, products)

    def rank(self, query: str, products: List[ProductRecord]) -> List[SearchResult]:
        """Score and order products for an already validated query"""
        scored: List[Tuple[int, SearchResult]] = []
        for index, product in enumerate(products):
            score, matched_in = self.scorer.score_text_match(query, product)
            if score <= 0:
                continue
            scored.append((index, SearchResult(product=product, match_score=score, matched_in=matched_in)))

        scored.sort(key=lambda item: (-item[1].match_score, not item[1].product.in_stock, item[0]))

        logger.info(f"Search '{query}' matched {len(scored)} of {len(products)} products")
        return [result for _, result in scored]

    async def suggestions(self, partial_query: Optional[str]) -> List[str]:
        """
        Typeahead completions for a partial query

        Candidates are product titles, tag names, collection names and colors.
        Queries shorter than min_suggestion_length get the popular searches.

        Args:
            partial_query: What the customer has typed so far

        Returns:
            Deduplicated completions, highest confidence first
        """
        partial = normalize(partial_query)
        if len(partial) < self.min_suggestion_length:
            return self.popular_searches()

        products = await self.catalog.list_products()

        # normalized text -> (score, first seen position, display text)
        best: Dict[str, Tuple[float, int, str]] = {}
        position = 0
        for field, text in self._suggestion_candidates(products):
            score = self.scorer.score_suggestion(partial, text, field)
            if score > 0:
                key = normalize(text)
                current = best.get(key)
                if current is None:
                    best[key] = (score, position, text)
                elif score > current[0]:
                    best[key] = (score, current[1], current[2])
            position += 1

        ranked = sorted(best.values(), key=lambda item: (-item[0], item[1]))
        return [text for _, _, text in ranked[: self.suggestion_limit]]

    def popular_searches(self) -> List[str]:
        """Fallback suggestions shown before the customer types enough"""
        return self._popular_searches[: self.popular_search_limit]

    def _suggestion_candidates(self, products: List[ProductRecord]):
        for product in products:
            yield "title", product.title
        for product in products:
            for tag in product.tags:
                yield "tag", tag
        for product in products:
            yield "collection", product.collection
        for product in products:
            for color in product.colors:
                yield "color", color
