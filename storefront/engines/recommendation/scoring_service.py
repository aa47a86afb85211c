"""
Similarity Scorer

Shared scoring primitives for search and recommendations: text relevance of a
query against a product, and content similarity between two products.
"""
from typing import Iterable, List, Optional, Tuple

from .schemas import ProductRecord, SearchWeights, SimilarityWeights

EXACT = "exact"
PREFIX = "prefix"
SUBSTRING = "substring"

# Fields in the order they are checked; matched_in follows this order
TEXT_FIELDS = ("title", "tag", "collection", "color", "size", "description", "fabric", "care", "shipping")

BESTSELLER_TAG = "bestseller"


def normalize(text: Optional[str]) -> str:
    """Lowercase, trim and collapse internal whitespace"""
    if not text:
        return ""
    return " ".join(text.lower().split())


def match_kind(query: str, text: str) -> Optional[str]:
    """
    Classify how a normalized query matches a normalized field value

    Returns:
        EXACT, PREFIX, SUBSTRING, or None when the query does not occur
    """
    if not query or not text or query not in text:
        return None
    if text == query:
        return EXACT
    if text.startswith(query):
        return PREFIX
    return SUBSTRING


def best_match_kind(query: str, values: Iterable[str]) -> Optional[str]:
    """Best match kind across the elements of a list field"""
    best = None
    for value in values:
        kind = match_kind(query, normalize(value))
        if kind == EXACT:
            return EXACT
        if kind == PREFIX or (kind == SUBSTRING and best is None):
            best = kind
    return best


class SimilarityScorer:
    """Scores products against queries and against each other"""

    def __init__(
        self,
        search_weights: Optional[SearchWeights] = None,
        similarity_weights: Optional[SimilarityWeights] = None,
    ):
        self.search_weights = search_weights or SearchWeights()
        self.similarity_weights = similarity_weights or SimilarityWeights()

    def kind_score(self, field: str, kind: Optional[str]) -> float:
        """Field weight scaled by how well the query matched"""
        if kind is None:
            return 0.0
        weight = self.search_weights.field_weight(field)
        score = weight
        if kind in (EXACT, PREFIX):
            score += weight * self.search_weights.prefix_bonus
        if kind == EXACT:
            score += weight * self.search_weights.exact_bonus
        return score

    def _field_values(self, product: ProductRecord, field: str) -> List[str]:
        if field == "tag":
            return list(product.tags)
        if field == "color":
            return list(product.colors)
        if field == "size":
            return list(product.sizes)
        return [getattr(product, field)]

    def score_text_match(self, query: str, product: ProductRecord) -> Tuple[float, List[str]]:
        """
        Score a free-text query against every searchable field of a product

        Contributions from different fields are summed. A list field
        (tags, colors, sizes) contributes once, using its best element.

        Args:
            query: Raw query text
            product: Product to score

        Returns:
            (score, matched_in) where matched_in names the contributing fields
        """
        normalized = normalize(query)
        if not normalized:
            return 0.0, []

        score = 0.0
        matched_in: List[str] = []
        for field in TEXT_FIELDS:
            kind = best_match_kind(normalized, self._field_values(product, field))
            contribution = self.kind_score(field, kind)
            if contribution > 0:
                score += contribution
                matched_in.append(field)

        return score, matched_in

    def score_suggestion(self, partial: str, text: str, field: str) -> float:
        """Score a typeahead candidate with the same weights as full search"""
        return self.kind_score(field, match_kind(normalize(partial), normalize(text)))

    def score_similarity(self, anchor: ProductRecord, candidate: ProductRecord) -> float:
        """
        Content similarity of a candidate to an anchor product

        Not symmetric: the price tolerance is measured against the anchor's
        price, so score_similarity(a, b) may differ from score_similarity(b, a).
        """
        w = self.similarity_weights
        score = 0.0

        if normalize(anchor.collection) == normalize(candidate.collection):
            score += w.same_collection

        shared_tags = _shared(anchor.tags, candidate.tags)
        score += min(len(shared_tags), w.max_shared_tags) * w.shared_tag

        price_diff = abs(anchor.price - candidate.price)
        if price_diff <= anchor.price * w.near_price_tolerance:
            score += w.near_price
        elif price_diff <= anchor.price * w.far_price_tolerance:
            score += w.far_price

        score += len(_shared(anchor.colors, candidate.colors)) * w.shared_color

        shared_sizes = _shared(anchor.sizes, candidate.sizes)
        score += min(len(shared_sizes), w.max_shared_sizes) * w.shared_size

        if anchor.featured and candidate.featured:
            score += w.both_featured
        if BESTSELLER_TAG in shared_tags:
            score += w.both_bestseller

        return score


def _shared(left: Iterable[str], right: Iterable[str]) -> set:
    return {normalize(v) for v in left if v and v.strip()} & {normalize(v) for v in right if v and v.strip()}
