"""
Unit tests for the Recommendation Engine
Tests related products, personalized recommendations and the recommend() entry point
"""
import pytest

from storefront.engines.recommendation import (
    CollaboratorUnavailable,
    InvalidInput,
    NotFound,
    OrderLine,
    RecommendationContext,
    RecommendationEngine,
    ReviewSignal,
)
from storefront.services.catalog import InMemoryCatalogAccessor
from storefront.services.interactions import InMemoryInteractionHistoryAccessor
from tests.factories import make_product


@pytest.fixture
def engine(catalog, interactions):
    return RecommendationEngine(catalog=catalog, interactions=interactions)


def slugs(products):
    return [product.slug for product in products]


class UnavailableCatalog:
    """Catalog whose backing store is down"""

    async def list_products(self, filters=None):
        raise CollaboratorUnavailable("catalog")

    async def get_product(self, slug):
        raise CollaboratorUnavailable("catalog")


class TestRelatedTo:
    """Tests for RecommendationEngine.related_to"""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_same_collection_ranks_first(self, engine):
        """Test the ranking for a Lunar anchor"""
        related = await engine.related_to("lunar-phase-hoodie", 10)

        # eclipse: collection, tag, price, sizes. classic: far price, color, sizes, featured.
        # The rest tie on far price and sizes and fall back to slug order.
        assert slugs(related) == [
            "lunar-eclipse-hoodie",
            "classic-black-hoodie",
            "core-gray-hoodie",
            "core-white-hoodie",
            "custom-embroidered-hoodie",
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, 1, 3, 5, 10])
    async def test_never_includes_anchor_and_respects_limit(self, engine, limit):
        """Test that the anchor is excluded and at most limit products come back"""
        related = await engine.related_to("classic-black-hoodie", limit)

        assert "classic-black-hoodie" not in slugs(related)
        assert len(related) == min(limit, 5)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_is_idempotent(self, engine):
        """Test that repeated calls give identical results"""
        first = await engine.related_to("core-white-hoodie", 4)
        second = await engine.related_to("core-white-hoodie", 4)

        assert first == second

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_new_product_without_history_is_recommended(self, interactions):
        """Test that a product with no orders or reviews still shows up as related"""
        catalog = InMemoryCatalogAccessor(
            [
                make_product("anchor", collection="Lunar", tags=["limited"]),
                make_product("brand-new", collection="Lunar", tags=["new"]),
            ]
        )
        engine = RecommendationEngine(catalog=catalog, interactions=interactions)

        assert slugs(await engine.related_to("anchor", 4)) == ["brand-new"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_single_product_catalog(self, interactions):
        """Test that an anchor with nothing else in the catalog yields an empty list"""
        engine = RecommendationEngine(
            catalog=InMemoryCatalogAccessor([make_product("only")]),
            interactions=interactions,
        )

        assert await engine.related_to("only", 4) == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_anchor_raises_not_found(self, engine):
        """Test that a missing anchor is NotFound"""
        with pytest.raises(NotFound) as exc_info:
            await engine.related_to("no-such-hoodie", 4)

        assert exc_info.value.kind == "Product"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_invalid_arguments(self, engine):
        """Test that blank slugs and negative limits are rejected"""
        with pytest.raises(InvalidInput):
            await engine.related_to("  ", 4)
        with pytest.raises(InvalidInput):
            await engine.related_to("classic-black-hoodie", -1)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_catalog_failure_propagates(self, interactions):
        """Test that a catalog outage surfaces as CollaboratorUnavailable"""
        engine = RecommendationEngine(catalog=UnavailableCatalog(), interactions=interactions)

        with pytest.raises(CollaboratorUnavailable):
            await engine.related_to("classic-black-hoodie", 4)


class TestPersonalizedFor:
    """Tests for RecommendationEngine.personalized_for"""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_history_returns_none(self, engine):
        """Test that a user without any history gets None"""
        assert await engine.personalized_for("newcomer", 4) is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_user_raises_not_found(self, engine):
        """Test that a user who does not exist is NotFound"""
        with pytest.raises(NotFound) as exc_info:
            await engine.personalized_for("ghost", 4)

        assert exc_info.value.kind == "User"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_lunar_purchase_favors_lunar(self, engine):
        """Test that a Lunar purchase puts Lunar products above Core ones"""
        products = await engine.personalized_for("lunar-fan", 4)

        assert products is not None
        assert len(products) <= 4
        assert slugs(products) == ["lunar-eclipse-hoodie", "classic-black-hoodie"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_purchased_products_are_excluded(self, engine):
        """Test that already purchased products are never recommended"""
        products = await engine.personalized_for("lunar-fan", 10)

        assert "lunar-phase-hoodie" not in slugs(products)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_low_rating_only_returns_empty_list(self, engine):
        """Test that history with no positive signal gives [] rather than None"""
        products = await engine.personalized_for("critic", 4)

        assert products == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_wishlisted_product_is_boosted(self, engine):
        """Test that a wishlisted product leads the recommendations"""
        products = await engine.personalized_for("saver", 4)

        assert slugs(products)[0] == "core-gray-hoodie"
        assert len(products) <= 4

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_positive_review_counts(self, catalog):
        """Test that a four-star review is enough to personalize"""
        interactions = InMemoryInteractionHistoryAccessor(
            reviews={"fan": [ReviewSignal(product_slug="lunar-eclipse-hoodie", rating=4)]},
        )
        engine = RecommendationEngine(catalog=catalog, interactions=interactions)

        products = await engine.personalized_for("fan", 4)

        # Only purchases are excluded, so the reviewed product itself can come back
        assert slugs(products)[:2] == ["lunar-eclipse-hoodie", "lunar-phase-hoodie"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_limit_zero(self, engine):
        """Test that a zero limit still distinguishes no history from some history"""
        assert await engine.personalized_for("newcomer", 0) is None
        assert await engine.personalized_for("lunar-fan", 0) == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_history_for_removed_product(self, catalog):
        """Test that orders for products no longer sold still count as history"""
        interactions = InMemoryInteractionHistoryAccessor(
            orders={"old-customer": [OrderLine(product_slug="discontinued-tee")]},
        )
        engine = RecommendationEngine(catalog=catalog, interactions=interactions)

        assert await engine.personalized_for("old-customer", 4) == []


class TestFeaturedAndRecommend:
    """Tests for featured defaults and the recommend() entry point"""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_featured_products_first(self, engine):
        """Test that featured products lead the default ordering"""
        products = await engine.featured(3)

        assert slugs(products)[:2] == ["classic-black-hoodie", "lunar-phase-hoodie"]
        assert len(products) == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_anchor_uses_related_strategy(self, engine):
        """Test that an anchor product selects related recommendations"""
        outcome = await engine.recommend(RecommendationContext(anchor_slug="lunar-phase-hoodie", limit=2))

        assert outcome.strategy == "related"
        assert outcome.personalized is False
        assert slugs(outcome.products) == ["lunar-eclipse-hoodie", "classic-black-hoodie"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_exclusions_do_not_shrink_the_page(self, engine):
        """Test that excluded products are removed and replaced"""
        outcome = await engine.recommend(
            RecommendationContext(anchor_slug="lunar-phase-hoodie", limit=2, exclude={"lunar-eclipse-hoodie"})
        )

        assert slugs(outcome.products) == ["classic-black-hoodie", "core-gray-hoodie"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_user_with_history_is_personalized(self, engine):
        """Test that a user with history gets personalized recommendations"""
        outcome = await engine.recommend(RecommendationContext(user_id="lunar-fan", limit=4))

        assert outcome.strategy == "personalized"
        assert outcome.personalized is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_user_without_history_falls_back_to_featured(self, engine):
        """Test that None from personalization means featured defaults"""
        outcome = await engine.recommend(RecommendationContext(user_id="newcomer", limit=4))

        assert outcome.strategy == "featured"
        assert outcome.personalized is False
        assert slugs(outcome.products)[0] == "classic-black-hoodie"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_user_falls_back_to_featured(self, engine):
        """Test that a user who no longer exists gets featured defaults, not an error"""
        outcome = await engine.recommend(RecommendationContext(user_id="ghost", limit=4))

        assert outcome.strategy == "featured"
        assert outcome.personalized is False
        assert slugs(outcome.products) == slugs(await engine.featured(4))

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_collection_moves_to_front(self, engine):
        """Test that the requested collection is shown first"""
        outcome = await engine.recommend(RecommendationContext(limit=6, collection="lunar"))

        assert [p.collection for p in outcome.products[:2]] == ["Lunar", "Lunar"]
        assert len(outcome.products) == 6
