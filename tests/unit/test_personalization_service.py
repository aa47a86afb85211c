"""
Unit tests for the Personalization Service
"""
import pytest

from storefront.engines.recommendation import (
    OrderLine,
    PersonalizationService,
    PersonalizationWeights,
    ReviewSignal,
)
from tests.factories import make_product


@pytest.fixture
def service():
    return PersonalizationService()


@pytest.fixture
def by_slug(catalog_products):
    return {product.slug: product for product in catalog_products}


class TestPriceBands:

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "price,band",
        [(0, 0), (6000, 0), (6001, 1), (8900, 1), (9000, 1), (11900, 2), (12000, 2), (12500, 3), (99900, 3)],
    )
    def test_price_band_edges(self, service, price, band):
        """Test that each edge is the inclusive upper bound of its band"""
        assert service.price_band(price) == band


class TestBuildSignal:

    @pytest.mark.unit
    def test_purchase_outweighs_wishlist(self, service, by_slug):
        """Test signal weights for purchases and wishlist entries"""
        signal = service.build_signal(
            orders=[OrderLine(product_slug="lunar-phase-hoodie")],
            wishlist=["core-gray-hoodie"],
            reviews=[],
            catalog=by_slug,
        )

        assert signal.collections == {"lunar": 3.0, "core": 2.0}
        assert signal.tags == {"limited": 3.0, "new": 3.0, "core": 2.0}
        assert signal.colors == {"black": 3.0, "gray": 2.0}
        assert signal.price_bands == {2: 3.0, 1: 2.0}
        assert signal.purchased == {"lunar-phase-hoodie"}
        assert signal.wishlisted == {"core-gray-hoodie"}

    @pytest.mark.unit
    def test_low_ratings_are_ignored(self, service, by_slug):
        """Test that reviews below four stars add nothing"""
        signal = service.build_signal(
            orders=[],
            wishlist=[],
            reviews=[
                ReviewSignal(product_slug="core-white-hoodie", rating=3),
                ReviewSignal(product_slug="lunar-eclipse-hoodie", rating=5),
            ],
            catalog=by_slug,
        )

        assert signal.collections == {"lunar": 1.0}

    @pytest.mark.unit
    def test_unknown_products_carry_no_attributes(self, service, by_slug):
        """Test that history for products missing from the catalog only marks them"""
        signal = service.build_signal(
            orders=[OrderLine(product_slug="retired")],
            wishlist=["also-retired"],
            reviews=[],
            catalog=by_slug,
        )

        assert signal.collections == {}
        assert signal.purchased == {"retired"}
        assert signal.wishlisted == {"also-retired"}


class TestRanking:

    @pytest.mark.unit
    def test_affinity_components(self, service, by_slug):
        """Test that affinity combines collection, tag, color and price band"""
        signal = service.build_signal([OrderLine(product_slug="lunar-phase-hoodie")], [], [], by_slug)

        assert service.affinity(by_slug["lunar-eclipse-hoodie"], signal) == pytest.approx(4.5)
        assert service.affinity(by_slug["classic-black-hoodie"], signal) == pytest.approx(0.9)
        assert service.affinity(by_slug["core-white-hoodie"], signal) == 0

    @pytest.mark.unit
    def test_ties_break_on_popularity_then_sales(self, service):
        """Test the tie-break order for equal affinity"""
        plain = make_product("a-plain", collection="Lunar")
        popular = make_product("b-popular", collection="Lunar", tags=["bestseller"])
        best_selling = make_product("c-best-selling", collection="Lunar")
        catalog = {p.slug: p for p in (plain, popular, best_selling)}
        signal = service.build_signal([], [], [ReviewSignal(product_slug="a-plain", rating=5)], catalog)

        ranked = service.rank(list(catalog.values()), signal, {"c-best-selling": 7})

        assert [p.slug for p in ranked] == ["b-popular", "c-best-selling", "a-plain"]

    @pytest.mark.unit
    def test_custom_weights(self, by_slug):
        """Test that a zero wishlist boost leaves only attribute affinity"""
        service = PersonalizationService(PersonalizationWeights(wishlist_item_boost=0.0))
        signal = service.build_signal([], ["core-gray-hoodie"], [], by_slug)

        assert service.affinity(by_slug["core-gray-hoodie"], signal) == pytest.approx(4.4)

    @pytest.mark.unit
    def test_popularity_order(self, service, catalog_products):
        """Test the non-personalized featured ordering"""
        ranked = service.rank_by_popularity(catalog_products, {"core-white-hoodie": 5})

        assert [p.slug for p in ranked][:3] == ["classic-black-hoodie", "lunar-phase-hoodie", "core-white-hoodie"]
