"""
Shared pytest fixtures and configuration for all tests
"""
import os

# Settings are read at import time, so point them at SQLite before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest

from storefront.engines.recommendation import OrderLine, ReviewSignal
from storefront.services.catalog import InMemoryCatalogAccessor
from storefront.services.interactions import InMemoryInteractionHistoryAccessor
from storefront.services.search_history import InMemorySearchHistorySink
from tests.factories import make_product


@pytest.fixture
def scenario_products():
    """The two-product catalog from the storefront's search walkthrough"""
    return [
        make_product(
            "classic-black-hoodie",
            title="Classic Black Hoodie",
            tags=["bestseller", "core"],
            collection="Core",
            price=8900,
        ),
        make_product(
            "lunar-phase-hoodie",
            title="Lunar Phase Hoodie",
            tags=["limited", "new"],
            collection="Lunar",
            price=11900,
        ),
    ]


@pytest.fixture
def catalog_products():
    """A small storefront catalog across all three collections"""
    return [
        make_product(
            "classic-black-hoodie",
            title="Classic Black Hoodie",
            tags=["bestseller", "core"],
            colors=["Black"],
            featured=True,
        ),
        make_product("core-white-hoodie", title="Core White Hoodie", tags=["core"], colors=["White"]),
        make_product("core-gray-hoodie", title="Core Gray Hoodie", tags=["core"], colors=["Gray"], price=8500),
        make_product(
            "lunar-phase-hoodie",
            title="Lunar Phase Hoodie",
            collection="Lunar",
            tags=["limited", "new"],
            colors=["Black"],
            price=11900,
            featured=True,
        ),
        make_product(
            "lunar-eclipse-hoodie",
            title="Lunar Eclipse Hoodie",
            collection="Lunar",
            tags=["limited"],
            colors=["Peach"],
            price=12500,
        ),
        make_product(
            "custom-embroidered-hoodie",
            title="Custom Embroidered Hoodie",
            collection="Customizable",
            tags=["custom"],
            colors=["Orange"],
            sizes=["S", "M", "L"],
            price=14900,
            in_stock=False,
        ),
    ]


@pytest.fixture
def catalog(catalog_products):
    return InMemoryCatalogAccessor(catalog_products)


@pytest.fixture
def interactions():
    """Users: lunar-fan bought a Lunar hoodie, newcomer has no history"""
    return InMemoryInteractionHistoryAccessor(
        users=["newcomer", "lunar-fan", "critic", "saver"],
        orders={
            "lunar-fan": [OrderLine(product_slug="lunar-phase-hoodie", quantity=1, price=11900)],
            "repeat-buyer": [OrderLine(product_slug="classic-black-hoodie", quantity=3, price=8900)],
        },
        wishlists={"saver": ["core-gray-hoodie"]},
        reviews={"critic": [ReviewSignal(product_slug="core-white-hoodie", rating=2)]},
    )


@pytest.fixture
def search_history():
    return InMemorySearchHistorySink()
