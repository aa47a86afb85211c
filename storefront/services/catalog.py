"""
Catalog accessors

SqlCatalogAccessor reads the products table; InMemoryCatalogAccessor serves a
fixed list (fixtures, tests, seeded demos). Both hand out frozen
ProductRecord snapshots so the engines can never mutate the catalog.
"""
import logging
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from storefront.database.models import Product
from storefront.engines.recommendation.exceptions import CollaboratorUnavailable
from storefront.engines.recommendation.schemas import CatalogFilters, ProductRecord

logger = logging.getLogger(__name__)


def to_record(product: Product) -> ProductRecord:
    """Convert a Product row into a scoring snapshot"""
    return ProductRecord(
        slug=product.slug,
        title=product.title,
        description=product.description or "",
        price=product.price,
        currency=product.currency or "CAD",
        collection=product.collection,
        images=list(product.images or []),
        in_stock=bool(product.in_stock),
        sizes=list(product.sizes or []),
        colors=list(product.colors or []),
        tags=list(product.tags or []),
        fabric=product.fabric or "",
        care=product.care or "",
        shipping=product.shipping or "",
        featured=bool(product.featured),
        total_stock=product.total_stock,
    )


def apply_list_filters(products: Iterable[ProductRecord], filters: CatalogFilters) -> List[ProductRecord]:
    """Color and size filters: a product passes if it offers any requested option"""
    filtered = list(products)

    if filters.colors:
        wanted = {c.lower() for c in filters.colors}
        filtered = [p for p in filtered if any(c.lower() in wanted for c in p.colors)]

    if filters.sizes:
        wanted = {s.lower() for s in filters.sizes}
        filtered = [p for p in filtered if any(s.lower() in wanted for s in p.sizes)]

    return filtered


class SqlCatalogAccessor:
    """Catalog accessor backed by the products table"""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def list_products(self, filters: Optional[CatalogFilters] = None) -> List[ProductRecord]:
        """
        Fetch the catalog, optionally filtered

        Scalar filters run in SQL; color and size filters run over the JSON
        option lists after loading.
        """
        filters = filters or CatalogFilters()
        query = select(Product)

        if filters.collection:
            query = query.where(Product.collection == filters.collection)
        if filters.in_stock is not None:
            query = query.where(Product.in_stock == filters.in_stock)
        if filters.featured is not None:
            query = query.where(Product.featured == filters.featured)
        if filters.min_price is not None:
            query = query.where(Product.price >= filters.min_price)
        if filters.max_price is not None:
            query = query.where(Product.price <= filters.max_price)

        if filters.sort == "price-low":
            query = query.order_by(Product.price.asc(), Product.id.asc())
        elif filters.sort == "price-high":
            query = query.order_by(Product.price.desc(), Product.id.asc())
        elif filters.sort == "newest":
            query = query.order_by(Product.created_at.desc(), Product.id.desc())
        else:
            query = query.order_by(Product.id.asc())

        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Catalog query failed: {e}")
            raise CollaboratorUnavailable("catalog") from e

        return apply_list_filters((to_record(row) for row in rows), filters)

    async def get_product(self, slug: str) -> Optional[ProductRecord]:
        """Fetch a single product by slug"""
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(Product).where(Product.slug == slug))
                product = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Catalog lookup for '{slug}' failed: {e}")
            raise CollaboratorUnavailable("catalog") from e

        return to_record(product) if product else None


class InMemoryCatalogAccessor:
    """Catalog accessor over a fixed product list, in insertion order"""

    def __init__(self, products: Iterable[ProductRecord]):
        self._products = tuple(products)

    async def list_products(self, filters: Optional[CatalogFilters] = None) -> List[ProductRecord]:
        if filters is None:
            return list(self._products)

        products = list(self._products)
        if filters.collection:
            products = [p for p in products if p.collection == filters.collection]
        if filters.in_stock is not None:
            products = [p for p in products if p.in_stock == filters.in_stock]
        if filters.featured is not None:
            products = [p for p in products if p.featured == filters.featured]
        if filters.min_price is not None:
            products = [p for p in products if p.price >= filters.min_price]
        if filters.max_price is not None:
            products = [p for p in products if p.price <= filters.max_price]

        if filters.sort == "price-low":
            products.sort(key=lambda p: p.price)
        elif filters.sort == "price-high":
            products.sort(key=lambda p: -p.price)
        elif filters.sort == "newest":
            products.reverse()

        return apply_list_filters(products, filters)

    async def get_product(self, slug: str) -> Optional[ProductRecord]:
        return next((p for p in self._products if p.slug == slug), None)
