"""
Interaction history accessors

Read a user's orders, wishlist and reviews for personalization, plus
catalog-wide units sold for the popularity tiebreak.
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from storefront.database.models import Order, OrderStatus, Review, User, Wishlist
from storefront.engines.recommendation.exceptions import CollaboratorUnavailable
from storefront.engines.recommendation.schemas import OrderLine, ReviewSignal

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def order_lines(items: Optional[Iterable[dict]]) -> List[OrderLine]:
    """Parse an order's JSON line items, skipping malformed lines"""
    if not isinstance(items, list):
        return []

    lines = []
    for item in items:
        if not isinstance(item, dict) or not item.get("slug"):
            continue
        try:
            quantity = int(item.get("quantity") or 1)
            price = int(item.get("price") or 0)
        except (TypeError, ValueError, OverflowError):
            logger.warning(f"Skipping order line with bad quantity or price: {item!r}")
            continue
        lines.append(OrderLine(product_slug=str(item["slug"]), quantity=max(quantity, 1), price=max(price, 0)))
    return lines


class SqlInteractionHistoryAccessor:
    """Interaction history backed by the orders, wishlists and reviews tables"""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def _scalars(self, query, what: str) -> list:
        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Interaction history query for {what} failed: {e}")
            raise CollaboratorUnavailable("interaction history") from e

    async def user_exists(self, user_id: str) -> bool:
        ids = await self._scalars(select(User.id).where(User.id == user_id), "user")
        return bool(ids)

    async def orders_for(self, user_id: str) -> List[OrderLine]:
        """Purchased lines across the user's non-cancelled orders"""
        query = (
            select(Order)
            .where(Order.user_id == user_id, Order.status != OrderStatus.CANCELLED.value)
            .order_by(Order.created_at.desc())
        )
        orders = await self._scalars(query, "orders")
        return [line for order in orders for line in order_lines(order.items)]

    async def wishlist_for(self, user_id: str) -> List[str]:
        query = select(Wishlist.product_slug).where(Wishlist.user_id == user_id).order_by(Wishlist.created_at.desc())
        return await self._scalars(query, "wishlist")

    async def reviews_for(self, user_id: str) -> List[ReviewSignal]:
        query = select(Review).where(Review.user_id == user_id)
        reviews = await self._scalars(query, "reviews")
        return [
            ReviewSignal(product_slug=r.product_slug, rating=r.rating)
            for r in reviews
            if r.rating is not None and MIN_RATING <= r.rating <= MAX_RATING
        ]

    async def units_sold(self) -> Dict[str, int]:
        """Units sold per product slug, excluding cancelled orders"""
        query = select(Order.items).where(Order.status != OrderStatus.CANCELLED.value)
        all_items = await self._scalars(query, "units sold")

        totals: Dict[str, int] = defaultdict(int)
        for items in all_items:
            for line in order_lines(items):
                totals[line.product_slug] += line.quantity
        return dict(totals)


class InMemoryInteractionHistoryAccessor:
    """Interaction history over plain dictionaries keyed by user id"""

    def __init__(
        self,
        users: Optional[Iterable[str]] = None,
        orders: Optional[Dict[str, List[OrderLine]]] = None,
        wishlists: Optional[Dict[str, List[str]]] = None,
        reviews: Optional[Dict[str, List[ReviewSignal]]] = None,
    ):
        self.orders = orders or {}
        self.wishlists = wishlists or {}
        self.reviews = reviews or {}
        self.users = set(users or []) | set(self.orders) | set(self.wishlists) | set(self.reviews)

    async def user_exists(self, user_id: str) -> bool:
        return user_id in self.users

    async def orders_for(self, user_id: str) -> List[OrderLine]:
        return list(self.orders.get(user_id, []))

    async def wishlist_for(self, user_id: str) -> List[str]:
        return list(self.wishlists.get(user_id, []))

    async def reviews_for(self, user_id: str) -> List[ReviewSignal]:
        return list(self.reviews.get(user_id, []))

    async def units_sold(self) -> Dict[str, int]:
        totals: Dict[str, int] = defaultdict(int)
        for lines in self.orders.values():
            for line in lines:
                totals[line.product_slug] += line.quantity
        return dict(totals)
