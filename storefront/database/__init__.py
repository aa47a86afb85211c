"""
Database module for the storefront
"""
from .models import (
    Base,
    User,
    Product,
    Order,
    OrderStatus,
    Wishlist,
    Review,
    SearchHistory,
)

__all__ = [
    "Base",
    "User",
    "Product",
    "Order",
    "OrderStatus",
    "Wishlist",
    "Review",
    "SearchHistory",
]
