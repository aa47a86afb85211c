"""
Database models for the storefront

The relevance core only reads these tables (search_history is the one table
it writes). They are owned by the surrounding storefront services.
"""
import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class OrderStatus(enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class User(Base):
    """Storefront customer account"""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    orders = relationship("Order", back_populates="user")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"


class Product(Base):
    """Catalog product, identified everywhere by its slug"""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(200), unique=True, nullable=False, index=True)
    title = Column(String(500), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    price = Column(Integer, nullable=False, index=True)  # minor currency units
    currency = Column(String(3), default="CAD", nullable=False)
    collection = Column(String(100), nullable=False, index=True)

    images = Column(JSON, nullable=False, default=list)
    sizes = Column(JSON, nullable=False, default=list)
    colors = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)

    fabric = Column(Text, nullable=False, default="")
    care = Column(Text, nullable=False, default="")
    shipping = Column(Text, nullable=False, default="")

    featured = Column(Boolean, default=False, nullable=False, index=True)
    in_stock = Column(Boolean, default=True, nullable=False, index=True)
    total_stock = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("idx_product_collection_price", "collection", "price"),
    )

    def __repr__(self):
        return f"<Product(slug='{self.slug}', title='{self.title[:50]}', price={self.price})>"


class Order(Base):
    """Customer order. Line items are stored as JSON: [{slug, quantity, price, size}]"""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(50), unique=True, nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    status = Column(String(20), default=OrderStatus.PENDING.value, nullable=False, index=True)
    items = Column(JSON, nullable=False, default=list)
    total = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="orders")

    def __repr__(self):
        return f"<Order(order_number='{self.order_number}', status='{self.status}')>"


class Wishlist(Base):
    """Saved-for-later product"""

    __tablename__ = "wishlists"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    product_slug = Column(String(200), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "product_slug", name="uq_wishlist_user_product"),
    )


class Review(Base):
    """Product review with a 1-5 star rating"""

    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    product_slug = Column(String(200), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "product_slug", name="uq_review_user_product"),
    )


class SearchHistory(Base):
    """Search analytics. Written at query time, updated once on click."""

    __tablename__ = "search_history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), nullable=True, index=True)
    query = Column(String(500), nullable=False, index=True)
    results = Column(Integer, nullable=False, default=0)
    clicked = Column(String(200), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    __table_args__ = (
        Index("idx_search_history_query_user", "query", "user_id"),
    )

    def __repr__(self):
        return f"<SearchHistory(id={self.id}, query='{self.query}', clicked={self.clicked})>"
