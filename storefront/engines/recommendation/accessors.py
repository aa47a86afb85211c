"""
Collaborator interfaces consumed by the engines

Implementations live in storefront.services (SQLAlchemy-backed and in-memory).
Implementations raise CollaboratorUnavailable when their backing store fails.
"""
from typing import Dict, List, Optional, Protocol

from .schemas import CatalogFilters, OrderLine, ProductRecord, ReviewSignal


class CatalogAccessor(Protocol):
    """Read-only access to the product catalog"""

    async def list_products(self, filters: Optional[CatalogFilters] = None) -> List[ProductRecord]:
        ...

    async def get_product(self, slug: str) -> Optional[ProductRecord]:
        ...


class InteractionHistoryAccessor(Protocol):
    """Read-only access to a user's orders, wishlist and reviews"""

    async def user_exists(self, user_id: str) -> bool:
        ...

    async def orders_for(self, user_id: str) -> List[OrderLine]:
        ...

    async def wishlist_for(self, user_id: str) -> List[str]:
        ...

    async def reviews_for(self, user_id: str) -> List[ReviewSignal]:
        ...

    async def units_sold(self) -> Dict[str, int]:
        ...


class SearchHistorySink(Protocol):
    """Write-only search analytics"""

    async def record_search(self, query: str, result_count: int, user_id: Optional[str] = None) -> int:
        ...

    async def record_click(self, record_id: int, product_slug: str) -> bool:
        ...

    async def record_click_for_query(
        self, query: str, product_slug: str, user_id: Optional[str] = None
    ) -> Optional[int]:
        ...
