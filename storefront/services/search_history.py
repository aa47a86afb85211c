"""
Search history sink

Analytics only: search records are written at query time and updated at most
once with the product the customer clicked. Nothing reads them back for
ranking.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from storefront.database.models import SearchHistory
from storefront.engines.recommendation.exceptions import CollaboratorUnavailable, NotFound

logger = logging.getLogger(__name__)


class SqlSearchHistorySink:
    """Search history backed by the search_history table"""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def record_search(self, query: str, result_count: int, user_id: Optional[str] = None) -> int:
        """Store a search with no click yet and return its id"""
        record = SearchHistory(query=query.strip(), results=result_count, user_id=user_id)
        try:
            async with self.session_factory() as session:
                session.add(record)
                await session.commit()
                await session.refresh(record)
        except SQLAlchemyError as e:
            logger.error(f"Failed to record search '{query}': {e}")
            raise CollaboratorUnavailable("search history") from e
        return record.id

    async def record_click(self, record_id: int, product_slug: str) -> bool:
        """
        Attach a clicked product to a search record

        Returns:
            True if the click was stored, False if the record already had one

        Raises:
            NotFound: if no record has this id
        """
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    update(SearchHistory)
                    .where(SearchHistory.id == record_id, SearchHistory.clicked.is_(None))
                    .values(clicked=product_slug)
                )
                if result.rowcount:
                    await session.commit()
                    return True
                exists = await session.execute(select(SearchHistory.id).where(SearchHistory.id == record_id))
                found = exists.scalar_one_or_none() is not None
        except SQLAlchemyError as e:
            logger.error(f"Failed to record click on search {record_id}: {e}")
            raise CollaboratorUnavailable("search history") from e

        if not found:
            raise NotFound("Search record", str(record_id))
        return False

    async def record_click_for_query(
        self, query: str, product_slug: str, user_id: Optional[str] = None
    ) -> Optional[int]:
        """
        Attach a click to the most recent un-clicked search with this exact query

        Identical concurrent searches by the same user are indistinguishable
        here; the click lands on whichever record sorts as most recent.

        Returns:
            The id of the updated record, or None if nothing matched
        """
        user_clause = SearchHistory.user_id == user_id if user_id else SearchHistory.user_id.is_(None)
        candidate = (
            select(SearchHistory.id)
            .where(SearchHistory.query == query.strip(), SearchHistory.clicked.is_(None), user_clause)
            .order_by(SearchHistory.created_at.desc(), SearchHistory.id.desc())
            .limit(1)
        )
        try:
            async with self.session_factory() as session:
                record_id = (await session.execute(candidate)).scalar_one_or_none()
                if record_id is None:
                    return None
                result = await session.execute(
                    update(SearchHistory)
                    .where(SearchHistory.id == record_id, SearchHistory.clicked.is_(None))
                    .values(clicked=product_slug)
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to record click for query '{query}': {e}")
            raise CollaboratorUnavailable("search history") from e

        return record_id if result.rowcount else None


class InMemorySearchHistorySink:
    """Search history kept in a list, for tests and local runs"""

    def __init__(self):
        self.records: List[Dict] = []

    async def record_search(self, query: str, result_count: int, user_id: Optional[str] = None) -> int:
        record_id = len(self.records) + 1
        self.records.append(
            {
                "id": record_id,
                "query": query.strip(),
                "results": result_count,
                "user_id": user_id,
                "clicked": None,
                "created_at": datetime.utcnow(),
            }
        )
        return record_id

    async def record_click(self, record_id: int, product_slug: str) -> bool:
        record = next((r for r in self.records if r["id"] == record_id), None)
        if record is None:
            raise NotFound("Search record", str(record_id))
        if record["clicked"] is not None:
            return False
        record["clicked"] = product_slug
        return True

    async def record_click_for_query(
        self, query: str, product_slug: str, user_id: Optional[str] = None
    ) -> Optional[int]:
        for record in reversed(self.records):
            if record["query"] == query.strip() and record["user_id"] == user_id and record["clicked"] is None:
                record["clicked"] = product_slug
                return record["id"]
        return None
