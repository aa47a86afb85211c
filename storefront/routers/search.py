"""
Search API routes
"""
import logging
from typing import Literal, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.core.auth import get_optional_user_id
from storefront.core.dependencies import get_search_history, get_search_service
from storefront.engines.recommendation import CollaboratorUnavailable, InvalidQuery, RelevanceError, SearchService
from storefront.engines.recommendation.accessors import SearchHistorySink
from storefront.schemas.products import (
    SearchClickRequest,
    SearchClickResponse,
    SearchResponse,
    SuggestionsResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=Union[SearchResponse, SuggestionsResponse])
async def search_products(
    q: Optional[str] = Query(None, max_length=200),
    type: Literal["search", "suggestions"] = Query("search"),
    user_id: Optional[str] = Depends(get_optional_user_id),
    search_service: SearchService = Depends(get_search_service),
    history: SearchHistorySink = Depends(get_search_history),
):
    """Ranked search results, or typeahead suggestions with type=suggestions"""
    if not q:
        raise InvalidQuery("Query parameter is required")

    try:
        if type == "suggestions":
            suggestions = await search_service.suggestions(q)
            return SuggestionsResponse(suggestions=suggestions)

        results = await search_service.search(q)

        # Analytics must never fail the search itself
        search_id = None
        try:
            search_id = await history.record_search(q.strip(), len(results), user_id)
        except CollaboratorUnavailable as e:
            logger.error(f"Failed to log search: {e}")

        return SearchResponse(query=q, results=results, count=len(results), search_id=search_id)

    except RelevanceError:
        raise
    except Exception as e:
        logger.error(f"Search error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Search failed")


@router.get("/popular", response_model=SuggestionsResponse)
async def popular_searches(search_service: SearchService = Depends(get_search_service)):
    """Popular queries shown before the customer starts typing"""
    return SuggestionsResponse(suggestions=search_service.popular_searches())


@router.post("/click", response_model=SearchClickResponse)
async def log_search_click(
    request: SearchClickRequest,
    user_id: Optional[str] = Depends(get_optional_user_id),
    history: SearchHistorySink = Depends(get_search_history),
):
    """
    Record which product a customer picked from search results

    With a search_id the click goes to that record. Otherwise it goes to the
    most recent un-clicked search with the same query text from this user.
    """
    if request.search_id is not None:
        stored = await history.record_click(request.search_id, request.product_slug)
        return SearchClickResponse(success=stored, search_id=request.search_id)

    search_id = await history.record_click_for_query(request.query, request.product_slug, user_id)
    return SearchClickResponse(success=search_id is not None, search_id=search_id)
