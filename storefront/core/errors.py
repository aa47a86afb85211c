"""
Map engine errors onto HTTP responses
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from storefront.engines.recommendation.exceptions import CollaboratorUnavailable, InvalidInput, NotFound
from storefront.middleware import get_request_id

logger = logging.getLogger(__name__)


async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": f"{exc.kind} not found"})


async def collaborator_unavailable_handler(request: Request, exc: CollaboratorUnavailable) -> JSONResponse:
    # Details stay in the logs, never in the response
    logger.error(f"[{get_request_id()}] {request.method} {request.url.path} failed: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Service temporarily unavailable"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidInput, invalid_input_handler)
    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(CollaboratorUnavailable, collaborator_unavailable_handler)
