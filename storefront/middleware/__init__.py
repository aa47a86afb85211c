"""
Middleware package for the storefront API.
"""
from .logging_middleware import RequestLoggingMiddleware, get_request_id

__all__ = ["RequestLoggingMiddleware", "get_request_id"]
