"""API routers for the quote service."""

from quote_service.api.v1 import router as api_router

__all__ = ["api_router"]
