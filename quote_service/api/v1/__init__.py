from fastapi import APIRouter

from .quote_routes import router as quote_router

router = APIRouter()
router.include_router(quote_router)

__all__ = ["router", "quote_router"]
