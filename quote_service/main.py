"""Entry point for the quote service."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quote_service.api import api_router
from quote_service.core.config import settings
from quote_service.core.error_handlers import register_exception_handlers
from quote_service.core.logging import configure_logging
from quote_service.dependencies import get_email_configuration

configure_logging(settings.LOG_LEVEL, settings.LOG_FILE or None)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    logger.info("Email configuration loaded: %s", get_email_configuration().describe())
    logger.info("Starting %s %s", settings.PROJECT_NAME, settings.VERSION)
    yield
    logger.info("Stopping %s", settings.PROJECT_NAME)


app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.get("/")
async def root() -> Dict[str, Any]:
    return {
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "status": "running",
        "timestamp": datetime.now(timezone.utc),
    }


if __name__ == "__main__":
    uvicorn.run("quote_service.main:app", host="0.0.0.0", port=8000)

__all__ = ["app"]
