"""Pydantic schemas used by the quote service."""

from quote_service.schemas.quote import HealthResponse, QuoteRequest, QuoteResponse

__all__ = ["QuoteRequest", "QuoteResponse", "HealthResponse"]
