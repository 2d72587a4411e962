"""Data access layer for the quote service."""

from quote_service.repository.email_repository import EmailRepository

__all__ = ["EmailRepository"]
