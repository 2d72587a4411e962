"""Core utilities for the quote service."""

from quote_service.core.config import EmailConfiguration, get_settings, settings

__all__ = ["settings", "get_settings", "EmailConfiguration"]
