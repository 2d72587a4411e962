"""Domain models for the quote service."""

from quote_service.models.email import DeliveryResult, DeliveryStage, EmailContent, RenderedEmail

__all__ = ["EmailContent", "RenderedEmail", "DeliveryStage", "DeliveryResult"]
