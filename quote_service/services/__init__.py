"""Service layer for the quote service."""

from quote_service.services.email_service import EmailService
from quote_service.services.quote_handler import QuoteSubmissionHandler, QuoteSubmissionResult
from quote_service.services.template_service import TemplateService

__all__ = ["EmailService", "QuoteSubmissionHandler", "QuoteSubmissionResult", "TemplateService"]
