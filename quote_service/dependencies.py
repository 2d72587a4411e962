from functools import lru_cache

from quote_service.core.config import EmailConfiguration, settings
from quote_service.repository import EmailRepository
from quote_service.services import EmailService, QuoteSubmissionHandler, TemplateService


@lru_cache()
def get_email_configuration() -> EmailConfiguration:
    return EmailConfiguration.from_settings(settings)


@lru_cache()
def get_quote_handler() -> QuoteSubmissionHandler:
    config = get_email_configuration()
    email_service = EmailService(
        config,
        templates=TemplateService(templates_path=settings.QUOTE_TEMPLATES_DIR),
        repository=EmailRepository(config),
    )
    return QuoteSubmissionHandler(email_service)
