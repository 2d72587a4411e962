"""Quote request email dispatch."""

from __future__ import annotations

import logging
from email.message import EmailMessage
from email.utils import formataddr, formatdate, make_msgid, parseaddr
from typing import Optional

from quote_service.core.config import EmailConfiguration
from quote_service.models import DeliveryResult, DeliveryStage, EmailContent
from quote_service.repository import EmailRepository
from quote_service.schemas import QuoteRequest
from quote_service.services.template_service import TemplateService

logger = logging.getLogger(__name__)


class EmailService:
    """Render a quote request and deliver it to the configured recipients."""

    def __init__(
        self,
        config: EmailConfiguration,
        *,
        templates: Optional[TemplateService] = None,
        repository: Optional[EmailRepository] = None,
    ):
        self._config = config
        self._templates = templates or TemplateService()
        self._repository = repository or EmailRepository(config)

    def _build_email(self, request: QuoteRequest, request_id: str) -> EmailContent:
        rendered = self._templates.render(request, request_id)
        config = self._config
        if config.from_name:
            sender = formataddr((config.from_name, config.sender_address))
        else:
            sender = config.sender_address
        return EmailContent(
            subject=config.subject,
            sender=sender,
            recipients=config.recipients,
            html_body=rendered.html_body,
            text_body=rendered.text_body,
            reply_to=request.email,
            reply_to_name=" ".join(request.name.split()),
            request_id=request_id,
        )

    @staticmethod
    def _build_message(email: EmailContent) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = email.subject
        message["From"] = email.sender
        message["To"] = ", ".join(email.recipients)
        message["Date"] = formatdate(localtime=False, usegmt=True)
        sender_domain = parseaddr(email.sender)[1].rpartition("@")[2]
        message["Message-ID"] = make_msgid(idstring=email.request_id, domain=sender_domain or None)

        if email.reply_to:
            message["Reply-To"] = formataddr((email.reply_to_name or "", email.reply_to))
        if email.request_id:
            message["X-Request-ID"] = email.request_id

        message.set_content(email.text_body)
        message.add_alternative(email.html_body, subtype="html")
        return message

    def send_quote_request_email(self, request: QuoteRequest, request_id: str) -> DeliveryResult:
        """Deliver the quote request email; failures are returned, never raised."""

        try:
            return self._send(request, request_id)
        except Exception as exc:
            logger.exception("Unexpected error while sending quote request email")
            return DeliveryResult.failed(DeliveryStage.SEND, f"{type(exc).__name__}: {exc}")

    def _send(self, request: QuoteRequest, request_id: str) -> DeliveryResult:
        logger.info("Email dispatch started: %s", self._config.describe())

        missing = self._config.missing_fields()
        if missing:
            detail = "Missing email configuration: " + ", ".join(missing)
            logger.error(detail)
            return DeliveryResult.failed(DeliveryStage.CONFIGURATION, detail)

        try:
            email = self._build_email(request, request_id)
        except Exception as exc:
            logger.exception("Email content generation failed")
            return DeliveryResult.failed(DeliveryStage.RENDER, f"{type(exc).__name__}: {exc}")
        logger.info(
            "Email content generated (html=%d chars, text=%d chars)",
            len(email.html_body),
            len(email.text_body),
        )

        try:
            message = self._build_message(email)
        except (ValueError, TypeError) as exc:
            logger.error("Email message creation failed: %s: %s", type(exc).__name__, exc)
            return DeliveryResult.failed(DeliveryStage.COMPOSE, f"{type(exc).__name__}: {exc}")

        result = self._repository.deliver(message)
        if result:
            logger.info(
                "Quote request email sent to %d recipient(s), first %s",
                len(email.recipients),
                email.primary_recipient(),
            )
        else:
            logger.error("Quote request email not sent (stage=%s)", result.stage.value)
        return result


__all__ = ["EmailService"]
