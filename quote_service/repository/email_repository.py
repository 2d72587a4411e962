"""Repository responsible for delivering emails through SMTP."""

from __future__ import annotations

import logging
import smtplib
import ssl
from email.message import EmailMessage

from quote_service.core.config import EmailConfiguration
from quote_service.models import DeliveryResult, DeliveryStage

logger = logging.getLogger(__name__)

TRANSPORT_ERRORS = (smtplib.SMTPException, OSError)


def _describe(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"


class EmailRepository:
    """Handles the low level communication with the SMTP server.

    Each step of a session (connect, authenticate, send) is its own failure
    point; the first one that fails ends the attempt and is reported in the
    returned :class:`DeliveryResult`. The session is closed on every path.
    """

    def __init__(self, config: EmailConfiguration):
        self._config = config

    def _create_client(self) -> smtplib.SMTP:
        if self._config.use_ssl:
            return smtplib.SMTP_SSL(
                timeout=self._config.timeout,
                context=ssl.create_default_context(),
            )
        return smtplib.SMTP(timeout=self._config.timeout)

    def _connect(self, client: smtplib.SMTP) -> None:
        config = self._config
        client.connect(config.smtp_host, config.smtp_port)
        if config.use_tls and not config.use_ssl:
            client.ehlo()
            client.starttls(context=ssl.create_default_context())
            client.ehlo()

    @staticmethod
    def _close(client: smtplib.SMTP) -> None:
        try:
            client.quit()
        except TRANSPORT_ERRORS as exc:
            logger.debug("SMTP quit failed (%s); closing socket", _describe(exc))
            client.close()

    def deliver(self, message: EmailMessage) -> DeliveryResult:
        config = self._config
        client = self._create_client()

        logger.info(
            "Connecting to SMTP server %s:%s (tls=%s, ssl=%s)",
            config.smtp_host,
            config.smtp_port,
            config.use_tls,
            config.use_ssl,
        )
        try:
            self._connect(client)
        except TRANSPORT_ERRORS as exc:
            logger.error(
                "SMTP connection to %s:%s failed: %s",
                config.smtp_host,
                config.smtp_port,
                _describe(exc),
            )
            client.close()
            return DeliveryResult.failed(DeliveryStage.CONNECT, _describe(exc))

        try:
            if config.username:
                try:
                    client.login(config.username, config.password)
                except TRANSPORT_ERRORS as exc:
                    logger.error(
                        "SMTP authentication failed for user %s: %s",
                        config.username,
                        _describe(exc),
                    )
                    return DeliveryResult.failed(DeliveryStage.AUTHENTICATE, _describe(exc))
                logger.info("SMTP authentication successful")

            try:
                refused = client.send_message(message)
            except TRANSPORT_ERRORS as exc:
                logger.error(
                    "Sending email %r failed: %s",
                    message["Subject"],
                    _describe(exc),
                )
                return DeliveryResult.failed(DeliveryStage.SEND, _describe(exc))

            if refused:
                logger.warning("SMTP server refused recipients: %s", ", ".join(sorted(refused)))
            return DeliveryResult.delivered()
        finally:
            self._close(client)


__all__ = ["EmailRepository", "TRANSPORT_ERRORS"]
