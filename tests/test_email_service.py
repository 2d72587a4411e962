"""Tests for composing and dispatching the quote request email."""

from dataclasses import replace

import pytest

from quote_service.models import DeliveryStage
from quote_service.repository import EmailRepository
from quote_service.services import EmailService

REQUEST_ID = "feedc0de"


def _service(config, templates):
    return EmailService(config, templates=templates, repository=EmailRepository(config))


def test_sends_multipart_message_to_all_recipients(
    fake_smtp, email_config, template_service, quote_request
):
    result = _service(email_config, template_service).send_quote_request_email(
        quote_request, REQUEST_ID
    )

    assert result
    message = fake_smtp.instances[0].sent[0]
    assert message["Subject"] == "New Quote Request from Sweepo"
    assert message["From"] == "Sweepo Quotes <quotes@example.com>"
    assert message["To"] == "team@example.com, owner@example.com"
    assert message["Reply-To"] == "Jane Doe <jane@example.com>"
    assert message["X-Request-ID"] == REQUEST_ID
    assert message["Message-ID"]
    assert message.get_content_type() == "multipart/alternative"

    parts = [part.get_content_type() for part in message.iter_parts()]
    assert parts == ["text/plain", "text/html"]

    text = message.get_body(preferencelist=("plain",)).get_content()
    html = message.get_body(preferencelist=("html",)).get_content()
    assert "Jane Doe" in text
    assert "Home Cleaning" in html
    assert REQUEST_ID in text and REQUEST_ID in html


def test_sender_falls_back_to_username(fake_smtp, email_config, template_service, quote_request):
    config = replace(email_config, from_email="", from_name="")

    _service(config, template_service).send_quote_request_email(quote_request, REQUEST_ID)

    assert fake_smtp.instances[0].sent[0]["From"] == "quotes@example.com"


@pytest.mark.parametrize(
    "override",
    [
        {"smtp_host": ""},
        {"username": ""},
        {"password": ""},
        {"recipients": ()},
    ],
)
def test_missing_configuration_fails_without_connecting(
    fake_smtp, email_config, template_service, quote_request, override
):
    config = replace(email_config, **override)

    result = _service(config, template_service).send_quote_request_email(quote_request, REQUEST_ID)

    assert not result
    assert result.stage is DeliveryStage.CONFIGURATION
    assert fake_smtp.instances == []


@pytest.mark.parametrize(
    "fail_on, stage",
    [
        ("connect", DeliveryStage.CONNECT),
        ("login", DeliveryStage.AUTHENTICATE),
        ("send", DeliveryStage.SEND),
    ],
)
def test_transport_failures_return_false(
    fake_smtp, email_config, template_service, quote_request, fail_on, stage
):
    fake_smtp.fail_on = fail_on

    result = _service(email_config, template_service).send_quote_request_email(
        quote_request, REQUEST_ID
    )

    assert result.success is False
    assert result.stage is stage


def test_missing_templates_still_send(
    fake_smtp, email_config, missing_template_service, quote_request
):
    result = _service(email_config, missing_template_service).send_quote_request_email(
        quote_request, REQUEST_ID
    )

    assert result
    text = fake_smtp.instances[0].sent[0].get_body(preferencelist=("plain",)).get_content()
    assert text.startswith("NEW QUOTE REQUEST")


def test_render_fault_is_a_render_failure(fake_smtp, email_config, quote_request):
    class BrokenTemplates:
        def render(self, request, request_id):
            raise RuntimeError("disk on fire")

    service = EmailService(
        email_config,
        templates=BrokenTemplates(),
        repository=EmailRepository(email_config),
    )

    result = service.send_quote_request_email(quote_request, REQUEST_ID)

    assert result.stage is DeliveryStage.RENDER
    assert fake_smtp.instances == []


def test_unexpected_repository_error_is_absorbed(email_config, template_service, quote_request):
    class ExplodingRepository:
        def deliver(self, message):
            raise KeyError("surprise")

    service = EmailService(
        email_config, templates=template_service, repository=ExplodingRepository()
    )

    result = service.send_quote_request_email(quote_request, REQUEST_ID)

    assert not result
    assert "KeyError" in result.detail


def test_unencodable_reply_to_is_a_compose_failure(
    fake_smtp, email_config, template_service, quote_request
):
    request = quote_request.model_copy(update={"email": "josé@example.com"})

    result = _service(email_config, template_service).send_quote_request_email(
        request, REQUEST_ID
    )

    assert result.stage is DeliveryStage.COMPOSE
    assert "UnicodeEncodeError" in result.detail
    assert fake_smtp.instances == []


def test_reply_to_uses_customer_name_with_accents(
    fake_smtp, email_config, template_service, quote_request
):
    request = quote_request.model_copy(update={"name": "Zoë  Ünï"})

    result = _service(email_config, template_service).send_quote_request_email(
        request, REQUEST_ID
    )

    assert result
    reply_to = fake_smtp.instances[0].sent[0]["Reply-To"]
    assert reply_to.addresses[0].display_name == "Zoë Ünï"
    assert reply_to.addresses[0].addr_spec == "jane@example.com"
