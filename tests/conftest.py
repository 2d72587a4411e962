import os
import smtplib
import sys
from datetime import datetime, timezone

import pytest

# Ensure project root is on sys.path for `import quote_service`.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from quote_service.core.config import DEFAULT_TEMPLATES_DIR, EmailConfiguration  # noqa: E402
from quote_service.repository import EmailRepository  # noqa: E402
from quote_service.schemas import QuoteRequest  # noqa: E402
from quote_service.services import EmailService, QuoteSubmissionHandler, TemplateService  # noqa: E402


class FakeSMTP:
    """Stand-in for ``smtplib.SMTP`` that records the session and can fail on demand.

    ``fail_on`` names the call that raises: connect, starttls, login or send.
    """

    instances: list = []
    fail_on = None

    def __init__(self, host="", port=0, local_hostname=None, *, timeout=None, **kwargs):
        self.timeout = timeout
        self.kwargs = kwargs
        self.calls = []
        self.sent = []
        self.login_args = None
        self.closed = False
        type(self).instances.append(self)

    def connect(self, host, port):
        self.calls.append(("connect", host, port))
        if self.fail_on == "connect":
            raise ConnectionRefusedError(111, "Connection refused")
        return (220, b"ready")

    def ehlo(self, name=""):
        self.calls.append(("ehlo",))
        return (250, b"ok")

    def starttls(self, context=None):
        self.calls.append(("starttls",))
        if self.fail_on == "starttls":
            raise smtplib.SMTPNotSupportedError("STARTTLS extension not supported by server.")
        return (220, b"go ahead")

    def login(self, user, password):
        self.calls.append(("login", user))
        self.login_args = (user, password)
        if self.fail_on == "login":
            raise smtplib.SMTPAuthenticationError(535, b"5.7.8 Username and Password not accepted")
        return (235, b"accepted")

    def send_message(self, msg):
        self.calls.append(("send_message",))
        if self.fail_on == "send":
            raise smtplib.SMTPDataError(554, b"Transaction failed")
        self.sent.append(msg)
        return {}

    def quit(self):
        self.calls.append(("quit",))
        self.closed = True
        return (221, b"bye")

    def close(self):
        self.calls.append(("close",))
        self.closed = True


@pytest.fixture
def fake_smtp(monkeypatch):
    class _FakeSMTP(FakeSMTP):
        instances = []
        fail_on = None

    monkeypatch.setattr(smtplib, "SMTP", _FakeSMTP)
    return _FakeSMTP


@pytest.fixture
def email_config():
    return EmailConfiguration(
        smtp_host="smtp.example.com",
        smtp_port=587,
        username="quotes@example.com",
        password="app-password",
        from_email="quotes@example.com",
        from_name="Sweepo Quotes",
        recipients=("team@example.com", "owner@example.com"),
        subject="New Quote Request from Sweepo",
        timeout=5.0,
    )


@pytest.fixture
def valid_payload():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "+15551234567",
        "service": "home-cleaning",
    }


@pytest.fixture
def quote_request(valid_payload):
    return QuoteRequest(
        **valid_payload,
        timestamp=datetime(2025, 3, 14, 9, 26, 53, tzinfo=timezone.utc),
    )


@pytest.fixture
def template_service():
    return TemplateService(templates_path=DEFAULT_TEMPLATES_DIR)


@pytest.fixture
def missing_template_service(tmp_path):
    return TemplateService(templates_path=tmp_path / "missing")


def build_handler(config, templates=None):
    email_service = EmailService(
        config,
        templates=templates or TemplateService(templates_path=DEFAULT_TEMPLATES_DIR),
        repository=EmailRepository(config),
    )
    return QuoteSubmissionHandler(email_service)


@pytest.fixture
def make_handler():
    return build_handler
