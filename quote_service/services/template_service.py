"""Render quote requests into HTML and plain-text email bodies."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Mapping, Optional

from jinja2 import DictLoader, Environment, select_autoescape
from markupsafe import escape

from quote_service.core.config import DEFAULT_TEMPLATES_DIR
from quote_service.models import RenderedEmail
from quote_service.schemas import QuoteRequest

logger = logging.getLogger(__name__)

HTML_TEMPLATE_NAME = "QuoteRequestEmail.html"
TEXT_TEMPLATE_NAME = "QuoteRequestEmail.txt"

ADDRESS_NOT_PROVIDED = "Not provided"
MESSAGE_NOT_PROVIDED = "No additional details provided"
SUBMISSION_TIME_FORMAT = "%Y-%m-%d %H:%M:%S UTC"

SERVICE_DISPLAY_NAMES: Dict[str, str] = {
    "home-cleaning": "Home Cleaning",
    "commercial-cleaning": "Commercial Cleaning",
    "pest-control": "Pest Control",
    "garbage-removal": "Garbage Removal",
    "lawn-garden": "Lawn & Garden",
    "car-valet": "Car Valet",
}

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")
_SECTION_CLOSE = "{{/if}}"

_FALLBACK_HTML = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>New Quote Request</title>
    <style>
        body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
        .container { max-width: 600px; margin: 0 auto; padding: 20px; }
        .header { background-color: #4CAF50; color: white; padding: 20px; text-align: center; }
        .content { padding: 20px; background-color: #f9f9f9; }
        .field { margin-bottom: 15px; }
        .label { font-weight: bold; color: #555; }
        .value { margin-left: 10px; }
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>New Quote Request</h1>
        </div>
        <div class="content">
            <div class="field"><span class="label">Name:</span><span class="value">{{ name }}</span></div>
            <div class="field"><span class="label">Email:</span><span class="value">{{ email }}</span></div>
            <div class="field"><span class="label">Phone:</span><span class="value">{{ phone }}</span></div>
            <div class="field"><span class="label">Service:</span><span class="value">{{ service }}</span></div>
            {% if address %}
            <div class="field"><span class="label">Address:</span><span class="value">{{ address }}</span></div>
            {% endif %}
            {% if message %}
            <div class="field"><span class="label">Message:</span><span class="value">{{ message }}</span></div>
            {% endif %}
            <div class="field"><span class="label">Submitted:</span><span class="value">{{ submitted }}</span></div>
            <div class="field"><span class="label">Source:</span><span class="value">{{ source }}</span></div>
            <div class="field"><span class="label">Request ID:</span><span class="value">{{ request_id }}</span></div>
        </div>
    </div>
</body>
</html>
"""

_FALLBACK_TEXT = """NEW QUOTE REQUEST
==================

Name: {{ name }}
Email: {{ email }}
Phone: {{ phone }}
Service: {{ service }}
{% if address %}
Address: {{ address }}
{% endif %}
{% if message %}
Message:
{{ message }}
{% endif %}
Submitted: {{ submitted }}
Source: {{ source }}
Request ID: {{ request_id }}
"""

FALLBACK_TEMPLATES = {
    "fallback_quote.html": _FALLBACK_HTML,
    "fallback_quote.txt": _FALLBACK_TEXT,
}


def service_display_name(service: str) -> str:
    """Map a service code to its display name; unknown codes pass through."""
    return SERVICE_DISPLAY_NAMES.get(service, service)


def format_submission_time(request: QuoteRequest) -> str:
    return request.timestamp.strftime(SUBMISSION_TIME_FORMAT)


def substitute_placeholders(template: str, replacements: Mapping[str, str]) -> str:
    """Replace ``{{Name}}`` tokens in a single pass.

    Substituted values are never scanned again and unknown tokens are kept
    as they are.
    """

    def _replace(match: "re.Match[str]") -> str:
        return replacements.get(match.group(1), match.group(0))

    return _PLACEHOLDER.sub(_replace, template)


def apply_conditional_sections(template: str, sections: Mapping[str, bool]) -> str:
    """Unwrap ``{{#if Name}}...{{/if}}`` regions that are enabled, drop the rest."""

    for name, enabled in sections.items():
        pattern = re.compile(
            re.escape("{{#if " + name + "}}") + r"(.*?)" + re.escape(_SECTION_CLOSE),
            re.DOTALL,
        )
        if enabled:
            template = pattern.sub(lambda match: match.group(1), template)
        else:
            template = pattern.sub("", template)
    return template


def build_replacements(
    request: QuoteRequest,
    request_id: str,
    *,
    escape_html: bool = False,
) -> Dict[str, str]:
    values = {
        "CustomerName": request.name,
        "CustomerEmail": request.email,
        "CustomerPhone": request.phone,
        "ServiceType": service_display_name(request.service),
        "CustomerAddress": request.address or ADDRESS_NOT_PROVIDED,
        "CustomerMessage": request.message or MESSAGE_NOT_PROVIDED,
        "SubmissionTime": format_submission_time(request),
        "Source": request.source,
        "RequestId": request_id,
    }
    if escape_html:
        return {key: str(escape(value)) for key, value in values.items()}
    return values


def render_template(
    template: str,
    request: QuoteRequest,
    request_id: str,
    *,
    escape_html: bool = False,
) -> str:
    """Resolve conditional sections then placeholders; no I/O."""

    sections = {
        "CustomerAddress": bool(request.address),
        "CustomerMessage": bool(request.message),
    }
    resolved = apply_conditional_sections(template, sections)
    return substitute_placeholders(
        resolved, build_replacements(request, request_id, escape_html=escape_html)
    )


class TemplateService:
    """Produce the email bodies, falling back to built-in layouts when needed."""

    def __init__(self, *, templates_path: Optional[Path] = None):
        self._templates_path = Path(templates_path or DEFAULT_TEMPLATES_DIR)
        self._fallback = Environment(
            loader=DictLoader(FALLBACK_TEMPLATES),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    @property
    def templates_path(self) -> Path:
        return self._templates_path

    def render(self, request: QuoteRequest, request_id: str) -> RenderedEmail:
        return RenderedEmail(
            html_body=self.render_html(request, request_id),
            text_body=self.render_text(request, request_id),
        )

    def render_html(self, request: QuoteRequest, request_id: str) -> str:
        return self._render(HTML_TEMPLATE_NAME, "fallback_quote.html", request, request_id, html=True)

    def render_text(self, request: QuoteRequest, request_id: str) -> str:
        return self._render(TEXT_TEMPLATE_NAME, "fallback_quote.txt", request, request_id, html=False)

    def _render(
        self,
        template_name: str,
        fallback_name: str,
        request: QuoteRequest,
        request_id: str,
        *,
        html: bool,
    ) -> str:
        template_path = self._templates_path / template_name
        try:
            template = template_path.read_text(encoding="utf-8")
            result = render_template(template, request, request_id, escape_html=html)
        except FileNotFoundError:
            logger.warning("Template %s not found; using built-in layout", template_path)
        except OSError as exc:
            logger.warning(
                "Template %s could not be read (%s: %s); using built-in layout",
                template_path,
                type(exc).__name__,
                exc,
            )
        except Exception:
            logger.exception("Failed to render template %s; using built-in layout", template_path)
        else:
            logger.debug("Rendered %s (%d characters)", template_name, len(result))
            return result

        return self._render_fallback(fallback_name, request, request_id)

    def _render_fallback(self, template_name: str, request: QuoteRequest, request_id: str) -> str:
        template = self._fallback.get_template(template_name)
        return template.render(
            name=request.name,
            email=request.email,
            phone=request.phone,
            service=service_display_name(request.service),
            address=request.address,
            message=request.message,
            submitted=format_submission_time(request),
            source=request.source,
            request_id=request_id,
        )


__all__ = [
    "TemplateService",
    "SERVICE_DISPLAY_NAMES",
    "service_display_name",
    "substitute_placeholders",
    "apply_conditional_sections",
    "build_replacements",
    "render_template",
]
