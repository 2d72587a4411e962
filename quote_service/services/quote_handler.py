"""Orchestration of a quote submission: validate, dispatch, map to a response."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional

from fastapi import status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from quote_service.core.logging import set_request_id
from quote_service.schemas import HealthResponse, QuoteRequest, QuoteResponse
from quote_service.services.email_service import EmailService

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Quote request submitted successfully! We'll contact you within 24 hours."
DELIVERY_FAILED_MESSAGE = "Failed to process quote request. Please try again later."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."
VALIDATION_FAILED_PREFIX = "Validation failed: "


def new_request_id() -> str:
    """Short opaque id used for log correlation and in the response."""
    return uuid.uuid4().hex[:8]


def format_validation_errors(exc: ValidationError) -> List[str]:
    """Flatten pydantic errors into one readable message per violation."""

    messages = []
    for error in exc.errors():
        if error.get("type") == "value_error":
            # Custom validator messages already name the field.
            messages.append(str(error.get("ctx", {}).get("error", error.get("msg"))))
            continue
        location = ".".join(str(loc) for loc in error.get("loc", ()))
        message = error.get("msg", "Invalid input")
        messages.append(f"{location}: {message}" if location else message)
    return messages


def validation_failure(messages: List[str]) -> QuoteResponse:
    return QuoteResponse(
        success=False,
        message=VALIDATION_FAILED_PREFIX + ", ".join(messages or ["Invalid request"]),
    )


@dataclass(frozen=True)
class QuoteSubmissionResult:
    status_code: int
    response: QuoteResponse


class QuoteSubmissionHandler:
    """Turn a raw quote payload into a delivered email and a response."""

    def __init__(self, email_service: EmailService):
        self._email_service = email_service

    async def submit(self, payload: Any, *, client_ip: Optional[str] = None) -> QuoteSubmissionResult:
        request_id = new_request_id()
        set_request_id(request_id)
        validated = False

        try:
            try:
                quote = QuoteRequest.model_validate(payload)
            except ValidationError as exc:
                messages = format_validation_errors(exc)
                logger.warning(
                    "Invalid quote request from %s: %s", client_ip or "unknown", "; ".join(messages)
                )
                return QuoteSubmissionResult(
                    status.HTTP_400_BAD_REQUEST, validation_failure(messages)
                )

            validated = True
            logger.info(
                "Processing quote request for service %s from %s (client %s)",
                quote.service,
                quote.email,
                client_ip or "unknown",
            )

            result = await run_in_threadpool(
                self._email_service.send_quote_request_email, quote, request_id
            )
            if result:
                logger.info("Quote request processed successfully")
                return QuoteSubmissionResult(
                    status.HTTP_200_OK,
                    QuoteResponse(success=True, message=SUCCESS_MESSAGE, request_id=request_id),
                )

            logger.error("Failed to send email for quote request (stage=%s)", result.stage.value)
            return QuoteSubmissionResult(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                QuoteResponse(success=False, message=DELIVERY_FAILED_MESSAGE, request_id=request_id),
            )
        except Exception:
            logger.exception("Unexpected error processing quote request")
            return QuoteSubmissionResult(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                QuoteResponse(
                    success=False,
                    message=UNEXPECTED_ERROR_MESSAGE,
                    request_id=request_id if validated else None,
                ),
            )

    @staticmethod
    def health() -> HealthResponse:
        return HealthResponse(status="healthy", timestamp=datetime.now(timezone.utc))


__all__ = [
    "QuoteSubmissionHandler",
    "QuoteSubmissionResult",
    "format_validation_errors",
    "validation_failure",
    "new_request_id",
]
