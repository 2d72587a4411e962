"""Schemas for incoming quote requests and the response envelope."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator

_PHONE_SEPARATORS = re.compile(r"[\s().-]")
_PHONE_PATTERN = re.compile(r"^\+?\d{7,15}$")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuoteRequest(BaseModel):
    """Validated customer quote request."""

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True, validate_default=True)

    name: str = ""
    email: str = ""
    phone: str = ""
    service: str = ""
    address: Optional[str] = None
    message: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)
    source: str = "website"

    @field_validator("name", "email", "phone", "service", mode="before")
    @classmethod
    def null_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("email")
    @classmethod
    def validate_email_address(cls, value: str) -> str:
        if not value:
            raise ValueError("Email is required")
        try:
            validated = validate_email(value, check_deliverability=False, allow_smtputf8=False)
        except EmailNotValidError as exc:
            raise ValueError("Email is not a valid email address") from exc
        # Internationalized domains are kept in their IDNA form so headers stay ASCII.
        return value if value.isascii() else validated.ascii_email

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str) -> str:
        if not value:
            raise ValueError("Phone is required")
        if not _PHONE_PATTERN.match(_PHONE_SEPARATORS.sub("", value)):
            raise ValueError("Phone is not a valid phone number")
        return value

    @field_validator("service")
    @classmethod
    def validate_service(cls, value: str) -> str:
        if not value:
            raise ValueError("Service is required")
        return value

    @field_validator("address", "message")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @field_validator("timestamp")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @field_validator("source")
    @classmethod
    def default_source(cls, value: str) -> str:
        return value or "website"


class QuoteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    success: bool
    message: str
    request_id: Optional[str] = Field(default=None, alias="requestId")

    def to_payload(self) -> dict:
        """JSON body with camelCase keys; ``requestId`` omitted when absent."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class HealthResponse(BaseModel):
    status: str = "healthy"
    timestamp: datetime = Field(default_factory=_utcnow)


__all__ = ["QuoteRequest", "QuoteResponse", "HealthResponse"]
