"""Email related domain models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence


@dataclass(frozen=True)
class RenderedEmail:
    """HTML and plain-text renditions of the same quote request."""

    html_body: str
    text_body: str


@dataclass(frozen=True)
class EmailContent:
    """Represents an email ready to be delivered."""

    subject: str
    sender: str
    recipients: Sequence[str]
    html_body: str
    text_body: str
    reply_to: Optional[str] = None
    reply_to_name: Optional[str] = None
    request_id: Optional[str] = None

    def primary_recipient(self) -> str:
        """Return the first recipient address or an empty string."""
        return self.recipients[0] if self.recipients else ""


class DeliveryStage(str, Enum):
    CONFIGURATION = "configuration"
    RENDER = "render"
    COMPOSE = "compose"
    CONNECT = "connect"
    AUTHENTICATE = "authenticate"
    SEND = "send"


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of one delivery attempt.

    ``stage`` and ``detail`` are only set on failure and are meant for
    operators; callers should branch on truthiness alone.
    """

    success: bool
    stage: Optional[DeliveryStage] = None
    detail: Optional[str] = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def delivered(cls) -> "DeliveryResult":
        return cls(success=True)

    @classmethod
    def failed(cls, stage: DeliveryStage, detail: str) -> "DeliveryResult":
        return cls(success=False, stage=stage, detail=detail)


__all__ = ["RenderedEmail", "EmailContent", "DeliveryStage", "DeliveryResult"]
