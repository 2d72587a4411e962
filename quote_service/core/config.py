"""Configuration for the quote request service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

PASSWORD_ENV_VAR = "SWEEPO_FROM_EMAIL_PASSWORD"

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5173",
    "https://sweepo-ui.vercel.app",
    "https://sweepo.com",
)


def _to_bool(value: str, *, default: bool = False) -> bool:
    lowered = value.strip().lower()
    if not lowered:
        return default
    return lowered in {"true", "1", "yes", "y", "on"}


def _split_csv(value: str) -> List[str]:
    items: List[str] = []
    for raw in value.split(","):
        item = raw.strip()
        if item and item not in items:
            items.append(item)
    return items


class Settings:
    PROJECT_NAME: str = os.getenv("QUOTE_PROJECT_NAME", "Sweepo Server")
    VERSION: str = os.getenv("QUOTE_SERVICE_VERSION", "1.0.0")

    SMTP_HOST: str = os.getenv("SMTP_HOST", "")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME: Optional[str] = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD: Optional[str] = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL: str = os.getenv("SMTP_FROM_EMAIL", "")
    SMTP_FROM_NAME: str = os.getenv("SMTP_FROM_NAME", "Sweepo Quotes")
    SMTP_USE_TLS: bool = _to_bool(os.getenv("SMTP_USE_TLS", "true"), default=True)
    SMTP_USE_SSL: bool = _to_bool(os.getenv("SMTP_USE_SSL", "false"), default=False)
    SMTP_TIMEOUT: float = float(os.getenv("SMTP_TIMEOUT", "10"))

    QUOTE_RECIPIENT_EMAILS: List[str] = _split_csv(os.getenv("QUOTE_RECIPIENT_EMAILS", ""))
    QUOTE_EMAIL_SUBJECT: str = os.getenv(
        "QUOTE_EMAIL_SUBJECT",
        "New Quote Request from Sweepo",
    )
    QUOTE_TEMPLATES_DIR: Path = Path(
        os.getenv("QUOTE_TEMPLATES_DIR", "") or DEFAULT_TEMPLATES_DIR
    )

    CORS_ALLOWED_ORIGINS: List[str] = (
        _split_csv(os.getenv("CORS_ALLOWED_ORIGINS", "")) or list(DEFAULT_CORS_ORIGINS)
    )

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    # Daily rotated log file; console only when empty.
    LOG_FILE: str = os.getenv("LOG_FILE", "")


@dataclass(frozen=True)
class EmailConfiguration:
    """SMTP and addressing settings shared read-only by every request."""

    smtp_host: str = ""
    smtp_port: int = 587
    username: str = ""
    password: str = field(default="", repr=False)
    from_email: str = ""
    from_name: str = ""
    recipients: Tuple[str, ...] = ()
    subject: str = "New Quote Request from Sweepo"
    use_tls: bool = True
    use_ssl: bool = False
    timeout: float = 10.0

    @classmethod
    def from_settings(
        cls,
        config: Settings,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "EmailConfiguration":
        """Build the configuration, letting the password env var take precedence."""

        env = os.environ if environ is None else environ
        password = config.SMTP_PASSWORD or ""
        override = env.get(PASSWORD_ENV_VAR, "")
        if override:
            password = override
            logger.info("SMTP password loaded from environment variable %s", PASSWORD_ENV_VAR)
        elif not password:
            logger.warning(
                "No SMTP password configured. Set %s or SMTP_PASSWORD", PASSWORD_ENV_VAR
            )

        return cls(
            smtp_host=config.SMTP_HOST,
            smtp_port=config.SMTP_PORT,
            username=config.SMTP_USERNAME or "",
            password=password,
            from_email=config.SMTP_FROM_EMAIL,
            from_name=config.SMTP_FROM_NAME,
            recipients=tuple(config.QUOTE_RECIPIENT_EMAILS),
            subject=config.QUOTE_EMAIL_SUBJECT,
            use_tls=config.SMTP_USE_TLS,
            use_ssl=config.SMTP_USE_SSL,
            timeout=config.SMTP_TIMEOUT,
        )

    @property
    def sender_address(self) -> str:
        return self.from_email or self.username

    def missing_fields(self) -> List[str]:
        missing = []
        if not self.smtp_host:
            missing.append("SMTP host")
        if not self.username:
            missing.append("SMTP username")
        if not self.password:
            missing.append("SMTP password")
        if not self.recipients:
            missing.append("recipient emails")
        return missing

    def describe(self) -> Dict[str, Any]:
        """Return a log friendly summary that never includes the password."""

        return {
            "server": f"{self.smtp_host}:{self.smtp_port}",
            "from": self.sender_address,
            "recipients": len(self.recipients),
            "tls": self.use_tls,
            "ssl": self.use_ssl,
            "timeout": self.timeout,
            "password_configured": bool(self.password),
        }


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "EmailConfiguration",
    "PASSWORD_ENV_VAR",
    "DEFAULT_TEMPLATES_DIR",
]
