"""
Email utilities: configuration, message structure, and SMTP-based sending.

This module provides:
- EmailMessage: validated email message dataclass.
- EmailConfig: SMTP configuration built from settings.
- TemplateRenderer: jinja2 rendering of the HTML email bodies.
- send_email: SMTP-based sending.
"""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from decimal import Decimal
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from pathlib import Path
from typing import Any

from email_validator import EmailNotValidError, validate_email
from jinja2 import Environment, FileSystemLoader, select_autoescape

from hostel_ledger.config.settings import Settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"


class EmailError(Exception):
    """Custom exception for email operations."""
    pass


def is_valid_email(address: str) -> bool:
    try:
        validate_email(address, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


@dataclass
class EmailMessage:
    """Email message structure with validation."""
    subject: str
    to: list[str]
    body_html: str | None = None
    body_text: str | None = None

    def __post_init__(self) -> None:
        if not self.subject.strip():
            raise EmailError("Subject cannot be empty")
        if not self.to:
            raise EmailError("At least one recipient is required")
        if not self.body_text and not self.body_html:
            raise EmailError("Either body_text or body_html must be provided")
        for address in self.to:
            if not is_valid_email(address):
                raise EmailError(f"Invalid recipient email: {address}")


@dataclass
class EmailConfig:
    """Email configuration."""
    smtp_host: str
    smtp_port: int
    username: str | None
    password: str | None
    from_email: str
    from_name: str | None = None
    use_tls: bool = True
    timeout: int = 10

    @classmethod
    def from_settings(cls, settings: Settings) -> EmailConfig:
        if not settings.SMTP_HOST:
            raise EmailError("SMTP_HOST is not configured")
        return cls(
            smtp_host=settings.SMTP_HOST,
            smtp_port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            from_email=settings.EMAIL_FROM_ADDRESS,
            from_name=settings.EMAIL_FROM_NAME,
            use_tls=settings.SMTP_USE_TLS,
            timeout=settings.SMTP_TIMEOUT,
        )


def format_money(amount: Decimal | None, currency: str) -> str:
    if amount is None:
        return "-"
    return f"{currency} {amount:,.2f}"


class TemplateRenderer:
    """Email template rendering utilities"""

    def __init__(self, templates_dir: Path | str = TEMPLATES_DIR) -> None:
        self.templates_dir = Path(templates_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html"]),
        )
        self.env.filters["money"] = format_money

    def render_template(self, template_name: str, variables: dict[str, Any]) -> str:
        """Render email template with variables"""
        template = self.env.get_template(template_name)
        return template.render(**variables)


def send_email(message: EmailMessage, config: EmailConfig) -> None:
    """Send an email using SMTP."""
    try:
        msg = MIMEMultipart('alternative')
        msg['Subject'] = message.subject
        msg['From'] = formataddr((config.from_name or "", config.from_email))
        msg['To'] = ', '.join(message.to)

        if message.body_text:
            msg.attach(MIMEText(message.body_text, 'plain'))
        if message.body_html:
            msg.attach(MIMEText(message.body_html, 'html'))

        with smtplib.SMTP(config.smtp_host, config.smtp_port, timeout=config.timeout) as server:
            if config.use_tls:
                server.starttls()
            if config.username and config.password:
                server.login(config.username, config.password)
            server.send_message(msg, to_addrs=message.to)

        logger.info(f"Email sent successfully to {len(message.to)} recipients")

    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email: {e}")
        raise EmailError(f"Failed to send email: {e}") from e
