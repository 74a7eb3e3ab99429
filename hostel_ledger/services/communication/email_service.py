"""
Outbound email for the ledger.

Delivery is best-effort: ledger writes commit before any email is
attempted and a delivery failure is only logged.
"""

import logging
from typing import Any, Dict, Optional, Protocol

from hostel_ledger.config.settings import Settings
from hostel_ledger.schemas.payment.payment import PaymentReceipt
from hostel_ledger.utils.email import EmailConfig, EmailMessage, TemplateRenderer, send_email

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    def send_email(self, to: str, subject: str, html: str) -> None:
        ...


class SmtpEmailSender:
    """Sends through the configured SMTP relay."""

    def __init__(self, config: EmailConfig) -> None:
        self.config = config

    def send_email(self, to: str, subject: str, html: str) -> None:
        send_email(EmailMessage(subject=subject, to=[to], body_html=html), self.config)


class LoggingEmailSender:
    """Used when no SMTP relay is configured; records the send in the log."""

    def send_email(self, to: str, subject: str, html: str) -> None:
        logger.info("Email delivery disabled, skipping message", extra={"to": to, "subject": subject})


def build_email_sender(settings: Settings) -> EmailSender:
    if settings.email_enabled:
        return SmtpEmailSender(EmailConfig.from_settings(settings))
    return LoggingEmailSender()


class NotificationService:
    """Renders ledger emails and delivers them without ever raising."""

    def __init__(self, sender: EmailSender, renderer: Optional[TemplateRenderer] = None) -> None:
        self.sender = sender
        self.renderer = renderer or TemplateRenderer()

    def send_best_effort(self, to: str, subject: str, template_name: str, variables: Dict[str, Any]) -> bool:
        try:
            html = self.renderer.render_template(template_name, variables)
            self.sender.send_email(to, subject, html)
            return True
        except Exception as e:
            logger.warning(
                f"Email delivery failed: {e}",
                extra={"to": to, "subject": subject, "template": template_name},
                exc_info=True,
            )
            return False

    def send_payment_receipt(self, to: str, name: str, receipt: PaymentReceipt) -> bool:
        return self.send_best_effort(
            to,
            "Payment Receipt",
            "payment_receipt.html",
            {"name": name, "receipt": receipt, "payment": receipt.payment},
        )

    def send_payment_completed(self, to: str, name: str, receipt: PaymentReceipt) -> bool:
        return self.send_best_effort(
            to,
            "Payment Completed",
            "payment_completed.html",
            {"name": name, "receipt": receipt},
        )

    def send_welcome(self, to: str, name: str, hostel_name: str, room_number: Optional[str]) -> bool:
        return self.send_best_effort(
            to,
            f"Welcome to {hostel_name}",
            "welcome.html",
            {"name": name, "hostel_name": hostel_name, "room_number": room_number},
        )

    def send_notice(self, to: str, name: str, subject: str, message: str) -> bool:
        return self.send_best_effort(
            to,
            subject,
            "notice.html",
            {"name": name, "subject": subject, "message": message},
        )
