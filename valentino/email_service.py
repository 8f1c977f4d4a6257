"""
Email Service using Resend
Appointment notifications and newsletter delivery, rendered from MJML templates.
A mock sender stands in when Resend is not configured.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import resend
from mjml import mjml_to_html

from . import config
from .email_templates import (
    client_confirmation_template,
    newsletter_template,
    owner_notification_template,
)
from .errors import DeliveryError

logger = logging.getLogger(__name__)


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a dict-like object with 'html' and 'errors' keys
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        return str(getattr(result, "html", result))
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise DeliveryError(f"Failed to compile MJML template: {str(e)}") from e


class EmailSender(ABC):
    """Email capability consumed by the appointment and newsletter services"""

    enabled = True

    @abstractmethod
    async def send_client_confirmation(self, appointment) -> dict:
        """Confirm a booking to the customer. Raises DeliveryError."""

    @abstractmethod
    async def send_owner_notification(self, appointment) -> dict:
        """Tell the business owner about a new booking. Raises DeliveryError."""

    @abstractmethod
    async def send_bulk(self, to: str, subject: str, html_content: str) -> bool:
        """Deliver one newsletter copy. Returns False on failure instead of raising."""

    def render_newsletter(self, subject: str, content_html: str, unsubscribe_url: str) -> str:
        """Render the newsletter body with its unsubscribe footer"""
        return compile_mjml_to_html(newsletter_template(subject, content_html, unsubscribe_url))


class ResendEmailSender(EmailSender):
    def __init__(
        self,
        api_key: str,
        from_address: str,
        owner_email: Optional[str] = None,
    ):
        resend.api_key = api_key
        self.from_address = from_address
        self.owner_email = owner_email

    async def send_email(self, to: str, subject: str, mjml_content: str) -> dict:
        """
        Send an email through Resend

        Args:
            to: Recipient email
            subject: Email subject line
            mjml_content: MJML template content (will be compiled to HTML)

        Returns:
            Resend response dict
        """
        html_content = compile_mjml_to_html(mjml_content)
        return self._send_html(to, subject, html_content)

    def _send_html(self, to: str, subject: str, html_content: str) -> dict:
        try:
            logger.info(f"📧 Sending email via Resend to: {to}")
            response = resend.Emails.send(
                {
                    "from": self.from_address,
                    "to": [to],
                    "subject": subject,
                    "html": html_content,
                }
            )
            logger.info(f"✅ Email sent successfully via Resend: {response}")
            return response
        except Exception as e:
            logger.error(f"❌ Email send error to {to}: {e}")
            raise DeliveryError(f"Failed to send email: {str(e)}") from e

    async def send_client_confirmation(self, appointment) -> dict:
        return await self.send_email(
            to=appointment.email,
            subject=f"Appointment Confirmation - {config.BUSINESS_NAME}",
            mjml_content=client_confirmation_template(appointment),
        )

    async def send_owner_notification(self, appointment) -> dict:
        if not self.owner_email:
            raise DeliveryError("OWNER_EMAIL is not configured")
        return await self.send_email(
            to=self.owner_email,
            subject=f"New Appointment Request - {config.BUSINESS_NAME}",
            mjml_content=owner_notification_template(appointment),
        )

    async def send_bulk(self, to: str, subject: str, html_content: str) -> bool:
        try:
            self._send_html(to, subject, html_content)
            return True
        except DeliveryError:
            return False


class MockEmailSender(EmailSender):
    """Logs what would have been sent and reports success"""

    enabled = False

    async def send_client_confirmation(self, appointment) -> dict:
        logger.info(f"[MOCK] Would send appointment confirmation to {appointment.email}")
        return {"id": "mock-client-confirmation", "mock": True}

    async def send_owner_notification(self, appointment) -> dict:
        logger.info(f"[MOCK] Would notify owner about appointment {appointment.id}")
        return {"id": "mock-owner-notification", "mock": True}

    async def send_bulk(self, to: str, subject: str, html_content: str) -> bool:
        logger.debug(f"[MOCK] Would send newsletter '{subject}' to {to}")
        return True

    def render_newsletter(self, subject: str, content_html: str, unsubscribe_url: str) -> str:
        # Nothing is delivered, so skip MJML compilation
        return f'{content_html}<hr><a href="{unsubscribe_url}">Unsubscribe</a>'


def create_email_sender() -> EmailSender:
    """Select the email implementation from configuration"""
    if config.RESEND_API_KEY:
        logger.info("Email delivery enabled (Resend)")
        return ResendEmailSender(
            api_key=config.RESEND_API_KEY,
            from_address=config.EMAIL_FROM_ADDRESS,
            owner_email=config.OWNER_EMAIL,
        )
    logger.warning("RESEND_API_KEY not set; emails will be logged, not sent")
    return MockEmailSender()
