"""
MJML Email Templates
Appointment and newsletter emails, plus the plain HTML unsubscribe pages
"""

from typing import Optional

from .config import BUSINESS_NAME
from .utils.sanitization import sanitize_attributes, sanitize_string

# Forest green color scheme
THEME = {
    "primary": "#2d5016",
    "primary_light": "#e8f0e0",
    "background": "#f5f5f5",
    "card_bg": "#ffffff",
    "text_primary": "#1f2937",
    "text_secondary": "#374151",
    "text_muted": "#6b7280",
    "border": "#dddddd",
    "success": "#10b981",
}

APPOINTMENT_FIELDS = [
    "name",
    "email",
    "phone",
    "service_type",
    "date",
    "time",
    "address",
    "message",
]


def get_base_template(title: str, preview_text: str, content_sections: str) -> str:
    """Base MJML template wrapper for all emails"""
    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}" width="600px">
        <mj-section background-color="{THEME['card_bg']}" padding="24px 20px">
          <mj-column>
            {content_sections}
          </mj-column>
        </mj-section>
        <mj-section padding="12px 0">
          <mj-column>
            <mj-text align="center" font-size="12px" color="{THEME['text_muted']}">
              {BUSINESS_NAME}
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _details_block(rows: list[tuple[str, Optional[str]]]) -> str:
    lines = "".join(
        f"<p><strong>{label}:</strong> {value}</p>" for label, value in rows if value
    )
    return f"""
    <mj-text background-color="{THEME['background']}" padding="20px" css-class="details">
      {lines}
    </mj-text>
    """


def client_confirmation_template(appointment) -> str:
    """Confirmation sent to the customer who booked"""
    a = sanitize_attributes(appointment, APPOINTMENT_FIELDS)
    content = f"""
    <mj-text font-size="22px" font-weight="600" color="{THEME['primary']}">
      Thank you for your appointment request!
    </mj-text>
    <mj-text>
      Dear {a['name']},<br/>
      We have received your appointment request for tree services. Here are the details:
    </mj-text>
    {_details_block([
        ("Service Type", a["service_type"]),
        ("Date", a["date"]),
        ("Time", a["time"]),
        ("Address", a["address"]),
        ("Message", a["message"]),
    ])}
    <mj-text>
      We will review your request and confirm the appointment shortly. You will receive
      another email once your appointment is confirmed.
    </mj-text>
    <mj-text>Best regards,<br/>{BUSINESS_NAME} Team</mj-text>
    """
    return get_base_template(
        title="Appointment Confirmation",
        preview_text="We received your appointment request",
        content_sections=content,
    )


def owner_notification_template(appointment) -> str:
    """Notification sent to the business owner"""
    a = sanitize_attributes(appointment, APPOINTMENT_FIELDS)
    content = f"""
    <mj-text font-size="22px" font-weight="600" color="{THEME['primary']}">
      New Appointment Request
    </mj-text>
    <mj-text>You have received a new appointment request:</mj-text>
    {_details_block([
        ("Name", a["name"]),
        ("Email", a["email"]),
        ("Phone", a["phone"]),
        ("Service Type", a["service_type"]),
        ("Date", a["date"]),
        ("Time", a["time"]),
        ("Address", a["address"]),
        ("Message", a["message"]),
    ])}
    <mj-text>Please log into the admin dashboard to confirm or manage this appointment.</mj-text>
    """
    return get_base_template(
        title="New Appointment Request",
        preview_text=f"New request from {a['name']}",
        content_sections=content,
    )


def newsletter_template(subject: str, content_html: str, unsubscribe_url: str) -> str:
    """
    Newsletter wrapper. ``content_html`` is admin-authored HTML and is embedded as-is;
    the unsubscribe footer is appended to every message.
    """
    content = f"""
    <mj-text>{content_html}</mj-text>
    <mj-divider border-width="1px" border-color="{THEME['border']}" padding="20px 0" />
    <mj-text font-size="12px" color="{THEME['text_muted']}">
      <a href="{sanitize_string(unsubscribe_url)}">Unsubscribe from this newsletter</a>
    </mj-text>
    """
    return get_base_template(
        title=sanitize_string(subject),
        preview_text=sanitize_string(subject),
        content_sections=content,
    )


def unsubscribe_page(heading: str, message: str, success: bool = False) -> str:
    """Small standalone HTML page returned by the unsubscribe link"""
    heading_style = f' style="color: {THEME["success"]};"' if success else ""
    footer = (
        f'<p style="color: {THEME["text_muted"]}; font-size: 0.875rem;">'
        "You can resubscribe at any time.</p>"
        if success
        else ""
    )
    return f"""
    <html>
      <body style="font-family: Arial, sans-serif; padding: 2rem; text-align: center;">
        <h2{heading_style}>{heading}</h2>
        <p>{message}</p>
        {footer}
      </body>
    </html>
    """
