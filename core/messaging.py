# core/messaging.py
# Outbound messaging collaborators: email delivery and WhatsApp deep links.

import re
import logging
from urllib.parse import quote

from django.conf import settings
from django.core.mail import EmailMessage

logger = logging.getLogger("gigboard")

WHATSAPP_BASE_URL = "https://wa.me"


def send_email(to, subject: str, body: str, attachments=None) -> int:
    """
    Send a plain-text email.

    Args:
        to: A single address or a list of addresses
        subject: Subject line
        body: Plain-text body
        attachments: Optional list of (filename, content, mimetype) tuples

    Returns:
        Number of messages sent (0 or 1). Transport errors propagate;
        callers decide whether a failed send matters.
    """
    recipients = [to] if isinstance(to, str) else list(to)
    recipients = [r for r in recipients if r]
    if not recipients:
        return 0

    message = EmailMessage(
        subject=subject,
        body=body,
        from_email=getattr(settings, "DEFAULT_FROM_EMAIL", None),
        to=recipients,
    )
    for filename, content, mimetype in attachments or []:
        message.attach(filename, content, mimetype)

    return message.send(fail_silently=False)


def normalize_phone(phone: str) -> str:
    """Keep digits and a leading '+', drop spaces, dashes and brackets."""
    phone = (phone or "").strip()
    digits = re.sub(r"\D", "", phone)
    return f"+{digits}" if phone.startswith("+") else digits


def build_whatsapp_link(phone: str, text: str) -> str:
    """
    Build a wa.me deep link that opens a chat with the text prefilled.

    Raises:
        ValueError: If the phone number has no digits.
    """
    formatted = normalize_phone(phone)
    if not formatted.lstrip("+"):
        raise ValueError("Recipient phone number is required")
    return f"{WHATSAPP_BASE_URL}/{formatted}?text={quote(text or '', safe='')}"
