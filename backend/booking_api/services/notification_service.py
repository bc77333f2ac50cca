"""
Confirmation email delivery for approved bookings.

Two backends, chosen by EMAIL_BACKEND:
  - smtp: delivered through aiosmtplib with SMTP_TIMEOUT as the hard limit
  - console: the message is logged instead of sent (local development)

Delivery never raises; callers only see True (sent) or False (failed).
"""

from email.message import EmailMessage
from typing import Awaitable, Callable

import aiosmtplib

from booking_api.core.config import get_settings
from booking_api.core.logging import get_logger
from booking_api.core.metrics import record_confirmation_email
from booking_api.models.booking import Booking
from booking_api.schemas.booking import isoformat_utc

logger = get_logger(__name__)

EmailSender = Callable[[Booking], Awaitable[bool]]


def build_confirmation_email(booking: Booking) -> EmailMessage:
    settings = get_settings()

    message = EmailMessage()
    message["From"] = settings.EMAIL_FROM
    message["To"] = booking.contact_email
    message["Subject"] = f"Booking #{booking.id} confirmed: {booking.event_title}"

    lines = [
        f"Hello {booking.contact_name},",
        "",
        "Your booking has been approved.",
        "",
        f"Event: {booking.event_title}",
        f"Start: {isoformat_utc(booking.event_start)}",
        f"End: {isoformat_utc(booking.event_end)}",
        f"Details: {booking.event_details}",
    ]
    if booking.request_note:
        lines.append(f"Your note: {booking.request_note}")
    lines += ["", f"Booking reference: {booking.id}"]

    message.set_content("\n".join(lines))
    return message


async def send_confirmation_email(booking: Booking) -> bool:
    """Send the approval confirmation to the booking contact."""
    settings = get_settings()
    message = build_confirmation_email(booking)

    if settings.EMAIL_BACKEND == "console":
        logger.info(
            "confirmation_email_logged",
            booking_id=booking.id,
            to=booking.contact_email,
            subject=message["Subject"],
            body=message.get_content(),
        )
        record_confirmation_email(True)
        return True

    try:
        await aiosmtplib.send(
            message,
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME or None,
            password=settings.SMTP_PASSWORD or None,
            use_tls=settings.SMTP_USE_TLS,
            start_tls=settings.SMTP_START_TLS,
            timeout=settings.SMTP_TIMEOUT,
        )
    except (aiosmtplib.SMTPException, OSError) as e:
        logger.error(
            "confirmation_email_failed",
            booking_id=booking.id,
            to=booking.contact_email,
            error=str(e),
        )
        record_confirmation_email(False)
        return False

    logger.info("confirmation_email_sent", booking_id=booking.id, to=booking.contact_email)
    record_confirmation_email(True)
    return True


def get_email_sender() -> EmailSender:
    """FastAPI dependency so tests can swap delivery out."""
    return send_confirmation_email
