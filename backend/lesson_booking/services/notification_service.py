"""
Email confirmations through the Resend API.

The Resend SDK is synchronous, so each send runs in the threadpool to keep
the event loop free. Two messages go out per booking: one to the customer
and, when BUSINESS_EMAIL is configured, a copy to the business inbox.
"""

from html import escape

import resend
from starlette.concurrency import run_in_threadpool

from lesson_booking.core.config import get_settings
from lesson_booking.core.logging import get_logger
from lesson_booking.models.booking import Booking
from lesson_booking.models.time_slot import TimeSlot
from lesson_booking.services.interfaces.notifier import Notifier

logger = get_logger(__name__)


def _slot_label(time_slot: TimeSlot) -> str:
    parts = []
    if time_slot.program:
        parts.append(time_slot.program)
    if time_slot.starts_at:
        parts.append(time_slot.starts_at.strftime("%A %d %B %Y, %H:%M"))
    if time_slot.location:
        parts.append(time_slot.location)
    return " - ".join(parts) or f"Time slot #{time_slot.id}"


def build_customer_email(booking: Booking, time_slot: TimeSlot) -> dict:
    label = escape(_slot_label(time_slot))
    student = escape(booking.student_name or booking.customer_name)
    html = (
        f"<p>Hi {escape(booking.customer_name)},</p>"
        f"<p>{student} is booked in for <strong>{label}</strong>.</p>"
        f"<p>Booking reference: {booking.id}<br>Package: {escape(booking.package_code)}</p>"
        "<p>Need to change plans? You can cancel from your booking page.</p>"
    )
    return {
        "to": [booking.customer_email],
        "subject": f"Booking confirmed: {_slot_label(time_slot)}",
        "html": html,
    }


def build_business_email(booking: Booking, time_slot: TimeSlot, to_email: str) -> dict:
    rows = {
        "Student": booking.student_name,
        "Age": booking.student_age,
        "Customer": booking.customer_name,
        "Email": booking.customer_email,
        "Phone": booking.customer_phone,
        "Package": booking.package_code,
        "Notes": booking.notes,
    }
    body = "".join(
        f"<li>{name}: {escape(str(value))}</li>" for name, value in rows.items() if value not in (None, "")
    )
    return {
        "to": [to_email],
        "subject": f"New booking #{booking.id}: {_slot_label(time_slot)}",
        "html": f"<p>New booking for <strong>{escape(_slot_label(time_slot))}</strong></p><ul>{body}</ul>",
    }


class ResendNotifier(Notifier):
    """
    Email notifier backed by Resend.

    Errors from the API propagate to the caller, which decides whether they
    matter (for bookings they never do).
    """

    def __init__(self, api_key: str, from_email: str, business_email: str = ""):
        if not api_key:
            raise ValueError("RESEND_API_KEY is required for the resend notifier")
        resend.api_key = api_key
        self.from_email = from_email
        self.business_email = business_email

    async def _send(self, message: dict) -> None:
        params = {"from": self.from_email, **message}
        await run_in_threadpool(resend.Emails.send, params)
        logger.info("email_sent", to=message["to"], subject=message["subject"])

    async def send_booking_confirmation(self, booking: Booking, time_slot: TimeSlot) -> None:
        await self._send(build_customer_email(booking, time_slot))
        if self.business_email:
            await self._send(build_business_email(booking, time_slot, self.business_email))


def create_resend_notifier() -> ResendNotifier:
    settings = get_settings()
    return ResendNotifier(
        api_key=settings.RESEND_API_KEY,
        from_email=settings.FROM_EMAIL,
        business_email=settings.BUSINESS_EMAIL,
    )
