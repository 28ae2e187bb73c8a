"""
Notifier interface for booking confirmations.
Allows swapping the delivery channel without touching the booking flow.
"""

from abc import ABC, abstractmethod

from lesson_booking.models.booking import Booking
from lesson_booking.models.time_slot import TimeSlot


class Notifier(ABC):
    """
    Interface for booking confirmation delivery.

    Implementations:
    - LoggingNotifier: writes the confirmation to the log only
    - ResendNotifier: emails the customer (and the business) via Resend

    Callers treat delivery as best-effort: an exception raised here is
    logged by the caller and never fails the booking.
    """

    @abstractmethod
    async def send_booking_confirmation(self, booking: Booking, time_slot: TimeSlot) -> None:
        """
        Deliver a confirmation for a committed booking.

        Args:
            booking: The booking that was just created
            time_slot: The slot it was booked into
        """
        pass
