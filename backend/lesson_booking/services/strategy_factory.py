"""
Notifier factory.
Configures which confirmation channel the booking flow uses.
"""

from typing import Optional

from lesson_booking.core.config import get_settings
from lesson_booking.core.logging import get_logger
from lesson_booking.services.interfaces.notifier import Notifier
from lesson_booking.services.interfaces.logging_notifier import LoggingNotifier
from lesson_booking.services.notification_service import create_resend_notifier

logger = get_logger(__name__)


def build_notifier() -> Notifier:
    """
    Build the configured notifier.

    NOTIFIER_BACKEND selects the channel:
    - log: LoggingNotifier (default)
    - resend: ResendNotifier; falls back to logging when no API key is set
    """
    settings = get_settings()
    backend = settings.NOTIFIER_BACKEND.strip().lower()

    if backend == "resend":
        if settings.RESEND_API_KEY:
            return create_resend_notifier()
        logger.warning("notifier_fallback", requested=backend, reason="missing RESEND_API_KEY")
    elif backend != "log":
        logger.warning("notifier_fallback", requested=backend, reason="unknown backend")
    return LoggingNotifier()


# Singleton instance
_notifier: Optional[Notifier] = None

def get_notifier() -> Notifier:
    """Get notifier singleton. Also used as a FastAPI dependency."""
    global _notifier
    if _notifier is None:
        _notifier = build_notifier()
    return _notifier
