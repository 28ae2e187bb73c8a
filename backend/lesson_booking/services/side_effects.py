"""
Post-commit steps that must never fail the request.

Customer upserts and confirmation emails run after the booking (or package)
is committed. Their failures are logged and counted, then dropped.
"""

from typing import Any, Awaitable, Callable

from lesson_booking.core.logging import get_logger
from lesson_booking.core.metrics import record_side_effect_failure

logger = get_logger(__name__)


async def run_best_effort(step: str, func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> bool:
    """
    Await func(*args, **kwargs) and swallow any exception it raises.

    Returns True when the step completed, False when it failed.
    """
    try:
        await func(*args, **kwargs)
    except Exception as e:
        record_side_effect_failure(step)
        logger.warning(
            "side_effect_failed",
            step=step,
            error=str(e),
            error_type=type(e).__name__,
        )
        return False
    return True
