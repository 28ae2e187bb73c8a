"""
Customer contact upserts keyed by email.

Uses INSERT ... ON CONFLICT (email) DO UPDATE so concurrent bookings from the
same customer never race on a read-then-insert.
"""

from typing import Optional

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_booking.core.logging import get_logger
from lesson_booking.db.base import utcnow
from lesson_booking.db.session_utils import get_dialect_name
from lesson_booking.models.customer import Customer

logger = get_logger(__name__)

PLACEHOLDER_CUSTOMER_NAME = "Admin Package Customer"


async def upsert_customer(
    db: AsyncSession,
    email: str,
    name: str,
    phone: Optional[str] = None,
    placeholder: bool = False,
) -> None:
    """
    Create or refresh the customer row for ``email`` and commit.

    A placeholder upsert creates the row if it is missing but leaves an
    existing customer's name and phone untouched. A missing ``phone`` never
    clears a stored one.
    """
    insert = sqlite_insert if get_dialect_name(db) == "sqlite" else pg_insert
    now = utcnow()

    values = {"email": email, "name": name, "updated_at": now}
    if phone:
        values["phone"] = phone

    stmt = insert(Customer).values(**values)
    update_set = {"updated_at": stmt.excluded.updated_at}
    if not placeholder:
        update_set["name"] = stmt.excluded.name
        if phone:
            update_set["phone"] = stmt.excluded.phone

    stmt = stmt.on_conflict_do_update(index_elements=["email"], set_=update_set)

    try:
        await db.execute(stmt)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("customer_upserted", email=email, placeholder=placeholder)
