"""
Booking service: reserve a lesson against a package, and cancel it again.

CONCURRENCY STRATEGY: Guarded Conditional Updates
==================================================

Problem:
  Two customers try to book the last seat in a slot simultaneously.
  Both read current_enrollment=max_capacity-1, both pass the check, both
  insert. Result: an overbooked slot. The same race exists on a package's
  lessons_remaining, and on cancellation a read-then-write restore can lose
  an increment.

Solution:
  Every counter change is a single conditional UPDATE executed in the same
  transaction as the booking INSERT/DELETE:

    UPDATE time_slots SET current_enrollment = current_enrollment + 1
      WHERE id = :slot AND current_enrollment < max_capacity
    UPDATE packages SET lessons_remaining = lessons_remaining - 1
      WHERE code = :code AND lessons_remaining > 0
      RETURNING lessons_remaining

  If an UPDATE matches no row, somebody else took the seat (or the last
  lesson) first; we roll back and report the business error. The database
  CHECK constraints on both tables remain the final safety net, and the
  unique constraint on bookings catches a duplicate that slips past the
  pre-check.

  The reads that precede the write only exist to give the caller a precise
  error before anything is mutated.
"""

from datetime import timedelta
from typing import NamedTuple

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_booking.core.config import get_settings
from lesson_booking.core.errors import (
    BookingAPIError,
    BookingNotFound,
    DuplicateBooking,
    InvalidTimeSlot,
    NoLessonsRemaining,
    PackageNotFound,
    ServerError,
    SlotFull,
)
from lesson_booking.core.logging import get_logger
from lesson_booking.core.metrics import record_booking_attempt, record_cancellation
from lesson_booking.db.base import utcnow
from lesson_booking.models.booking import Booking, BOOKING_STATUS_CONFIRMED
from lesson_booking.models.package import Package, PACKAGE_STATUS_PAID, PACKAGE_STATUS_PENDING
from lesson_booking.models.time_slot import TimeSlot
from lesson_booking.schemas.booking import BookTimeSlotRequest
from lesson_booking.services.customer_service import upsert_customer
from lesson_booking.services.interfaces.notifier import Notifier
from lesson_booking.services.side_effects import run_best_effort

logger = get_logger(__name__)


class BookingOutcome(NamedTuple):
    booking: Booking
    time_slot: TimeSlot
    lessons_remaining: int


async def resolve_package(db: AsyncSession, package_code: str) -> Package:
    """
    Find a package that may be booked against.

    A paid package always qualifies. A pending single-lesson package also
    qualifies while it is younger than the grace window, because the payment
    webhook that marks it paid can lag behind the customer's redirect.
    """
    result = await db.execute(
        select(Package).where(
            Package.code == package_code,
            Package.status == PACKAGE_STATUS_PAID,
        )
        .execution_options(populate_existing=True)
    )
    package = result.scalar_one_or_none()
    if package:
        return package

    cutoff = utcnow() - timedelta(minutes=get_settings().PENDING_GRACE_MINUTES)
    result = await db.execute(
        select(Package).where(
            Package.code == package_code,
            Package.status == PACKAGE_STATUS_PENDING,
            Package.lessons_total == 1,
            Package.created_at >= cutoff,
        )
        .execution_options(populate_existing=True)
    )
    package = result.scalar_one_or_none()
    if package:
        logger.info("pending_package_accepted", package_code=package_code)
        return package

    raise PackageNotFound(details=f"Package code: {package_code} not found")


async def _check_bookable(db: AsyncSession, data: BookTimeSlotRequest) -> tuple[Package, TimeSlot]:
    package = await resolve_package(db, data.package_code)

    if package.lessons_remaining <= 0:
        raise NoLessonsRemaining()

    result = await db.execute(
        select(TimeSlot)
        .where(TimeSlot.id == data.time_slot_id)
        .execution_options(populate_existing=True)
    )
    slot = result.scalar_one_or_none()
    if not slot:
        raise InvalidTimeSlot()

    if slot.current_enrollment >= slot.max_capacity:
        raise SlotFull()

    existing = await db.execute(
        select(Booking.id).where(
            Booking.time_slot_id == data.time_slot_id,
            Booking.package_code == data.package_code,
            Booking.customer_email == data.customer_email,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise DuplicateBooking()

    return package, slot


async def _reserve(db: AsyncSession, data: BookTimeSlotRequest, slot: TimeSlot) -> tuple[Booking, int]:
    """Take the seat, spend the lesson and insert the booking in one transaction."""
    try:
        seat = await db.execute(
            update(TimeSlot)
            .where(
                TimeSlot.id == slot.id,
                TimeSlot.current_enrollment < TimeSlot.max_capacity,
            )
            .values(current_enrollment=TimeSlot.current_enrollment + 1)
        )
        if seat.rowcount == 0:
            await db.rollback()
            raise SlotFull()

        spent = await db.execute(
            update(Package)
            .where(
                Package.code == data.package_code,
                Package.lessons_remaining > 0,
            )
            .values(lessons_remaining=Package.lessons_remaining - 1)
            .returning(Package.lessons_remaining)
        )
        lessons_remaining = spent.scalar_one_or_none()
        if lessons_remaining is None:
            await db.rollback()
            raise NoLessonsRemaining()

        now = utcnow()
        booking = Booking(
            time_slot_id=slot.id,
            package_code=data.package_code,
            customer_email=data.customer_email,
            customer_name=data.customer_name,
            customer_phone=data.customer_phone,
            student_name=data.student_name,
            student_age=data.student_age,
            notes=data.notes,
            status=BOOKING_STATUS_CONFIRMED,
            booking_date=now,
            created_at=now,
            updated_at=now,
        )
        db.add(booking)
        await db.flush()
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if "unique" in str(e.orig).lower():
            raise DuplicateBooking()
        raise ServerError("Failed to create booking", details=str(e.orig))
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("booking_insert_failed", error=str(e))
        raise ServerError("Failed to create booking", details=str(e))

    return booking, lessons_remaining


async def book_time_slot(
    db: AsyncSession,
    data: BookTimeSlotRequest,
    notifier: Notifier,
) -> BookingOutcome:
    """
    Book one lesson from a package into a time slot.

    Validation and business-rule checks run before any write. After the
    booking commits, the customer upsert and the confirmation are
    best-effort: their failures are logged and do not affect the result.
    """
    try:
        _, slot = await _check_bookable(db, data)
        booking, lessons_remaining = await _reserve(db, data, slot)
    except ServerError:
        record_booking_attempt("error")
        raise
    except BookingAPIError as e:
        record_booking_attempt("rejected")
        logger.info(
            "booking_rejected",
            reason=e.code,
            package_code=data.package_code,
            time_slot_id=data.time_slot_id,
        )
        raise

    record_booking_attempt("success")
    logger.info(
        "booking_created",
        booking_id=booking.id,
        package_code=booking.package_code,
        time_slot_id=slot.id,
        lessons_remaining=lessons_remaining,
    )

    # Detach so a failed upsert's rollback cannot expire what we return.
    db.expunge(booking)
    db.expunge(slot)

    await run_best_effort(
        "customer_upsert",
        upsert_customer,
        db,
        data.customer_email,
        data.customer_name,
        data.customer_phone,
    )
    await run_best_effort("notification", notifier.send_booking_confirmation, booking, slot)

    return BookingOutcome(booking=booking, time_slot=slot, lessons_remaining=lessons_remaining)


async def cancel_booking(
    db: AsyncSession,
    booking_id: int,
    customer_email: str,
) -> Booking:
    """
    Delete a booking owned by ``customer_email`` and hand the lesson back.

    The lookup matches id and email together, so a booking that exists but
    belongs to someone else is indistinguishable from one that does not.
    The delete, the lesson restore and the seat release share a transaction.
    """
    result = await db.execute(
        select(Booking).where(
            Booking.id == booking_id,
            Booking.customer_email == customer_email,
        )
    )
    booking = result.scalar_one_or_none()

    if not booking:
        record_cancellation("not_found")
        raise BookingNotFound()

    try:
        deleted = await db.execute(
            delete(Booking)
            .where(
                Booking.id == booking_id,
                Booking.customer_email == customer_email,
            )
            .execution_options(synchronize_session=False)
        )
        if deleted.rowcount == 0:
            # Cancelled by a concurrent request between the read and the delete
            await db.rollback()
            record_cancellation("not_found")
            raise BookingNotFound()

        restored = await db.execute(
            update(Package)
            .where(
                Package.code == booking.package_code,
                Package.lessons_remaining < Package.lessons_total,
            )
            .values(lessons_remaining=Package.lessons_remaining + 1)
            .execution_options(synchronize_session=False)
        )
        if restored.rowcount == 0:
            logger.warning("lesson_restore_skipped", package_code=booking.package_code)

        await db.execute(
            update(TimeSlot)
            .where(
                TimeSlot.id == booking.time_slot_id,
                TimeSlot.current_enrollment > 0,
            )
            .values(current_enrollment=TimeSlot.current_enrollment - 1)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        record_cancellation("error")
        logger.error("booking_cancel_failed", booking_id=booking_id, error=str(e))
        raise ServerError("Failed to cancel booking", details=str(e))

    record_cancellation("success")
    logger.info(
        "booking_cancelled",
        booking_id=booking.id,
        package_code=booking.package_code,
        time_slot_id=booking.time_slot_id,
    )
    return booking
