"""
Free package issuance from promo codes.

Two entry points:
  - issue_admin_package: any lesson count, gated by the admin promo code
  - issue_promo_package: a single lesson for a public promo code

Package codes are "<PREFIX>-<epoch ms>-<5 random base36 chars>", upper-cased.
The random suffix keeps two codes minted in the same millisecond apart; the
unique index on packages.code catches the rest and we mint a new code.
"""

import secrets
import string
import time

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_booking.core.config import get_settings
from lesson_booking.core.errors import InvalidPromoCode, ServerError
from lesson_booking.core.logging import get_logger
from lesson_booking.core.metrics import record_promo_package
from lesson_booking.models.package import Package, PACKAGE_STATUS_PAID
from lesson_booking.schemas.package import AdminPackageRequest, PromoPackageRequest
from lesson_booking.services.customer_service import upsert_customer, PLACEHOLDER_CUSTOMER_NAME
from lesson_booking.services.side_effects import run_best_effort

logger = get_logger(__name__)

ADMIN_CODE_PREFIX = "ADMIN"
PROMO_CODE_PREFIX = "FREE"
CODE_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
CODE_SUFFIX_LENGTH = 5
MAX_CODE_ATTEMPTS = 3


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def generate_package_code(prefix: str) -> str:
    suffix = "".join(secrets.choice(CODE_SUFFIX_ALPHABET) for _ in range(CODE_SUFFIX_LENGTH))
    return f"{prefix}-{_epoch_ms()}-{suffix}".upper()


async def _insert_package(db: AsyncSession, prefix: str, failure_message: str, **fields) -> Package:
    """
    Insert a paid, free package under a freshly generated code.
    Retries up to MAX_CODE_ATTEMPTS on code collisions.
    """
    for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
        package = Package(
            code=generate_package_code(prefix),
            amount_paid=0,
            status=PACKAGE_STATUS_PAID,
            **fields,
        )
        db.add(package)
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.info("package_code_collision", code=package.code, attempt=attempt, error=str(e.orig))
            continue
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("package_insert_failed", error=str(e))
            raise ServerError(failure_message, details=str(e))

        db.expunge(package)
        logger.info(
            "package_created",
            code=package.code,
            program=package.program,
            lessons=package.lessons_total,
            attempt=attempt,
        )
        return package

    raise ServerError(failure_message, details="Could not generate a unique package code")


async def issue_admin_package(db: AsyncSession, data: AdminPackageRequest) -> Package:
    """Create a free multi-lesson package for staff use."""
    if data.promo_code.lower() != get_settings().ADMIN_PROMO_CODE.lower():
        logger.warning("admin_promo_rejected", customer_email=data.customer_email)
        raise InvalidPromoCode()

    package = await _insert_package(
        db,
        ADMIN_CODE_PREFIX,
        "Failed to create admin free package",
        program=data.program,
        lessons_total=data.lessons,
        lessons_remaining=data.lessons,
    )
    record_promo_package("admin")

    await run_best_effort(
        "customer_upsert",
        upsert_customer,
        db,
        data.customer_email,
        PLACEHOLDER_CUSTOMER_NAME,
        placeholder=True,
    )
    return package


async def issue_promo_package(db: AsyncSession, data: PromoPackageRequest) -> Package:
    """
    Create a free single-lesson package for a public promo code.

    Codes are only checked when PUBLIC_PROMO_CODES is configured; otherwise
    any non-empty code is accepted and recorded on the package.
    """
    allowed = get_settings().public_promo_codes
    if allowed and data.promo_code.lower() not in allowed:
        logger.warning("public_promo_rejected", promo_code=data.promo_code)
        raise InvalidPromoCode()

    package = await _insert_package(
        db,
        PROMO_CODE_PREFIX,
        "Failed to create free package",
        program=data.program,
        lessons_total=1,
        lessons_remaining=1,
        payment_intent_id=f"promo_{data.promo_code}",
    )
    record_promo_package("public")
    return package
