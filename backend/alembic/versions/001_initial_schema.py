"""Initial schema: packages, time_slots, bookings, customers.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "packages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(64), nullable=False),
        sa.Column("program", sa.String(100), nullable=False),
        sa.Column("lessons_total", sa.Integer(), nullable=False),
        sa.Column("lessons_remaining", sa.Integer(), nullable=False),
        sa.Column("amount_paid", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("payment_intent_id", sa.String(255), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        *_timestamps(),
        sa.CheckConstraint("lessons_total > 0", name="check_lessons_total_positive"),
        sa.CheckConstraint("lessons_remaining >= 0", name="check_lessons_remaining_non_negative"),
        sa.CheckConstraint("lessons_remaining <= lessons_total", name="check_lessons_remaining_lte_total"),
        sa.CheckConstraint("status IN ('pending', 'paid')", name="check_package_status"),
    )
    op.create_index("ix_packages_id", "packages", ["id"])
    op.create_index("ix_packages_code", "packages", ["code"], unique=True)
    # Booking looks packages up by code and status (paid first, then pending)
    op.create_index("ix_packages_code_status", "packages", ["code", "status"])

    op.create_table(
        "time_slots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("program", sa.String(100), nullable=True),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("max_capacity", sa.Integer(), nullable=False),
        sa.Column("current_enrollment", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.CheckConstraint("max_capacity > 0", name="check_max_capacity_positive"),
        sa.CheckConstraint("current_enrollment >= 0", name="check_enrollment_non_negative"),
        # Hard capacity limit: the guarded UPDATE in the booking service should
        # never reach it, but a stray write cannot overbook a slot either.
        sa.CheckConstraint("current_enrollment <= max_capacity", name="check_enrollment_lte_capacity"),
    )
    op.create_index("ix_time_slots_id", "time_slots", ["id"])
    op.create_index("ix_time_slots_starts_at", "time_slots", ["starts_at"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("time_slot_id", sa.Integer(), sa.ForeignKey("time_slots.id"), nullable=False),
        sa.Column("package_code", sa.String(64), sa.ForeignKey("packages.code"), nullable=False),
        sa.Column("customer_email", sa.String(255), nullable=False),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("customer_phone", sa.String(50), nullable=True),
        sa.Column("student_name", sa.String(255), nullable=True),
        sa.Column("student_age", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'confirmed'")),
        sa.Column("booking_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        *_timestamps(),
        sa.UniqueConstraint("time_slot_id", "package_code", "customer_email", name="uq_slot_package_customer"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_time_slot_id", "bookings", ["time_slot_id"])
    op.create_index("ix_bookings_package_code", "bookings", ["package_code"])
    op.create_index("ix_bookings_customer_email", "bookings", ["customer_email"])

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_customers_id", "customers", ["id"])
    op.create_index("ix_customers_email", "customers", ["email"], unique=True)


def downgrade() -> None:
    op.drop_table("customers")
    op.drop_table("bookings")
    op.drop_table("time_slots")
    op.drop_table("packages")
