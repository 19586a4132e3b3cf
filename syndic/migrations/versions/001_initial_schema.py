"""Initial schema: apartments, residents and the payment ledger.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
    ]


def upgrade() -> None:
    # Create apartments table
    op.create_table(
        "apartments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("number_of_residents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("actual_balance", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("opening_balance", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("join_code", sa.String(length=16), nullable=False),
        sa.Column("syndic_id", sa.String(length=128), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("join_code"),
        sa.Index("idx_apartment_join_code", "join_code", unique=True),
    )

    # Create residents table
    op.create_table(
        "residents",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("apartment_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("monthly_fee", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("remaining_amount", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("is_syndic", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("is_linked_with_user", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("linked_user_id", sa.String(length=128), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["apartment_id"], ["apartments.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("monthly_fee >= 0", name="ck_resident_monthly_fee_non_negative"),
        sa.CheckConstraint("remaining_amount >= 0", name="ck_resident_remaining_non_negative"),
        sa.Index("ix_residents_apartment_id", "apartment_id"),
        sa.Index("idx_resident_apartment_name", "apartment_id", "name"),
    )

    # Create payment_ledgers table (one per apartment)
    op.create_table(
        "payment_ledgers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("apartment_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["apartment_id"], ["apartments.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("apartment_id"),
    )

    # Create bills table
    op.create_table(
        "bills",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("ledger_id", sa.Integer(), nullable=False),
        sa.Column("apartment_id", sa.Integer(), nullable=False),
        sa.Column("owner_of_bill", sa.Integer(), nullable=False),
        sa.Column("responsible", sa.String(length=128), nullable=False),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="unpaid"),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("period", sa.String(length=7), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["ledger_id"], ["payment_ledgers.id"]),
        sa.ForeignKeyConstraint(["apartment_id"], ["apartments.id"]),
        sa.ForeignKeyConstraint(["owner_of_bill"], ["residents.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("ledger_id", "owner_of_bill", "period", name="uq_bill_owner_period"),
        sa.Index("ix_bills_ledger_id", "ledger_id"),
        sa.Index("ix_bills_apartment_id", "apartment_id"),
        sa.Index("ix_bills_owner_of_bill", "owner_of_bill"),
        sa.Index("ix_bills_status", "status"),
        sa.Index("idx_bill_apartment_period", "apartment_id", "period"),
    )

    # Create bill_operations table (append-only log)
    op.create_table(
        "bill_operations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("bill_id", sa.Integer(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("operation", sa.String(length=30), nullable=False),
        sa.Column("operation_date", sa.Date(), nullable=False),
        sa.Column("actor_id", sa.String(length=128), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["bill_id"], ["bills.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("bill_id", "sequence", name="uq_bill_operation_sequence"),
        sa.Index("ix_bill_operations_bill_id", "bill_id"),
    )

    # Create remaining_payments table
    op.create_table(
        "remaining_payments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("ledger_id", sa.Integer(), nullable=False),
        sa.Column("apartment_id", sa.Integer(), nullable=False),
        sa.Column("resident_id", sa.Integer(), nullable=False),
        sa.Column("resident_name", sa.String(length=255), nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="pending"),
        sa.Column("created_by", sa.String(length=128), nullable=False),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["ledger_id"], ["payment_ledgers.id"]),
        sa.ForeignKeyConstraint(["apartment_id"], ["apartments.id"]),
        sa.ForeignKeyConstraint(["resident_id"], ["residents.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_remaining_payments_ledger_id", "ledger_id"),
        sa.Index("ix_remaining_payments_apartment_id", "apartment_id"),
        sa.Index("ix_remaining_payments_resident_id", "resident_id"),
        sa.Index("ix_remaining_payments_status", "status"),
        sa.Index("idx_remaining_payment_apartment_resident", "apartment_id", "resident_id"),
    )

    # Create audit_logs table
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("actor_id", sa.String(length=128), nullable=True),
        sa.Column("changes", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("remaining_payments")
    op.drop_table("bill_operations")
    op.drop_table("bills")
    op.drop_table("payment_ledgers")
    op.drop_table("residents")
    op.drop_table("apartments")
