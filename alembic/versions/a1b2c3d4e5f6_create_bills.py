"""create bills table

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


revision = "a1b2c3d4e5f6"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "bills",
        sa.Column("bill_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("appointment_id", sa.Integer(), nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("doctor_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("tax_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="OPEN"),
        sa.Column("bill_type", sa.String(50), nullable=False, server_default="CONSULTATION"),
        sa.Column("refund_policy", sa.String(50), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("bill_id"),
        sa.UniqueConstraint("appointment_id", name="uq_bills_appointment_id"),
    )
    op.create_index(op.f("ix_bills_appointment_id"), "bills", ["appointment_id"], unique=False)
    op.create_index(op.f("ix_bills_patient_id"), "bills", ["patient_id"], unique=False)
    op.create_index(op.f("ix_bills_status"), "bills", ["status"], unique=False)
    op.create_index(op.f("ix_bills_created_at"), "bills", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_bills_created_at"), table_name="bills")
    op.drop_index(op.f("ix_bills_status"), table_name="bills")
    op.drop_index(op.f("ix_bills_patient_id"), table_name="bills")
    op.drop_index(op.f("ix_bills_appointment_id"), table_name="bills")
    op.drop_table("bills")
