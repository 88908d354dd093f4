"""init
Revision ID: 0001_init
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _base_columns():
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade():
    op.create_table(
        "store_ingredient_prices",
        *_base_columns(),
        sa.Column("grocery_store_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("ingredient_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("available", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by_id", postgresql.UUID(as_uuid=True), nullable=True),
    )
    op.create_index("ix_store_ingredient_prices_organization_id", "store_ingredient_prices", ["organization_id"])
    op.create_index("ix_store_ingredient_prices_deleted_at", "store_ingredient_prices", ["deleted_at"])
    op.create_index("ix_store_ingredient_prices_grocery_store_id", "store_ingredient_prices", ["grocery_store_id"])
    op.create_index("ix_store_ingredient_prices_ingredient_id", "store_ingredient_prices", ["ingredient_id"])
    op.create_index("ix_store_ingredient_prices_price", "store_ingredient_prices", ["price"])

    op.create_table(
        "appointments",
        *_base_columns(),
        sa.Column("department_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("provider_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("patient_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="SCHEDULED"),
        sa.Column("appointment_type", sa.String(length=20), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_appointments_organization_id", "appointments", ["organization_id"])
    op.create_index("ix_appointments_deleted_at", "appointments", ["deleted_at"])
    op.create_index("ix_appointments_department_id", "appointments", ["department_id"])
    op.create_index("ix_appointments_provider_id", "appointments", ["provider_id"])
    op.create_index("ix_appointments_patient_id", "appointments", ["patient_id"])
    op.create_index("ix_appointments_status", "appointments", ["status"])
    op.create_index("ix_appointments_start_time", "appointments", ["start_time"])

    op.create_table(
        "appointment_waitlists",
        *_base_columns(),
        sa.Column("appointment_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("patient_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("department_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="ACTIVE"),
        sa.Column("join_time", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("appointment_id", "patient_id", name="uq_appointment_waitlists_appointment_patient"),
    )
    op.create_index("ix_appointment_waitlists_organization_id", "appointment_waitlists", ["organization_id"])
    op.create_index("ix_appointment_waitlists_deleted_at", "appointment_waitlists", ["deleted_at"])
    op.create_index("ix_appointment_waitlists_appointment_id", "appointment_waitlists", ["appointment_id"])
    op.create_index("ix_appointment_waitlists_patient_id", "appointment_waitlists", ["patient_id"])
    op.create_index("ix_appointment_waitlists_department_id", "appointment_waitlists", ["department_id"])
    op.create_index("ix_appointment_waitlists_status", "appointment_waitlists", ["status"])


def downgrade():
    op.drop_table("appointment_waitlists")
    op.drop_table("appointments")
    op.drop_table("store_ingredient_prices")
