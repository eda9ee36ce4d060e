"""initial schema: configs, bookings, time_slots, audit_log

Revision ID: 0001
Revises:
Create Date: 2024-01-10 12:00:00
"""

from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "configs",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("key", sa.Text, nullable=False, unique=True),
        sa.Column("value", sa.Text, nullable=False),
        sa.Column("type", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("category", sa.Text, nullable=False),
        sa.Column("updated_by", sa.Integer),
        sa.Column("created_at", sa.Text, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.Text, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint(
            "type IN ('string', 'number', 'boolean', 'object', 'array')",
            name="ck_configs_type",
        ),
        sa.CheckConstraint(
            "category IN ('pricing', 'scheduling', 'booking', 'system')",
            name="ck_configs_category",
        ),
    )
    op.create_index("ix_configs_category", "configs", ["category"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("client_id", sa.Integer, nullable=False),
        sa.Column("date", sa.Text, nullable=False),
        sa.Column("start_time", sa.Text, nullable=False),
        sa.Column("end_time", sa.Text, nullable=False),
        sa.Column("status", sa.Text, nullable=False, server_default=sa.text("'pending'")),
        sa.Column("payment_status", sa.Text, nullable=False, server_default=sa.text("'pending'")),
        sa.Column("notes", sa.Text),
        sa.Column("cancel_reason", sa.Text),
        sa.Column("created_at", sa.Text, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.Text, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'completed', 'cancelled')",
            name="ck_bookings_status",
        ),
        sa.CheckConstraint(
            "payment_status IN ('pending', 'completed', 'refunded')",
            name="ck_bookings_payment_status",
        ),
    )
    op.create_index("ix_bookings_client_id", "bookings", ["client_id"])

    op.create_table(
        "time_slots",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("date", sa.Text, nullable=False),
        sa.Column("start_time", sa.Text, nullable=False),
        sa.Column("end_time", sa.Text, nullable=False),
        sa.Column("is_blocked", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("blocked_by", sa.Integer),
        sa.Column("block_reason", sa.Text),
        sa.Column("booked_by", sa.Integer),
        sa.Column("booking_id", sa.Integer, sa.ForeignKey("bookings.id", ondelete="SET NULL")),
        sa.Column("created_at", sa.Text, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.Text, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.UniqueConstraint("date", "start_time", name="uq_time_slots_date_start"),
        sa.CheckConstraint(
            "NOT (is_blocked = 1 AND booked_by IS NOT NULL)",
            name="ck_time_slots_blocked_or_booked",
        ),
    )
    op.create_index("ix_time_slots_booking_id", "time_slots", ["booking_id"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("event_type", sa.Text, nullable=False),
        sa.Column("actor_user_id", sa.Integer),
        sa.Column("target_user_id", sa.Integer),
        sa.Column("payload", sa.Text),
        sa.Column("created_at", sa.Text, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )


def downgrade():
    op.drop_table("audit_log")
    op.drop_index("ix_time_slots_booking_id", table_name="time_slots")
    op.drop_table("time_slots")
    op.drop_index("ix_bookings_client_id", table_name="bookings")
    op.drop_table("bookings")
    op.drop_index("ix_configs_category", table_name="configs")
    op.drop_table("configs")
