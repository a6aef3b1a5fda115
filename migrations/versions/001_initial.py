"""Create trips, alerts, escalation_metrics and sos_logs tables.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create enum types using raw SQL to avoid checkfirst issues with asyncpg
    op.execute(sa.text(
        "DO $$ BEGIN "
        "CREATE TYPE tripstatus AS ENUM "
        "('pending', 'confirmed', 'cancelled', 'escalated'); "
        "EXCEPTION WHEN duplicate_object THEN NULL; "
        "END $$"
    ))
    op.execute(sa.text(
        "DO $$ BEGIN "
        "CREATE TYPE sosstatus AS ENUM ('sent', 'failed'); "
        "EXCEPTION WHEN duplicate_object THEN NULL; "
        "END $$"
    ))

    op.create_table(
        "trips",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("owner_uid", sa.String(128), nullable=False),
        sa.Column(
            "status",
            postgresql.ENUM(name="tripstatus", create_type=False),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("eta", sa.DateTime(timezone=True), nullable=False),
        sa.Column("snooze_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "contacts",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint("snooze_count >= 0", name="ck_trips_snooze_count_non_negative"),
    )
    op.create_index("ix_trips_owner_uid", "trips", ["owner_uid"])
    # Housekeeping purges old terminal trips by start time and status
    op.create_index("ix_trips_status_start_time", "trips", ["status", "start_time"])

    op.create_table(
        "alerts",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "trip_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("trips.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("contact_name", sa.String(100), nullable=False),
        sa.Column(
            "acknowledged",
            sa.Boolean(),
            nullable=False,
            server_default="false",
        ),
        sa.Column("acknowledged_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_alerts_trip_id", "alerts", ["trip_id"])

    op.create_table(
        "escalation_metrics",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("trip_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "escalated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("eta_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("snooze_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("contact_count", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_escalation_metrics_trip_id", "escalation_metrics", ["trip_id"])

    op.create_table(
        "sos_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("requester_uid", sa.String(128), nullable=True),
        sa.Column("to_phone", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("message_sid", sa.String(64), nullable=True),
        sa.Column(
            "status",
            postgresql.ENUM(name="sosstatus", create_type=False),
            nullable=False,
        ),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index(
        "ix_sos_logs_requester_timestamp",
        "sos_logs",
        ["requester_uid", "timestamp"],
    )


def downgrade() -> None:
    op.drop_index("ix_sos_logs_requester_timestamp")
    op.drop_table("sos_logs")
    op.drop_index("ix_escalation_metrics_trip_id")
    op.drop_table("escalation_metrics")
    op.drop_index("ix_alerts_trip_id")
    op.drop_table("alerts")
    op.drop_index("ix_trips_status_start_time")
    op.drop_index("ix_trips_owner_uid")
    op.drop_table("trips")

    op.execute("DROP TYPE IF EXISTS sosstatus")
    op.execute("DROP TYPE IF EXISTS tripstatus")
