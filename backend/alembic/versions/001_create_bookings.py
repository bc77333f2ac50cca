"""Create bookings table.

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


def upgrade() -> None:
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("org_id", sa.String(36), nullable=False),
        # 0 = PENDING, see BookingStatus
        sa.Column("status_id", sa.SmallInteger(), nullable=False, server_default=sa.text("0")),
        sa.Column("contact_name", sa.String(255), nullable=False),
        sa.Column("contact_email", sa.String(255), nullable=False),
        sa.Column("event_title", sa.String(255), nullable=False),
        sa.Column("event_location_id", sa.String(36), nullable=False),
        sa.Column("event_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("event_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("event_details", sa.Text(), nullable=False),
        sa.Column("request_note", sa.Text(), nullable=True),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])


def downgrade() -> None:
    op.drop_index("ix_bookings_id", table_name="bookings")
    op.drop_table("bookings")
