"""Initial schema: energy_readings, query_history.

Revision ID: 0001
Revises:
Create Date: 2025-01-01 00:00:00
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── 1. energy_readings (one row per hourly timestamp) ─────────────────────
    op.create_table(
        "energy_readings",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("reading_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("quantity_kwh", sa.Numeric(12, 4), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.UniqueConstraint("reading_time", name="uq_energy_readings_reading_time"),
    )

    # ── 2. query_history (append-only, read newest first) ─────────────────────
    op.create_table(
        "query_history",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("aggregation_type", sa.Text, nullable=False),
        sa.Column("date_from", sa.DateTime(timezone=True), nullable=True),
        sa.Column("date_to", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_query_history_created_at "
        "ON query_history (created_at DESC)"
    )


def downgrade() -> None:
    op.drop_index("idx_query_history_created_at", table_name="query_history")
    op.drop_table("query_history")
    op.drop_table("energy_readings")
