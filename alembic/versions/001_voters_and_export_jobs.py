"""Create part_numbers, voters and export_jobs tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB

# JSONB on PostgreSQL, plain JSON elsewhere
_JSON = sa.JSON().with_variant(JSONB(), "postgresql")

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # Polling parts and their wards
    op.create_table(
        "part_numbers",
        sa.Column("part_no", sa.String(10), primary_key=True),
        sa.Column("ward_no", sa.String(10), nullable=True),
        sa.Column("booth_name", sa.String(255), nullable=True),
        sa.Column("booth_address", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_part_numbers_ward_no", "part_numbers", ["ward_no"])

    # Electoral roll
    op.create_table(
        "voters",
        sa.Column("epic_number", sa.String(20), primary_key=True),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("relation_type", sa.String(50), nullable=True),
        sa.Column("relation_name", sa.String(255), nullable=True),
        sa.Column("family_grouping", sa.String(100), nullable=True),
        sa.Column("ac_no", sa.String(10), nullable=True),
        sa.Column("part_no", sa.String(10), sa.ForeignKey("part_numbers.part_no"), nullable=True),
        sa.Column("sr_no", sa.String(10), nullable=True),
        sa.Column("age", sa.Integer, nullable=True),
        sa.Column("gender", sa.String(10), nullable=True),
        sa.Column("religion", sa.String(50), nullable=True),
        sa.Column("mobile_no_primary", sa.String(15), nullable=True),
        sa.Column("mobile_no_secondary", sa.String(15), nullable=True),
        sa.Column("house_number", sa.String(127), nullable=True),
        sa.Column("address", sa.Text, nullable=True),
        sa.Column("pincode", sa.String(10), nullable=True),
        sa.Column("is_voted_2024", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_voters_full_name", "voters", ["full_name"])
    op.create_index("ix_voters_ac_no", "voters", ["ac_no"])
    op.create_index("ix_voters_part_no", "voters", ["part_no"])
    op.create_index("ix_voters_age", "voters", ["age"])
    op.create_index("ix_voters_gender", "voters", ["gender"])

    # Export jobs
    op.create_table(
        "export_jobs",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("format", sa.String(10), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("progress_percent", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_records", sa.Integer, nullable=True),
        sa.Column("processed_records", sa.Integer, nullable=True),
        sa.Column("filters", _JSON, nullable=False, server_default="{}"),
        sa.Column("selected_columns", _JSON, nullable=False, server_default="[]"),
        sa.Column("artifact_location", sa.String(500), nullable=True),
        sa.Column("artifact_name", sa.String(255), nullable=True),
        sa.Column("artifact_size_kb", sa.Integer, nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_export_jobs_status", "export_jobs", ["status"])
    op.create_index("ix_export_jobs_created_at", "export_jobs", ["created_at"])


def downgrade() -> None:
    op.drop_table("export_jobs")
    op.drop_table("voters")
    op.drop_table("part_numbers")
