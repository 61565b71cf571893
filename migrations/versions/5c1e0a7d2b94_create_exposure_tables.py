"""create exposure tables

Revision ID: 5c1e0a7d2b94
Revises:
Create Date: 2026-10-19 09:12:41.518302

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e0a7d2b94"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the exposures and exposure_export_files tables."""
    op.create_table(
        "exposures",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("key_data", sa.Text(), nullable=False),
        sa.Column("rolling_period", sa.Integer(), server_default="144", nullable=False),
        sa.Column("rolling_start_number", sa.Integer(), nullable=False),
        sa.Column("transmission_risk_level", sa.SmallInteger(), nullable=False),
        sa.Column("regions", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_exposures_created_at", "exposures", ["created_at"])

    op.create_table(
        "exposure_export_files",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("path", sa.Text(), nullable=False),
        sa.Column("exposure_count", sa.Integer(), nullable=False),
        sa.Column("since_exposure_id", sa.BigInteger(), nullable=False),
        sa.Column("last_exposure_id", sa.BigInteger(), nullable=False),
        sa.Column("first_exposure_created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("region", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "since_exposure_id",
            "last_exposure_id",
            "region",
            name="uq_exposure_export_files_range_region",
        ),
    )
    op.create_index(
        "ix_exposure_export_files_last_exposure_id",
        "exposure_export_files",
        ["last_exposure_id"],
    )


def downgrade() -> None:
    """Drop the export tables."""
    op.drop_index(
        "ix_exposure_export_files_last_exposure_id", table_name="exposure_export_files"
    )
    op.drop_table("exposure_export_files")
    op.drop_index("ix_exposures_created_at", table_name="exposures")
    op.drop_table("exposures")
