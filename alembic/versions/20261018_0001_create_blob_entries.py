"""create blob_entries table

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 10:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "blob_entries",
        sa.Column("key", sa.String(length=255), nullable=False, comment="Fixed store key, e.g. adprofit_snapshots_v3"),
        sa.Column("value", sa.Text(), nullable=False, comment="Opaque serialized payload"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("key", name=op.f("pk_blob_entries")),
    )


def downgrade() -> None:
    op.drop_table("blob_entries")
