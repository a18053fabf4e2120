from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

JSON_LIST = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "analysis",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("image_url", sa.Text, nullable=False),
        sa.Column("image_key", sa.Text, nullable=False),
        sa.Column("extracted_text", sa.Text, nullable=False, server_default=""),
        sa.Column("hidden_risks", JSON_LIST, nullable=False),
        sa.Column("money_traps", JSON_LIST, nullable=False),
        sa.Column("auto_renew_traps", JSON_LIST, nullable=False),
        sa.Column("dangerous_clauses", JSON_LIST, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_analysis_created_at", "analysis", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_analysis_created_at", table_name="analysis")
    op.drop_table("analysis")
