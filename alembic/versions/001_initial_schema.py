"""Initial schema: figma_files and figma_nodes tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "figma_files",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("file_key", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("thumbnail_url", sa.String(1024), nullable=True),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False),
        sa.Column("modified", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_figma_files_file_key", "figma_files", ["file_key"], unique=True)
    op.create_table(
        "figma_nodes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "figma_file_id",
            sa.Integer,
            sa.ForeignKey("figma_files.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("node_id", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("raw_data", sa.JSON, nullable=False),
        sa.UniqueConstraint("figma_file_id", "node_id", name="uq_figma_nodes_file_node"),
    )
    op.create_index("ix_figma_nodes_figma_file_id", "figma_nodes", ["figma_file_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_figma_nodes_figma_file_id", table_name="figma_nodes")
    op.drop_table("figma_nodes")
    op.drop_index("ix_figma_files_file_key", table_name="figma_files")
    op.drop_table("figma_files")
