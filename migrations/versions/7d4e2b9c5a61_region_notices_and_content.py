"""region notices and region content sections

Revision ID: 7d4e2b9c5a61
Revises: 3f1a9c2e7b10
Create Date: 2026-10-18 10:41:07.532904

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7d4e2b9c5a61'
down_revision: Union[str, Sequence[str], None] = '3f1a9c2e7b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add region_notices and region_content_sections (skipped when already present)."""
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    existing_tables = set(inspector.get_table_names())

    if "region_notices" not in existing_tables:
        op.create_table(
            "region_notices",
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column("region_id", sa.String(64), nullable=False),
            sa.Column("title", sa.String(255), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("category", sa.String(32), nullable=False, server_default="general"),
            sa.Column("priority", sa.String(16), nullable=False, server_default="medium"),
            sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("published_at", sa.DateTime(), nullable=True),
            sa.Column("expires_at", sa.DateTime(), nullable=True),
            sa.Column("created_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
        op.create_index("idx_region_notices_region", "region_notices", ["region_id", "is_published"])

    if "region_content_sections" not in existing_tables:
        op.create_table(
            "region_content_sections",
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column("region_id", sa.String(64), nullable=False),
            sa.Column("section_type", sa.String(32), nullable=False),
            sa.Column("title", sa.String(255), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("is_visible", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("metadata_json", sa.Text(), nullable=True),
            sa.Column("created_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.UniqueConstraint("region_id", "section_type", name="uq_region_content_section"),
        )


def downgrade() -> None:
    op.drop_table("region_content_sections")
    op.drop_table("region_notices")
